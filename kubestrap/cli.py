"""
cli.py
======

misc functions to interact with the cluster, usually called from
``kubestrap.kubestrap.Kubestrap``.

Don't use directly
"""
import asyncio
import os

from huepy import que, bold  # pylint: disable=no-name-in-module

from kubestrap.cloud.vagrant import VagrantMachine
from kubestrap.deploy.k8s import K8S
from .util.logger import Logger

LOGGER = Logger(__name__)

ADMIN_CONF = "/etc/kubernetes/admin.conf"


def confirm(force):
    """Asks the user for confirmation."""
    if not force:
        ans = input(que(bold("Are you sure? [y/N]: ")))
    else:
        ans = 'y'

    return ans.lower()


def write_kubeconfig(cluster_name, kubeconfig, workdir="."):
    """Write a kubeconfig file to the filesystem"""

    path = os.path.join(workdir, '-'.join((cluster_name, 'admin.conf')))
    with open(path, "w") as fh:
        fh.write(kubeconfig)
    os.chmod(path, 0o600)

    LOGGER.success("You can use your config with:")
    LOGGER.success("kubectl get nodes --kubeconfig=%s" % path)
    return path


def summary_lines(topology):
    """
    The instructions shown after the cluster was brought up
    """
    master = topology.master.identifier
    lines = ["============================================",
             "Kubernetes Cluster Setup Complete!",
             "============================================",
             "",
             "To access the cluster from your host:",
             "1. Add these entries to your /etc/hosts "
             "(or C:\\Windows\\System32\\drivers\\etc\\hosts):",
             ""]
    lines += topology.hosts_entries()
    lines += ["",
              "2. Access the master node:",
              f"   vagrant ssh {master}",
              "",
              "3. Verify cluster status:",
              "   kubectl get nodes",
              "   kubectl get pods --all-namespaces",
              "",
              "Forwarded ports (guest -> host):"]
    for machine in topology:
        ports = ", ".join(f"{guest} -> {host}" for guest, host
                          in topology.forwarded_ports(machine))
        lines.append(f"   {machine.identifier}: {ports}")

    return lines


def print_summary(topology):
    """Print the access instructions for the cluster, at any log level"""
    for line in summary_lines(topology):
        print(line)


def cluster_status(config, topology, workdir="."):
    """
    Fetch the admin kubeconfig from the master and list the nodes.

    Returns:
        list of (name, ready) tuples
    """
    master = VagrantMachine(topology.master, workdir)
    kubeconfig = asyncio.run(master.read_file(ADMIN_CONF))
    path = write_kubeconfig(config['cluster-name'], kubeconfig, workdir)

    k8s = K8S(path)
    if not k8s.is_ready:
        raise RuntimeError(f"the API server at {k8s.host} is not reachable")

    return k8s.nodes()


def destroy_cluster(topology, workdir="."):
    """Destroy all machines, workers first"""
    machines = [VagrantMachine(machine, workdir)
                for machine in reversed(list(topology))]

    async def _destroy():
        for machine in machines:
            await machine.destroy()

    asyncio.run(_destroy())
