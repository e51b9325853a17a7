"""
This module renders the shell scripts which provision the machines.
The scripts target CentOS 7 and are executed as root.
"""
import shlex
import textwrap

from kubestrap import __version__

KUBERNETES_REPO = """
[kubernetes]
name=Kubernetes
baseurl=https://packages.cloud.google.com/yum/repos/kubernetes-el7-x86_64
enabled=1
gpgcheck=1
repo_gpgcheck=1
gpgkey=https://packages.cloud.google.com/yum/doc/yum-key.gpg https://packages.cloud.google.com/yum/doc/rpm-package-key.gpg
"""

KUBERNETES_SYSCTL = """
net.bridge.bridge-nf-call-iptables = 1
net.ipv4.ip_forward = 1
"""

JOIN_COMMAND_SCRIPT = "kubeadm token create --print-join-command\n"


class BaseInit:
    """
    A bash script assembled from named steps.

    Attributes:
        steps      list of (description, commands) tuples, in the order
                   they are executed
    """
    def __init__(self):
        self.steps = []

    def add_step(self, description, commands):
        """
        add a step to the script.

        description: a short text, rendered as a comment
        commands: the shell commands of the step, a string
        """
        self.steps.append((description, textwrap.dedent(commands).strip()))

    def write_file(self, path, content, append=False):
        """
        add a step writing content to path with a quoted heredoc
        """
        operator = ">>" if append else ">"
        content = textwrap.dedent(content).strip("\n")
        self.add_step("write %s" % path,
                      "cat %s %s << 'EOF'\n%s\nEOF" % (operator, path, content))

    def __str__(self):
        parts = ["#!/bin/bash",
                 "# generated by kubestrap %s" % __version__,
                 "set -e"]
        for description, commands in self.steps:
            parts.append("")
            parts.append("# %s" % description)
            parts.append(commands)

        return "\n".join(parts) + "\n"


class MachineInit(BaseInit):
    """
    The steps every machine runs: name resolution for the cluster, disabling
    SELinux and swap, docker and the kubernetes packages.

    Args:
        topology (:class:`kubestrap.topology.Topology`)
        user (str): the login user which is added to the docker group
    """
    def __init__(self, topology, user="vagrant"):
        super().__init__()
        self.topology = topology
        self.user = user

        self._add_hosts()
        self.add_step("disable SELinux", """
            setenforce 0 || true
            sed -i 's/^SELINUX=enforcing$/SELINUX=disabled/' /etc/selinux/config
            """)
        self.add_step("disable swap", """
            swapoff -a
            sed -i '/ swap / s/^/#/' /etc/fstab
            """)
        self.add_step("install docker", """
            yum update -y
            yum install -y docker
            systemctl start docker
            systemctl enable docker
            usermod -aG docker %s
            """ % shlex.quote(self.user))
        self.write_file("/etc/yum.repos.d/kubernetes.repo", KUBERNETES_REPO)
        self.add_step("install kubernetes components", """
            yum install -y kubelet kubeadm kubectl
            systemctl enable kubelet
            """)
        self._add_sysctl()

    def _add_hosts(self):
        """
        append the cluster machines to /etc/hosts, skipping lines which are
        already present so the step can run twice
        """
        lines = ["grep -qxF %s /etc/hosts || echo %s >> /etc/hosts" % (
            shlex.quote(entry), shlex.quote(entry))
                 for entry in self.topology.hosts_entries()]
        self.add_step("add the cluster machines to /etc/hosts",
                      "\n".join(lines))

    def _add_sysctl(self):
        self.add_step("load the bridge netfilter module", "modprobe br_netfilter")
        self.write_file("/etc/sysctl.d/k8s.conf", KUBERNETES_SYSCTL)
        self.add_step("apply the network settings", "sysctl --system")


class MasterInit(BaseInit):
    """
    Initialize the cluster on the master.

    Args:
        machine (:class:`kubestrap.topology.Machine`): the master
        pod_subnet (str): the pod network range handed to kubeadm
        pod_network_manifest (str): URL of the network overlay manifest
        user (str): the user who gets the admin kubeconfig
    """
    def __init__(self, machine, pod_subnet, pod_network_manifest,
                 user="vagrant"):
        super().__init__()
        self.machine = machine
        self.pod_subnet = pod_subnet
        self.pod_network_manifest = pod_network_manifest
        self.user = user

        self.add_step("initialize the kubernetes master", """
            kubeadm init --apiserver-advertise-address=%s --pod-network-cidr=%s
            """ % (shlex.quote(machine.address), shlex.quote(pod_subnet)))
        self.add_step("copy the kubeconfig for %s" % user, """
            mkdir -p /home/{user}/.kube
            cp /etc/kubernetes/admin.conf /home/{user}/.kube/config
            chown {user}:{user} /home/{user}/.kube/config
            """.format(user=shlex.quote(user)))
        self.add_step("install the pod network", """
            sudo -u %s kubectl apply -f %s
            """ % (shlex.quote(user), shlex.quote(pod_network_manifest)))


class NodeJoin(BaseInit):
    """
    Join a worker to the cluster with the command published by the master.
    The join command is executed exactly as it was published.
    """
    def __init__(self, join_command):
        super().__init__()
        join_command = join_command.strip()
        if not join_command:
            raise ValueError("the join command is empty")

        self.join_command = join_command
        self.add_step("join the cluster", join_command)
