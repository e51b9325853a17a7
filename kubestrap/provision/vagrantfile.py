"""
Render the Vagrantfile which defines the cluster machines.

The Vagrantfile carries no provisioners, machines are provisioned by
kubestrap over ``vagrant ssh``.
"""
from kubestrap import __version__

HEADER = """\
# -*- mode: ruby -*-
# vi: set ft=ruby :
# generated by kubestrap {version}, cluster {cluster}

Vagrant.configure("2") do |config|
"""

MACHINE = """
  config.vm.define "{name}" do |machine|
    machine.vm.box = "{box}"
    machine.vm.hostname = "{name}"
    machine.vm.network "private_network", ip: "{address}"
{ports}
    machine.vm.provider "virtualbox" do |vb|
      vb.memory = "{memory}"
      vb.cpus = {cpus}
    end
  end
"""

PORT = '    machine.vm.network "forwarded_port", guest: {guest}, host: {host}'


def render(topology, config):
    """
    Return the Vagrantfile for topology as a string.

    Args:
        topology (:class:`kubestrap.topology.Topology`)
        config (dict): the kubestrap configuration, for box, memory and cpus
    """
    parts = [HEADER.format(version=__version__,
                           cluster=config['cluster-name'])]
    for machine in topology:
        ports = "\n".join(PORT.format(guest=guest, host=host) for guest, host
                          in topology.forwarded_ports(machine))
        parts.append(MACHINE.format(name=machine.identifier,
                                    box=config['box'],
                                    address=machine.address,
                                    ports=ports,
                                    memory=config['memory'],
                                    cpus=config['cpus']))
    parts.append("end\n")
    return "".join(parts)


def write(path, topology, config):
    """write the Vagrantfile to path, return the path"""
    with open(path, "w") as fh:
        fh.write(render(topology, config))

    return path

