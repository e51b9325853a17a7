"""

.. _provisioning:

kubestrap.provision
-------------------

Everything that ends up on a machine: the Vagrantfile describing the
machines (:mod:`kubestrap.provision.vagrantfile`) and the shell scripts
piped to them (:mod:`kubestrap.provision.shell`).

Every machine first runs :class:`kubestrap.provision.shell.MachineInit`.
The master then runs :class:`kubestrap.provision.shell.MasterInit` and
prints the join command with ``JOIN_COMMAND_SCRIPT``. Workers run
:class:`kubestrap.provision.shell.NodeJoin` once the join command has been
published.
"""
