"""
shared test data and doubles
"""
import asyncio
import copy

from kubestrap.cloud.vagrant import ProvisionError
from kubestrap.provision.shell import JOIN_COMMAND_SCRIPT
from kubestrap.util.util import DEFAULT_CONFIG

JOIN_COMMAND = ("kubeadm join 192.168.50.10:6443 --token abcdef.0123456789abcdef "
                "--discovery-token-ca-cert-hash sha256:"
                "1b6ba1a5b7c2e4d5f1a2b3c4d5e6f708192a3b4c5d6e7f8091a2b3c4d5e6f708")

# kubeadm prints warnings before the command on some versions
JOIN_OUTPUT = ("W1019 12:00:00.000000    1234 validation.go:28] "
               "Cannot validate kube-proxy config - no validator is available\n"
               + JOIN_COMMAND + " \n")

VAGRANT_STATUS = """\
1571302929,centos1,metadata,provider,virtualbox
1571302929,centos1,provider-name,virtualbox
1571302929,centos1,state,running
1571302929,centos1,state-human-short,running
1571302929,,ui,info,Current machine states:
"""


def make_config(**overrides):
    """a copy of the default configuration with fast polling"""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config['join']['interval'] = 0.01
    config['join']['timeout'] = 5
    config.update(overrides)
    return config


class FakeMachine:
    """
    Stands in for kubestrap.cloud.vagrant.VagrantMachine, records every
    script and fails the first script containing fail_on.
    """
    def __init__(self, machine, workdir=".", fail_on=None):
        self.machine = machine
        self.workdir = workdir
        self.fail_on = fail_on
        self.scripts = []
        self.booted = False

    @property
    def name(self):  # pylint: disable=missing-docstring
        return self.machine.identifier

    async def up(self):  # pylint: disable=missing-docstring
        await asyncio.sleep(0)
        self.booted = True

    async def run(self, script):  # pylint: disable=missing-docstring
        await asyncio.sleep(0)
        self.scripts.append(script)
        if self.fail_on and self.fail_on in script:
            raise ProvisionError(self.name, 1, "something went wrong")
        if script == JOIN_COMMAND_SCRIPT:
            return JOIN_OUTPUT
        return ""

    def joins(self):
        """the join scripts this machine received"""
        return [s for s in self.scripts if "kubeadm join" in s]
