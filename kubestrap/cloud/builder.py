"""
Builder
=======

Bring up a kubernetes cluster on Vagrant machines
"""
import asyncio
import os

from kubestrap.handshake import JoinCredential, MasterBootstrap, WorkerJoin
from kubestrap.provision import vagrantfile
from kubestrap.provision.shell import MachineInit
from kubestrap.topology import Role, Topology
from kubestrap.util.logger import Logger
from .vagrant import VagrantMachine

LOGGER = Logger(__name__)


class BuilderError(Exception):
    """The cluster can't be brought up"""


class ClusterBuilder:
    """
    Plan and build a kubernetes cluster on Vagrant machines.

    Every machine is started and provisioned concurrently. The master
    initializes the cluster and publishes the join credential, the workers
    wait for it and join.

    Args:
        config (dict): the kubestrap configuration
        workdir (str): the directory for the Vagrantfile and the credential
        machine_factory (callable): builds the driver for a machine record,
            ``machine_factory(machine, workdir)``
    """
    def __init__(self, config, workdir=".", machine_factory=VagrantMachine):
        self.config = config
        self.workdir = workdir
        self.topology = Topology.from_config(config)
        self.machines = [machine_factory(machine, workdir)
                         for machine in self.topology]

        path = config['join']['path']
        if not os.path.isabs(path):
            path = os.path.join(workdir, path)
        self.credential = JoinCredential(path)

        self.master_bootstrap = None
        self.worker_joins = {}
        self._up_lock = None

    @property
    def vagrantfile_path(self):  # pylint: disable=missing-docstring
        return os.path.join(self.workdir, "Vagrantfile")

    def dispatch(self, driver, cancel):
        """
        Return the bootstrap coroutine for the role of the machine.
        """
        if driver.machine.role is Role.MASTER:
            self.master_bootstrap = MasterBootstrap(
                driver, self.credential,
                self.config['pod_subnet'],
                self.config['pod_network_manifest'])
            return self.master_bootstrap.run()

        join = WorkerJoin(driver, self.credential,
                          interval=self.config['join']['interval'],
                          timeout=self.config['join']['timeout'])
        self.worker_joins[driver.name] = join
        return join.run(cancel)

    async def provision(self, driver, cancel):
        """
        Start and provision one machine.

        A failing master sets cancel, so no worker keeps waiting for a
        credential which will never be written.
        """
        try:
            # the virtualbox provider can't boot machines in parallel
            async with self._up_lock:
                await driver.up()

            LOGGER.info("%s: installing docker and kubernetes", driver.name)
            await driver.run(str(MachineInit(self.topology)))
            await self.dispatch(driver, cancel)
        except Exception:
            if driver.machine.role is Role.MASTER:
                cancel.set()
            raise

    async def _bring_up(self):
        self._up_lock = asyncio.Lock()
        cancel = asyncio.Event()
        results = await asyncio.gather(
            *[self.provision(driver, cancel) for driver in self.machines],
            return_exceptions=True)
        return dict(zip([driver.name for driver in self.machines], results))

    def run(self):
        """
        Execute the complete cluster build.

        Returns:
            dict of the workers which did not join, name -> exception

        Raises:
            BuilderError if the master could not be bootstrapped
        """
        vagrantfile.write(self.vagrantfile_path, self.topology, self.config)
        LOGGER.info("Wrote %s", self.vagrantfile_path)
        self.credential.reset()

        results = asyncio.run(self._bring_up())
        failed = {name: result for name, result in results.items()
                  if isinstance(result, BaseException)}

        master = self.topology.master.identifier
        if master in failed:
            raise BuilderError(f"master {master} failed: {failed[master]}")

        for name, exc in failed.items():
            LOGGER.error("%s did not join the cluster: %s", name, exc)

        return failed
