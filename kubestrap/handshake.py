"""
handshake
=========

The bootstrap handshake between the master and the workers.

The master initializes the cluster and publishes the join command through a
:class:`JoinCredential`. Workers poll for the credential, bounded by a
timeout and cancelled when the master fails, and run the join command once.

Master states::

    UNINITIALIZED -> INITIALIZING -> CREDENTIAL_WRITTEN

Worker states::

    WAITING -> JOINED
"""
import asyncio
import enum
import os

from kubestrap.cloud.vagrant import ProvisionError
from kubestrap.provision.shell import JOIN_COMMAND_SCRIPT, MasterInit, NodeJoin
from kubestrap.util.logger import Logger

LOGGER = Logger(__name__)


class MasterState(enum.Enum):  # pylint: disable=missing-docstring
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    CREDENTIAL_WRITTEN = "credential-written"


class WorkerState(enum.Enum):  # pylint: disable=missing-docstring
    WAITING = "waiting"
    JOINED = "joined"


class JoinTimeout(TimeoutError):
    """The join credential did not appear in time"""


class JoinCancelled(Exception):
    """Waiting for the join credential was cancelled"""


class JoinCredential:
    """
    A written-once, read-many file holding the join command.

    The content is written to a temporary file which is renamed into place,
    readers either see no credential or the complete one.

    Args:
        path (str): where the credential is stored
    """
    def __init__(self, path):
        self.path = path

    @property
    def _tmp_path(self):
        return self.path + ".tmp"

    def is_published(self):
        """True once the master published the credential"""
        return os.path.isfile(self.path)

    def publish(self, join_command):
        """
        Store join_command as the credential.

        Raises:
            ValueError if the command is empty or the credential was
            already published.
        """
        join_command = join_command.strip()
        if not join_command:
            raise ValueError("refusing to publish an empty join command")
        if self.is_published():
            raise ValueError(f"join credential {self.path} already exists")

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self._tmp_path, "w") as fh:
            fh.write(join_command + "\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(self._tmp_path, 0o700)
        os.replace(self._tmp_path, self.path)

    def read(self):
        """return the published join command"""
        with open(self.path) as fh:
            return fh.read().strip()

    def reset(self):
        """remove a credential left over from an earlier run"""
        for path in (self.path, self._tmp_path):
            try:
                os.remove(path)
                LOGGER.debug("Removed stale join credential %s", path)
            except FileNotFoundError:
                pass


def parse_join_command(output):
    """
    Return the ``kubeadm join`` line from the output of
    ``kubeadm token create --print-join-command``.

    Raises:
        ValueError if the output holds no join command.
    """
    lines = [line.strip() for line in output.splitlines()]
    commands = [line for line in lines if line.startswith("kubeadm join ")]
    if not commands:
        raise ValueError("no join command found in output")
    return commands[-1]


class MasterBootstrap:
    """
    Initialize the cluster on the master and publish the join credential.

    There is no retry, any error propagates and leaves the credential
    unwritten.

    Args:
        driver: runs scripts on the master, see
            :class:`kubestrap.cloud.vagrant.VagrantMachine`
        credential (JoinCredential)
        pod_subnet (str): the pod network range
        pod_network_manifest (str): URL of the network overlay manifest
    """
    def __init__(self, driver, credential, pod_subnet, pod_network_manifest):
        self.driver = driver
        self.credential = credential
        self.pod_subnet = pod_subnet
        self.pod_network_manifest = pod_network_manifest
        self.state = MasterState.UNINITIALIZED

    async def run(self):
        """initialize the master, returns the published join command"""
        machine = self.driver.machine
        self.state = MasterState.INITIALIZING
        LOGGER.info("%s: initializing the kubernetes master at %s",
                    machine.identifier, machine.address)

        await self.driver.run(str(MasterInit(machine, self.pod_subnet,
                                             self.pod_network_manifest)))
        output = await self.driver.run(JOIN_COMMAND_SCRIPT)
        try:
            join_command = parse_join_command(output)
        except ValueError as err:
            raise ProvisionError(machine.identifier, 0, str(err)) from err

        self.credential.publish(join_command)
        self.state = MasterState.CREDENTIAL_WRITTEN
        LOGGER.success("%s: join credential written to %s",
                       machine.identifier, self.credential.path)
        return join_command


class WorkerJoin:
    """
    Wait for the join credential and join the worker to the cluster.

    Args:
        driver: runs scripts on the worker
        credential (JoinCredential)
        interval (float): seconds between two checks for the credential
        timeout (float): give up waiting after this many seconds

    Attributes:
        attempts (int): the number of join attempts made, 0 or 1
    """
    def __init__(self, driver, credential, interval=5, timeout=900):
        self.driver = driver
        self.credential = credential
        self.interval = interval
        self.timeout = timeout
        self.state = WorkerState.WAITING
        self.attempts = 0

    async def _pause(self, seconds, cancel):
        if cancel is None:
            await asyncio.sleep(seconds)
            return

        try:
            await asyncio.wait_for(cancel.wait(), seconds)
        except asyncio.TimeoutError:
            pass

    async def wait(self, cancel=None):
        """
        Block until the credential is published.

        Args:
            cancel (asyncio.Event): stop waiting as soon as it is set

        Raises:
            JoinTimeout when the timeout expires
            JoinCancelled when cancel is set
        """
        name = self.driver.machine.identifier
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        while not self.credential.is_published():
            if cancel is not None and cancel.is_set():
                raise JoinCancelled(f"{name}: waiting for the join "
                                    "credential was cancelled")
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise JoinTimeout(f"{name}: no join credential after "
                                  f"{self.timeout} seconds")
            LOGGER.debug("%s: waiting for %s", name, self.credential.path)
            await self._pause(min(self.interval, remaining), cancel)

    async def run(self, cancel=None):
        """wait for the credential, then run the join command once"""
        await self.wait(cancel)

        machine = self.driver.machine
        join_command = self.credential.read()
        LOGGER.info("%s: joining the cluster", machine.identifier)
        self.attempts += 1
        await self.driver.run(str(NodeJoin(join_command)))
        self.state = WorkerState.JOINED
        LOGGER.success("%s: joined the cluster", machine.identifier)
