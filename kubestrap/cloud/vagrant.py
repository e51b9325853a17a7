"""
Drive the cluster machines with the ``vagrant`` command line.

All calls are coroutines, so several machines can be handled concurrently
in one event loop.
"""
import asyncio
import shlex

from kubestrap.util.logger import Logger

LOGGER = Logger(__name__)

STDERR_TAIL = 5


class ProvisionError(RuntimeError):
    """
    A step on a machine failed.

    Args:
        name (str): the machine name
        returncode (int): exit status of the failed command
        stderr (str): error output, only the last lines are kept
    """
    def __init__(self, name, returncode, stderr=""):
        self.name = name
        self.returncode = returncode
        tail = "\n".join(stderr.strip().splitlines()[-STDERR_TAIL:])
        msg = f"{name}: step failed with exit status {returncode}"
        if tail:
            msg += f": {tail}"
        super().__init__(msg)


class VagrantMachine:
    """
    A machine of the Vagrant project in workdir.

    Args:
        machine (:class:`kubestrap.topology.Machine`)
        workdir (str): the directory holding the Vagrantfile
        vagrant (str): the vagrant executable
    """
    def __init__(self, machine, workdir=".", vagrant="vagrant"):
        self.machine = machine
        self.workdir = workdir
        self.vagrant = vagrant

    def __repr__(self):
        return f"<VagrantMachine {self.name}>"

    @property
    def name(self):  # pylint: disable=missing-docstring
        return self.machine.identifier

    @property
    def ip_address(self):  # pylint: disable=missing-docstring
        return self.machine.address

    async def _vagrant(self, *args, stdin=None):
        """run vagrant with args, return stdout, raise ProvisionError"""
        LOGGER.debug("%s: vagrant %s", self.name, " ".join(args))
        proc = await asyncio.create_subprocess_exec(
            self.vagrant, *args,
            stdin=asyncio.subprocess.PIPE if stdin is not None
            else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.workdir)
        stdout, stderr = await proc.communicate(
            stdin.encode() if stdin is not None else None)

        if proc.returncode:
            raise ProvisionError(self.name, proc.returncode,
                                 stderr.decode(errors="replace"))

        return stdout.decode(errors="replace")

    async def state(self):
        """
        Return the machine state reported by vagrant, e.g. ``running``,
        ``poweroff`` or ``not_created``.
        """
        output = await self._vagrant("status", self.name, "--machine-readable")
        return parse_machine_state(output, self.name)

    async def up(self):
        """boot the machine unless it is already running"""
        state = await self.state()
        if state == "running":
            LOGGER.info("%s is already running", self.name)
            return

        LOGGER.info("Starting %s (%s) ...", self.name, state)
        await self._vagrant("up", self.name, "--no-provision")

    async def run(self, script):
        """
        Pipe a shell script to ``sudo bash`` on the machine.

        Returns:
            the standard output of the script
        """
        return await self._vagrant("ssh", self.name, "-c", "sudo bash -s",
                                   stdin=script)

    async def read_file(self, path):
        """return the content of a file on the machine"""
        return await self.run("cat %s\n" % shlex.quote(path))

    async def destroy(self):  # pylint: disable=missing-docstring
        LOGGER.info("Destroying %s ...", self.name)
        await self._vagrant("destroy", "-f", self.name)


def parse_machine_state(output, name):
    """
    Find the state of machine name in ``vagrant status --machine-readable``
    output. Lines look like ``1571302929,centos1,state,running``.

    Raises:
        ValueError if the output has no state for name.
    """
    for line in output.splitlines():
        fields = line.strip().split(",")
        if len(fields) >= 4 and fields[1] == name and fields[2] == "state":
            return fields[3]

    raise ValueError(f"vagrant reported no state for {name}")
