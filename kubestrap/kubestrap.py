"""
kubestrap
=========

The main entry point for the kubernetes cluster build.
Don't use it directly, instead install the package with setup.py.
It automatically creates an executable in your path.

"""
import argparse
import sys

from mach import mach1

from . import __version__
from .cli import (confirm, cluster_status, destroy_cluster, print_summary)
from .cloud.builder import BuilderError, ClusterBuilder
from .cloud.vagrant import ProvisionError
from .provision.vagrantfile import render as render_vagrantfile
from .topology import Topology
from .util.logger import Logger
from .util.util import ConfigError, load_config

LOGGER = Logger(__name__)


def read_config(config):
    """load the configuration or exit with an error message"""
    try:
        return load_config(config)
    except (ConfigError, OSError) as err:
        LOGGER.error(f"Error: {err}")
        sys.exit(1)


@mach1()
class Kubestrap:  # pylint: disable=no-self-use
    """
    The main entry point for the program. This class does the CLI parsing
    and descides which action shoud be taken
    """
    def __init__(self):
        self.parser.add_argument(  # pylint: disable=no-member
            "--version", action="store_true",
            help="show version and exit",
            default=argparse.SUPPRESS)

        verbosity_help = "".join([
            "set the verbosity level (",
            "0 = quiet, ",
            "1 = error, ",
            "2 = warning, ",
            "3 = info, ",
            "4 = debug)"])
        self.parser.add_argument("--verbosity",  # pylint: disable=no-member
                                 "-v",
                                 help=verbosity_help,
                                 choices=['0', '1', '2', '3', '4', 'quiet',
                                          'error', 'warning', 'info', 'debug'],
                                 type=str,
                                 default=3)

    def _get_version(self):
        print("%s version: %s" % (self.__class__.__name__, __version__))

    def _get_verbosity(self, level=None):
        # mach calls this with the --verbosity value, main() already set it
        pass

    def apply(self, config: str = None):
        """
        Bring up the Vagrant machines and bootstrap the kubernetes cluster

        config - configuration file, defaults to the built-in three machines
        """
        config = read_config(config)
        builder = ClusterBuilder(config)
        try:
            failed = builder.run()
        except BuilderError as err:
            LOGGER.error(f"Error: {err}")
            sys.exit(1)

        print_summary(builder.topology)
        if failed:
            LOGGER.error("%d worker(s) failed to join: %s", len(failed),
                         ", ".join(failed))
            sys.exit(1)

        LOGGER.success("Kubernetes cluster is ready to use !!!")

    def vagrantfile(self, config: str = None):
        """
        Print the Vagrantfile for the cluster machines

        config - configuration file
        """
        config = read_config(config)
        print(render_vagrantfile(Topology.from_config(config), config),
              end="")

    def hosts(self, config: str = None):
        """
        Print the /etc/hosts entries of the cluster machines

        config - configuration file
        """
        config = read_config(config)
        for line in Topology.from_config(config).hosts_entries():
            print(line)

    def status(self, config: str = None):
        """
        Fetch the admin kubeconfig from the master and list the nodes

        config - configuration file
        """
        config = read_config(config)
        try:
            nodes = cluster_status(config, Topology.from_config(config))
        except (ProvisionError, RuntimeError, OSError) as err:
            LOGGER.error(f"Error: {err}")
            sys.exit(1)

        for name, ready in nodes:
            if ready:
                LOGGER.success("%s Ready", name)
            else:
                LOGGER.warning("%s NotReady", name)

    def destroy(self, config: str = None, force: bool = False):
        """
        Destroy all cluster machines

        config - configuration file
        force - don't ask for confirmation
        """
        config = read_config(config)
        LOGGER.question(
            "Destroying cluster '{}'".format(config['cluster-name']))
        if confirm(force) != 'y':
            sys.exit(0)

        try:
            destroy_cluster(Topology.from_config(config))
        except ProvisionError as err:
            LOGGER.error(f"Error: {err}")
            sys.exit(1)


def main():
    """
    run and execute kubestrap
    """
    k = Kubestrap()

    # pylint: disable=no-member
    k.parser.description = 'Bring up a kubernetes cluster on Vagrant '\
                           'machines. Vagrant and VirtualBox have to be '\
                           'installed.'

    # Setting verbosity level
    level = k.parser.parse_args().verbosity
    try:
        LOGGER.level = level
    except ValueError as err:
        LOGGER.error(f"Error: {err}")
        sys.exit(1)

    # the mach decorator analyzes the methods in the class and dynamically
    # creates the CLI parser. It also adds the method run to the class.
    k.run()  # pylint: disable=no-member
