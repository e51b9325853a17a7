"""
topology
========

The static cluster membership: which machines exist, their addresses and
which one is the master.

Roles are assigned once, when the table is built. The designated master is
the machine named by the ``master`` configuration key, or the first machine
of the table; every other machine is a worker.
"""
import enum
from collections import namedtuple

from kubestrap.util.util import ConfigError


class Role(enum.Enum):
    """The part a machine plays in the cluster bootstrap"""
    MASTER = "master"
    WORKER = "worker"


Machine = namedtuple("Machine", ["identifier", "address", "role", "index"])
Machine.__doc__ = """
An immutable machine record.

Args:
    identifier (str): the machine (and host) name, e.g. ``centos1``
    address (str): the static address on the private network
    role (Role): master or worker
    index (int): the position in the topology table
"""


class Topology:
    """
    An ordered, read only table of the cluster machines.

    Args:
        machines (dict or list of pairs): identifier -> address, in order
        master (str): the identifier of the master, defaults to the first
            machine
        forwarded_ports (list): dicts with a ``guest`` port and the ``host``
            base port, the host port of a machine is base + its index

    Example:
        >>> topo = Topology({"centos1": "192.168.50.10",
        ...                  "centos2": "192.168.50.11"})
        >>> topo.master.identifier
        'centos1'
        >>> [m.identifier for m in topo.workers]
        ['centos2']
    """

    def __init__(self, machines, master=None, forwarded_ports=None):
        pairs = list(dict(machines).items())
        if not pairs:
            raise ConfigError("a topology needs at least one machine")

        identifiers = [name for name, _ in pairs]
        if master is None:
            master = identifiers[0]
        elif master not in identifiers:
            raise ConfigError(f"master '{master}' is not one of the machines")

        self._machines = tuple(
            Machine(name, address,
                    Role.MASTER if name == master else Role.WORKER,
                    index)
            for index, (name, address) in enumerate(pairs))
        self._port_rules = tuple((rule['guest'], rule['host'])
                                 for rule in forwarded_ports or [])

    @classmethod
    def from_config(cls, config):
        """build the topology from a kubestrap configuration dict"""
        return cls(config['machines'],
                   master=config.get('master'),
                   forwarded_ports=config.get('forwarded_ports'))

    def __iter__(self):
        return iter(self._machines)

    def __len__(self):
        return len(self._machines)

    def __getitem__(self, identifier):
        for machine in self._machines:
            if machine.identifier == identifier:
                return machine
        raise KeyError(identifier)

    def __repr__(self):
        return "<Topology %s>" % ", ".join(
            "%s=%s" % (m.identifier, m.address) for m in self._machines)

    @property
    def master(self):
        """the single master machine"""
        return next(m for m in self._machines if m.role is Role.MASTER)

    @property
    def workers(self):
        """all other machines, in table order"""
        return [m for m in self._machines if m.role is Role.WORKER]

    def forwarded_ports(self, machine):
        """
        Return the (guest, host) port pairs forwarded for machine.

        The host port only depends on the position of the machine in the
        table: base + index.
        """
        return [(guest, base + machine.index)
                for guest, base in self._port_rules]

    def hosts_entries(self):
        """
        Return the lines for /etc/hosts, one per machine, in table order.
        """
        return ["%s %s" % (m.address, m.identifier) for m in self._machines]
