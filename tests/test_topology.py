"""
tests for kubestrap.topology
"""
import pytest

from kubestrap.topology import Role, Topology
from kubestrap.util.util import ConfigError, merge_config

MACHINES = {"centos1": "192.168.50.10",
            "centos2": "192.168.50.11",
            "centos3": "192.168.50.12"}


@pytest.fixture
def topology():
    return Topology.from_config(merge_config(None))


def test_exactly_one_master():
    for num in range(1, 7):
        machines = {"node%d" % i: "10.0.0.%d" % (i + 1) for i in range(num)}
        topo = Topology(machines)
        masters = [m for m in topo if m.role is Role.MASTER]
        assert len(masters) == 1
        assert masters[0].identifier == "node0"
        assert len(topo.workers) == num - 1


def test_designated_master():
    topo = Topology(MACHINES, master="centos2")
    assert topo.master.identifier == "centos2"
    assert [m.identifier for m in topo.workers] == ["centos1", "centos3"]


def test_unknown_master():
    with pytest.raises(ConfigError):
        Topology(MACHINES, master="centos4")


def test_empty_topology():
    with pytest.raises(ConfigError):
        Topology({})


def test_default_cluster(topology):
    assert topology.master.identifier == "centos1"
    assert topology.master.address == "192.168.50.10"
    assert {m.identifier for m in topology.workers} == {"centos2", "centos3"}
    assert len(topology) == 3


def test_forwarded_ports(topology):
    http = [topology.forwarded_ports(m)[0] for m in topology]
    api = [topology.forwarded_ports(m)[1] for m in topology]
    assert http == [(80, 8000), (80, 8001), (80, 8002)]
    assert api == [(6443, 6440), (6443, 6441), (6443, 6442)]

    centos2 = topology["centos2"]
    assert [host for _, host in topology.forwarded_ports(centos2)] == \
        [8001, 6441]


def test_no_forwarded_ports():
    topo = Topology(MACHINES)
    assert topo.forwarded_ports(topo["centos3"]) == []


def test_hosts_entries(topology):
    expected = ["192.168.50.10 centos1",
                "192.168.50.11 centos2",
                "192.168.50.12 centos3"]
    assert topology.hosts_entries() == expected
    assert topology.hosts_entries() == expected


def test_hosts_entries_keep_order():
    machines = [("zeta", "10.1.1.3"), ("alpha", "10.1.1.1")]
    topo = Topology(machines)
    assert topo.hosts_entries() == ["10.1.1.3 zeta", "10.1.1.1 alpha"]
    assert topo.master.identifier == "zeta"


def test_machines_are_immutable(topology):
    with pytest.raises(AttributeError):
        topology.master.role = Role.WORKER


def test_lookup(topology):
    assert topology["centos3"].index == 2
    with pytest.raises(KeyError):
        topology["centos9"]  # pylint: disable=pointless-statement
