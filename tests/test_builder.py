"""
Test kubestrap.cloud.builder
"""
#  pylint: disable=redefined-outer-name
import os

import pytest

from kubestrap.cloud.builder import BuilderError, ClusterBuilder
from kubestrap.cloud.vagrant import ProvisionError
from kubestrap.handshake import JoinCancelled, MasterState, WorkerState
from kubestrap.topology import Role

from .testdata import JOIN_COMMAND, FakeMachine, make_config


def factory(failures=None):
    """build FakeMachines, failures maps machine names to fail_on"""
    failures = failures or {}
    machines = {}

    def _factory(machine, workdir):
        machines[machine.identifier] = FakeMachine(
            machine, workdir, fail_on=failures.get(machine.identifier))
        return machines[machine.identifier]

    return _factory, machines


def test_builder_setup(tmp_path):
    builder = ClusterBuilder(make_config(), str(tmp_path), factory()[0])
    assert [m.name for m in builder.machines] == \
        ["centos1", "centos2", "centos3"]
    assert builder.credential.path == os.path.join(
        str(tmp_path), ".kubestrap/join_command.sh")


def test_absolute_credential_path(tmp_path):
    path = str(tmp_path / "join.sh")
    config = make_config()
    config['join']['path'] = path
    builder = ClusterBuilder(config, "/somewhere", factory()[0])
    assert builder.credential.path == path


def test_run(tmp_path):
    make, machines = factory()
    builder = ClusterBuilder(make_config(), str(tmp_path), make)

    assert builder.run() == {}

    assert os.path.isfile(builder.vagrantfile_path)
    assert all(m.booted for m in machines.values())
    assert builder.master_bootstrap.state is MasterState.CREDENTIAL_WRITTEN
    assert builder.credential.read() == JOIN_COMMAND

    # the master is dispatched by role, the others join exactly once
    assert builder.master_bootstrap.driver is machines["centos1"]
    assert set(builder.worker_joins) == {"centos2", "centos3"}
    for name, join in builder.worker_joins.items():
        assert join.state is WorkerState.JOINED
        assert join.attempts == 1
        assert len(machines[name].joins()) == 1
    assert machines["centos1"].joins() == []

    # every machine got the common steps first
    for machine in machines.values():
        assert "swapoff -a" in machine.scripts[0]


def test_run_removes_stale_credential(tmp_path):
    make, machines = factory()
    builder = ClusterBuilder(make_config(), str(tmp_path), make)
    builder.credential.publish("kubeadm join 10.0.0.1:6443 --token old")

    builder.run()
    assert builder.credential.read() == JOIN_COMMAND
    assert JOIN_COMMAND in machines["centos2"].joins()[0]


def test_designated_master(tmp_path):
    make, machines = factory()
    builder = ClusterBuilder(make_config(master="centos3"), str(tmp_path),
                             make)
    builder.run()
    assert machines["centos3"].machine.role is Role.MASTER
    assert any("kubeadm init" in s for s in machines["centos3"].scripts)
    assert set(builder.worker_joins) == {"centos1", "centos2"}


def test_master_fails(tmp_path):
    make, machines = factory({"centos1": "kubeadm init"})
    config = make_config()
    config['join']['interval'] = 30
    config['join']['timeout'] = 60
    builder = ClusterBuilder(config, str(tmp_path), make)

    with pytest.raises(BuilderError):
        builder.run()

    assert not builder.credential.is_published()
    for name, join in builder.worker_joins.items():
        assert join.state is WorkerState.WAITING
        assert join.attempts == 0
        assert machines[name].joins() == []


def test_worker_fails(tmp_path):
    make, machines = factory({"centos3": "kubeadm join"})
    builder = ClusterBuilder(make_config(), str(tmp_path), make)

    failed = builder.run()
    assert list(failed) == ["centos3"]
    assert isinstance(failed["centos3"], ProvisionError)
    assert builder.worker_joins["centos2"].state is WorkerState.JOINED
    assert builder.worker_joins["centos3"].attempts == 1
    assert len(machines["centos3"].joins()) == 1


def test_worker_fails_before_join(tmp_path):
    make, _ = factory({"centos2": "yum install -y docker"})
    builder = ClusterBuilder(make_config(), str(tmp_path), make)

    failed = builder.run()
    assert list(failed) == ["centos2"]
    assert "centos2" not in builder.worker_joins


def test_cancelled_workers_reported(tmp_path):
    make, _ = factory({"centos1": "yum install -y docker"})
    builder = ClusterBuilder(make_config(), str(tmp_path), make)
    # the master fails during the common steps, before any worker waits
    with pytest.raises(BuilderError) as err:
        builder.run()
    assert "centos1" in str(err.value)
    assert not isinstance(err.value, JoinCancelled)
