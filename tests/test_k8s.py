from types import SimpleNamespace

from kubestrap.deploy.k8s import node_is_ready


def node(*conditions):
    status = SimpleNamespace(conditions=[
        SimpleNamespace(type=kind, status=value) for kind, value in conditions])
    return SimpleNamespace(metadata=SimpleNamespace(name="centos2"),
                           status=status)


def test_node_is_ready():
    assert node_is_ready(node(("MemoryPressure", "False"), ("Ready", "True")))
    assert not node_is_ready(node(("Ready", "False")))
    assert not node_is_ready(node(("Ready", "Unknown")))
    assert not node_is_ready(node())
    assert not node_is_ready(SimpleNamespace(status=None))
