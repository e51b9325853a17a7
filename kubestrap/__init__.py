# pylint: disable=missing-docstring
try:
    from importlib import metadata
    __version__ = metadata.version('kubestrap')
except metadata.PackageNotFoundError:
    __version__ = '0.1.0'

# Defining some constants
KUBESTRAP_DIR = ".kubestrap"
JOIN_COMMAND_PATH = f"{KUBESTRAP_DIR}/join_command.sh"
KUBERNETES_API_PORT = 6443
DEFAULT_POD_SUBNET = "10.244.0.0/16"
FLANNEL_MANIFEST = ("https://raw.githubusercontent.com/coreos/flannel/"
                    "master/Documentation/kube-flannel.yml")
