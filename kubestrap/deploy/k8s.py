"""
talk to the kubernetes API server of the cluster
"""
import logging

import urllib3

from kubernetes import client as k8sclient
from kubernetes.client.rest import ApiException
from kubernetes.config import kube_config

from kubestrap.util.logger import Logger
from kubestrap.util.util import retry

LOGGER = Logger(__name__)


def node_is_ready(node):
    """
    Return True if the ``Ready`` condition of a V1Node is ``True``
    """
    conditions = (node.status and node.status.conditions) or []
    return any(cond.type == "Ready" and cond.status == "True"
               for cond in conditions)


class K8S:
    """Class allowing to query a Kubernetes cluster.

    Args:
        config (str): File path for the kubernetes configuration file
    """

    def __init__(self, config):
        self.config = config
        self.client = kube_config.new_client_from_config(config_file=config)
        self.api = k8sclient.CoreV1Api(api_client=self.client)

    @property
    def host(self):
        """The address of the API server"""
        return self.client.configuration.host

    @property
    def is_ready(self):
        """Check if the API server is available.

        Returns:
            True if it's reachable.
        """
        logging.getLogger("urllib3").setLevel(logging.ERROR)
        try:
            k8sclient.CoreApi(api_client=self.client).get_api_versions()
            return True
        except (urllib3.exceptions.HTTPError, ApiException):
            return False
        finally:
            logging.getLogger("urllib3").setLevel(logging.WARNING)

    @retry((urllib3.exceptions.HTTPError, ApiException), tries=3, delay=2,
           logger=LOGGER.debug)
    def nodes(self):
        """
        Return (name, ready) for every node registered in the cluster
        """
        items = self.api.list_node().items
        return [(node.metadata.name, node_is_ready(node)) for node in items]
