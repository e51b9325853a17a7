"""
General purpose utilities
"""
import copy
import re
import time

from functools import wraps

import yaml

from kubestrap import (DEFAULT_POD_SUBNET, FLANNEL_MANIFEST,
                       JOIN_COMMAND_PATH, KUBERNETES_API_PORT)
from kubestrap.util.net import is_ip, is_port


class ConfigError(ValueError):
    """The cluster configuration is invalid"""


DEFAULT_CONFIG = {
    'cluster-name': 'centos',
    'box': 'centos/7',
    'machines': {
        'centos1': '192.168.50.10',
        'centos2': '192.168.50.11',
        'centos3': '192.168.50.12',
    },
    'master': None,
    'memory': 4096,
    'cpus': 2,
    'pod_subnet': DEFAULT_POD_SUBNET,
    'pod_network_manifest': FLANNEL_MANIFEST,
    'forwarded_ports': [
        {'guest': 80, 'host': 8000},
        {'guest': KUBERNETES_API_PORT, 'host': 6440},
    ],
    'join': {
        'path': JOIN_COMMAND_PATH,
        'interval': 5,
        'timeout': 900,
    },
}

HOSTNAME_RE = re.compile(r"^[a-zA-Z\d]([a-zA-Z\d-]{0,61}[a-zA-Z\d])?$")


def name_validation(name):
    """
    Validates a name that will be used as the cluster name.
    Each name should conform to the following convention:
    not too long (maximum 244 characters)
    only ASCII-letters, numbers and dashes

    Args:
        name (str): The name to be checked

    Returns:
        Name if valid

    Raises:
        ConfigError if the name is invalid
    """
    if not isinstance(name, str) or not name:
        raise ConfigError("cluster-name must be a non empty string")
    if len(name) > 244:
        raise ConfigError("cluster-name is too long")
    allowed = re.compile(r"^[a-zA-Z\d-]+$")
    if not allowed.match(name):
        raise ConfigError(f"cluster-name '{name}' is using illegal characters")
    return name


def hostname_validation(name):
    """Check that name can be used as a machine hostname"""
    if not isinstance(name, str) or not HOSTNAME_RE.match(name):
        raise ConfigError(f"machine name '{name}' is not a valid hostname")
    return name


def _check_positive(key, value, types=(int,)):
    if not isinstance(value, types) or isinstance(value, bool) or value <= 0:
        raise ConfigError(f"{key} must be a positive number, got {value!r}")


def validate_config(config):
    """
    Check a merged configuration dict, raises ConfigError on the first
    problem found.
    """
    name_validation(config['cluster-name'])

    machines = config['machines']
    if not isinstance(machines, dict) or not machines:
        raise ConfigError("at least one machine must be configured")

    for name, address in machines.items():
        hostname_validation(name)
        if not is_ip(address):
            raise ConfigError(f"machine '{name}' has an invalid address "
                              f"'{address}'")

    master = config.get('master')
    if master is not None and master not in machines:
        raise ConfigError(f"master '{master}' is not one of the machines")

    if not isinstance(config['forwarded_ports'], list):
        raise ConfigError("forwarded_ports must be a list")

    for rule in config['forwarded_ports']:
        try:
            guest, host = rule['guest'], rule['host']
        except (KeyError, TypeError):
            raise ConfigError("forwarded_ports entries need a guest and a "
                              f"host port, got {rule!r}")
        # the highest host port is host + number of machines - 1
        if not (is_port(guest) and is_port(host) and
                is_port(host + len(machines) - 1)):
            raise ConfigError(f"invalid port in forwarded_ports: {rule!r}")

    _check_positive('memory', config['memory'])
    _check_positive('cpus', config['cpus'])
    _check_positive('join.interval', config['join']['interval'], (int, float))
    _check_positive('join.timeout', config['join']['timeout'], (int, float))

    path = config['join']['path']
    if not isinstance(path, str) or not path:
        raise ConfigError(f"join.path must be a non empty string, got {path!r}")

    return config


def merge_config(overrides):
    """
    Merge a (partial) configuration dict over ``DEFAULT_CONFIG``.

    ``machines`` and ``forwarded_ports`` are replaced as a whole, ``join``
    is merged key by key.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if overrides is None:
        return config

    if not isinstance(overrides, dict):
        raise ConfigError("the configuration must be a mapping")

    for key, value in overrides.items():
        if key == 'join':
            if not isinstance(value, dict):
                raise ConfigError("join must be a mapping")
            config['join'].update(value)
        else:
            config[key] = value

    return config


def load_config(path=None):
    """
    Read the YAML configuration at path and return the validated config.

    Without a path the built-in three machine cluster is returned.
    """
    overrides = None
    if path:
        with open(path, 'r') as stream:
            try:
                overrides = yaml.safe_load(stream)
            except yaml.YAMLError as err:
                raise ConfigError(f"can't parse {path}: {err}") from err

    return validate_config(merge_config(overrides))


def retry(exceptions, tries=4, delay=3, backoff=2, logger=None):
    """
    Retry calling the decorated function using an exponential backoff.

    Args:
        exceptions: The exception to check. may be a tuple of exceptions to check.
        tries: Number of times to try (not retry) before giving up.
        delay: Initial delay between retries in seconds.
        backoff: Backoff multiplier (e.g. value of 2 will double the delay each retry).
        logger: Callable used to report retries. If None, stay silent.
    """
    def deco_retry(f):  # pylint: disable=invalid-name

        @wraps(f)
        def f_retry(*args, **kwargs):
            mtries, mdelay = tries, delay
            while mtries > 1:
                try:
                    return f(*args, **kwargs)
                except exceptions as e:  # pylint: disable=invalid-name
                    msg = '{}, Retrying in {} seconds...'.format(e,
                                                                 int(mdelay))
                    if logger:
                        logger(msg)
                    time.sleep(mdelay)
                    mtries -= 1
                    mdelay *= backoff
            return f(*args, **kwargs)

        return f_retry  # true decorator

    return deco_retry
