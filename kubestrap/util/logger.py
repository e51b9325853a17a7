"""This module defines logging capabilities for kubestrap."""

import logging
import sys
import time

# pylint: disable=no-name-in-module
from huepy import (bad, red, info as infomsg, yellow, run, grey,
                   que, good, green)

LOG_LEVELS = list(range(5))
DEFAULT_LOG_LEVEL = 3

LEVEL_NAMES = {
    'quiet': 0,
    'error': 1,
    'warning': 2,
    'info': 3,
    'debug': 4}

# kubestrap level -> python logging level, 0 disables the logger
PYTHON_LEVELS = {1: logging.ERROR,
                 2: logging.WARNING,
                 3: logging.INFO,
                 4: logging.DEBUG}


def get_logger(name):
    """Returns a Python logger writing plain messages to STDOUT.

    Only a single handler is added, calling this repeatedly with the same
    name does not duplicate output.

    Args:
        name (str): The name of the Logger.

    Returns:
        A Python Logger.
    """
    log = logging.getLogger(name)
    set_level(log, Logger.LOG_LEVEL)

    if not log.handlers:
        sh = logging.StreamHandler(sys.stdout)
        sh.setFormatter(logging.Formatter("%(message)s"))
        log.addHandler(sh)

    return log


def set_level(logger, level):
    """Sets the logging level of a Python logger from a kubestrap level.

    Args:
        logger: A Python logger object.
        level (int): The kubestrap logging level, 0 (quiet) to 4 (debug).

    Raises:
        ValueError if log level is unsupported.
    """
    if level not in LOG_LEVELS:
        raise ValueError(f"log level {level} is not supported")

    logger.disabled = not level
    if level:
        logger.setLevel(PYTHON_LEVELS[level])


def to_level(level):
    """Convert a level name or number (as int or str) to a kubestrap level.

    Example:
        >>> to_level('debug')
        4
        >>> to_level('2')
        2
    """
    try:
        return LEVEL_NAMES[level]
    except KeyError:
        return int(level)


class Singleton(type):
    """Metaclass which hands out one instance per class.

    Calling the class again re-runs ``__init__`` on the existing instance,
    so ``Logger(__name__)`` in every module returns the same object, bound
    to the most recent name.

    Example:
        >>> log1 = Logger(__name__)
        >>> log2 = Logger("kubestrap")
        >>> id(log1) == id(log2)
        True
    """
    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
        else:
            cls._instances[cls].__init__(*args, **kwargs)

        return cls._instances[cls]


class Logger(metaclass=Singleton):
    """Proxy around ``logging.Logger`` with colored, prefixed output.

    Set ``Logger.LOG_LEVEL`` before creating loggers, or assign
    :attr:`level` on an instance. The levels are:

    .. code:: shell

        * 0 - quiet (no output)
        * 1 - error
        * 2 - warning
        * 3 - info
        * 4 - debug

    All methods except :meth:`Logger.question` support ``%``-style
    arguments.

    Example:
        >>> log = Logger(__name__)
        >>> log.info("%s joined", "centos2")
        [~] centos2 joined

    Attributes:
        LOG_LEVEL (int): The log level used across the application.
    """

    LOG_LEVEL = DEFAULT_LOG_LEVEL

    def __init__(self, name):
        self.logger = get_logger(name)

    @property
    def level(self):
        """Returns the Python log level equivalent, 0 when quiet."""
        if self.logger.disabled:
            return 0

        return self.logger.level

    @level.setter
    def level(self, level):
        level = to_level(level)
        set_level(self.logger, level)
        Logger.LOG_LEVEL = level

    def error(self, msg, *args, color=True, **kwargs):
        """Logs a message on error level, in red with ``[-]``."""
        if color:
            msg = bad(red(msg))

        self.logger.error(msg, *args, **kwargs)

    def warning(self, msg, *args, color=True, **kwargs):
        """Logs a message on warning level, in yellow with ``[!]``."""
        if color:
            msg = infomsg(yellow(msg))

        self.logger.warning(msg, *args, **kwargs)

    def warn(self, msg, *args, color=True, **kwargs):
        """Same as :meth:`Logger.warning`."""
        self.warning(msg, *args, **kwargs, color=color)

    def info(self, msg, *args, color=True, **kwargs):
        """Logs a message on info level, in grey with ``[~]``."""
        if color:
            msg = run(grey(msg))

        self.logger.info(msg, *args, **kwargs)

    def debug(self, msg, *args, color=True, **kwargs):
        """Logs a message on debug level, prefixed with a timestamp.

        Example:
            >>> log.debug("test")
            [20261019-155611] test
        """
        if color:
            now = time.strftime("%Y%m%d-%H%M%S")
            msg = grey(f"[{now}] {msg}")

        self.logger.debug(msg, *args, **kwargs)

    def success(self, msg, *args, color=True, **kwargs):
        """Logs a success on info level, in green with ``[+]``."""
        if color:
            msg = good(green(msg))

        self.logger.info(msg, *args, **kwargs)

    @staticmethod
    def question(msg, color=True):
        """Prints a question, regardless of the log level.

        No %-formatting here.
        """
        if color:
            msg = que(msg)

        print(msg)
