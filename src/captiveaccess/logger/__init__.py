# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Logging for the network access subsystem.

There are two kinds of log:

- The access log, obtained from `get_access_logger`, is a "nice to read"
  record of which devices were granted or refused access and why. It uses
  the standard library's `logging` module.

- Debugging detail, such as the commands being run, goes through
  `twisted.logger.Logger`, as does anything that needs a traceback.

`configure` sets both up for a given verbosity.
"""

__all__ = [
    "AccessLogger",
    "configure",
    "get_access_logger",
    "set_verbosity",
]

from captiveaccess.logger._accesslog import AccessLogger, get_access_logger
from captiveaccess.logger._common import (
    DEFAULT_LOG_VERBOSITY,
    make_logging_level_names_consistent,
)
from captiveaccess.logger._logging import (
    configure_standard_logging,
    set_standard_verbosity,
)
from captiveaccess.logger._twisted import (
    configure_twisted_logging,
    set_twisted_verbosity,
)

# Current verbosity level. Configured initially in `configure()` call.
# Can be set afterward at runtime with `set_verbosity()`.
current_verbosity = DEFAULT_LOG_VERBOSITY


def configure(verbosity: int = None):
    """Configure logging for both Twisted and Python.

    If the verbosity is not specified, it will be set to the default verbosity
    level.

    :param verbosity: See `get_logging_level`.
    """
    global current_verbosity
    if verbosity is None:
        verbosity = DEFAULT_LOG_VERBOSITY
    current_verbosity = verbosity
    # Fix-up the logging level names in the standard library first so that
    # both logs read the same.
    make_logging_level_names_consistent()
    configure_twisted_logging(verbosity)
    configure_standard_logging(verbosity)


def set_verbosity(verbosity: int = None):
    """Resets the logging verbosity to the specified level.

    This function is intended to be be called after `configure()` is called.

    :param verbosity: See `get_logging_level`.
    """
    global current_verbosity
    if verbosity is None:
        verbosity = DEFAULT_LOG_VERBOSITY
    current_verbosity = verbosity
    set_twisted_verbosity(verbosity)
    set_standard_verbosity(verbosity)
