# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Common parts of the logging machinery."""

import logging

# This format roughly matches Twisted's default, so that combined Twisted and
# standard library logs are consistent with one another.
#
# For timestamps, rely on journald instead.
DEFAULT_LOG_FORMAT = "%(name)s: [%(levelname)s] %(message)s"
DEFAULT_LOG_VERBOSITY_LEVELS = {0, 1, 2, 3}
DEFAULT_LOG_VERBOSITY = 2


def make_logging_level_names_consistent():
    """Rename the standard library's logging levels to match Twisted's."""
    for level in list(logging._levelToName):
        if level == logging.NOTSET:
            # When the logging level is not known in Twisted it's rendered as
            # a hyphen.
            name = "-"
        elif level == logging.WARNING:
            # Twisted says "warn".
            name = "warn"
        else:
            # Twisted's level names are all lower-case.
            name = logging.getLevelName(level).lower()
        # For a preexisting level this will _replace_ the name.
        logging.addLevelName(level, name)
