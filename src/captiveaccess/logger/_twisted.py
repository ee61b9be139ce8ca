# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Twisted-specific logging stuff."""

import sys

from twisted import logger as twistedModern

from captiveaccess.logger._common import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_VERBOSITY_LEVELS,
)

# Map verbosity numbers to `twisted.logger` levels.
DEFAULT_TWISTED_VERBOSITY_LEVELS = {
    # verbosity: level
    0: twistedModern.LogLevel.error,
    1: twistedModern.LogLevel.warn,
    2: twistedModern.LogLevel.info,
    3: twistedModern.LogLevel.debug,
}

assert (
    DEFAULT_TWISTED_VERBOSITY_LEVELS.keys() == DEFAULT_LOG_VERBOSITY_LEVELS
), "Twisted verbosity map does not match expectations."


def set_twisted_verbosity(verbosity: int):
    """Reconfigure verbosity of the Twisted log."""
    level = get_twisted_logging_level(verbosity)
    global _filterByLevels
    _filterByLevels = frozenset(
        ll for ll in twistedModern.LogLevel.iterconstants() if ll >= level
    )


def configure_twisted_logging(verbosity: int):
    """Send Twisted's log to standard out, filtered by `verbosity`.

    :param verbosity: See `get_twisted_logging_level`.
    """
    set_twisted_verbosity(verbosity)
    twistedModern.globalLogBeginner.beginLoggingTo(
        [EventLogger()], discardBuffer=False, redirectStandardIO=False
    )


def get_twisted_logging_level(verbosity: int):
    """Return the Twisted `LogLevel` corresponding to `verbosity`."""
    levels = DEFAULT_TWISTED_VERBOSITY_LEVELS
    v_min, v_max = min(levels), max(levels)
    return levels[max(v_min, min(v_max, verbosity))]


def EventLogger(outFile=sys.__stdout__):
    """Factory returning a `t.logger.ILogObserver`.

    This logs to the real standard out using the same format as the
    standard library's `logging` configuration.
    """
    return twistedModern.FilteringLogObserver(
        twistedModern.FileLogObserver(outFile, _formatModernEvent),
        (_filterByLevel,),
    )


_lineFormat = DEFAULT_LOG_FORMAT + "\n"


def _formatModernEvent(event):
    """Format a "modern" event in the same way as `logging` records."""
    text = twistedModern.formatEvent(event)
    if "log_failure" in event:
        try:
            traceback = event["log_failure"].getTraceback()
        except Exception:
            traceback = "(UNABLE TO OBTAIN TRACEBACK FROM EVENT)\n"
        text = "\n".join((text, traceback))
    level = event.get("log_level")
    system = event.get("log_system")
    if system is None:
        system = event.get("log_namespace")

    return _lineFormat % {
        "levelname": "-" if level is None else level.name,
        "message": "-" if text is None else text.replace("\n", "\n\t"),
        "name": "-" if system is None else system,
    }


# Those levels for which we should emit log events.
_filterByLevels = frozenset()


def _filterByLevel(event):
    """Only log if event's level is in `_filterByLevels`."""
    if event.get("log_level") in _filterByLevels:
        return twistedModern.PredicateResult.maybe
    else:
        return twistedModern.PredicateResult.no
