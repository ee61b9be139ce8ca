# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""The access log: a readable account of who was let through, and why."""

import logging


class AccessLogger(logging.getLoggerClass()):
    """A Logger class that doesn't allow you to call exception()."""

    def exception(self, *args, **kwargs):
        raise NotImplementedError(
            "Don't log exceptions to the access log; use a Twisted "
            "logger instead"
        )


def get_access_logger(tag=None):
    """Return an access logger.

    :param tag: A string that will be used to name the logger, in the form
        "captiveaccess.<tag>". If None, the logger is simply named
        "captiveaccess".
    """
    if tag is None:
        logger_name = "captiveaccess"
    else:
        logger_name = "captiveaccess.%s" % tag

    accesslog = logging.getLogger(logger_name)
    # Loggers are created by the `logging` package, so the class is swapped
    # after the fact. Only loggers obtained here are affected.
    accesslog.__class__ = AccessLogger

    return accesslog
