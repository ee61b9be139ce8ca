# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Testing helpers for Twisted code."""

__all__ = [
    "always_fail_with",
    "always_succeed_with",
    "TwistedLoggerFixture",
]

from copy import copy

from fixtures import Fixture
from testtools.content import Content, UTF8_TEXT
from testtools.monkey import patch
from twisted.internet import defer
from twisted.logger import formatEvent, globalLogPublisher
from twisted.python import log


class TwistedLoggerFixture(Fixture):
    """Capture all Twisted logging.

    Temporarily replaces all log observers.
    """

    def __init__(self):
        super().__init__()
        self.events = []

    @property
    def messages(self):
        """Return a list of events formatted with `t.logger.formatEvent`.

        This returns a list of *strings*, not event dictionaries.
        """
        return [formatEvent(event) for event in self.events]

    def getContent(self):
        """Return a `Content` instance for this fixture."""

        def render(events=self.events):
            for event in events:
                rendered = formatEvent(event)
                if rendered is not None:
                    yield rendered.encode("utf-8")

        return Content(UTF8_TEXT, render)

    def setUp(self):
        super().setUp()
        # First remove all observers via the legacy API.
        for observer in list(log.theLogPublisher.observers):
            self.addCleanup(log.theLogPublisher.addObserver, observer)
            log.theLogPublisher.removeObserver(observer)
        # Now remove any remaining modern observers.
        self.addCleanup(patch(globalLogPublisher, "_observers", []))
        # Now add our observer, again via the legacy API. This ensures that
        # it's wrapped with whatever legacy wrapper we've installed.
        self.addCleanup(log.theLogPublisher.removeObserver, self.events.append)
        log.theLogPublisher.addObserver(self.events.append)


def always_succeed_with(result):
    """Return a callable that always returns a successful Deferred.

    The callable allows (and ignores) all arguments, and returns a shallow
    `copy` of `result`.
    """

    def always_succeed(*args, **kwargs):
        return defer.succeed(copy(result))

    return always_succeed


def always_fail_with(result):
    """Return a callable that always returns a failed Deferred.

    The callable allows (and ignores) all arguments, and returns a shallow
    `copy` of `result`.
    """

    def always_fail(*args, **kwargs):
        return defer.fail(copy(result))

    return always_fail
