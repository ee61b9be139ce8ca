# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Test executors for network access control."""

__all__ = [
    "AccessRunTest",
    "AccessTwistedRunTest",
    "InvalidTest",
]

import sys
import types

from testtools import runtest, twistedsupport
from twisted.internet import defer
from twisted.internet.defer import Deferred

__unittest = True  # skip this line from traceback in failed tests


class InvalidTest(Exception):
    """Signifies that the test is invalid; it's not a good test."""


def check_for_generator(result):
    if isinstance(result, types.GeneratorType):
        raise InvalidTest(
            "Test returned a generator. Should it be "
            "decorated with inlineCallbacks?"
        )
    else:
        return result


def check_for_deferred(result):
    if isinstance(result, Deferred):
        raise InvalidTest(
            "Test returned a Deferred. The test class needs to define "
            "`run_tests_with` with a runner that understands Twisted, "
            "such as `AccessTwistedRunTest`."
        )
    else:
        return result


class AccessRunTest(runtest.RunTest):
    """A specialisation of testtools' `RunTest`.

    It catches a common problem when writing tests for Twisted: forgetting to
    decorate a test with `inlineCallbacks` that needs it, or forgetting to
    run it with a runner that waits for the `Deferred` it returns.
    """

    def _run_user(self, function, *args, **kwargs):
        try:
            result = function(*args, **kwargs)
            check_for_generator(result)
            check_for_deferred(result)
            return result
        except Exception:
            return self._got_user_exception(sys.exc_info())


class AccessTwistedRunTest(twistedsupport.AsynchronousDeferredRunTest):
    """A specialisation of testtools' `AsynchronousDeferredRunTest`.

    Like `AccessRunTest`, it checks for tests that yield without being
    decorated with `inlineCallbacks`.
    """

    def _run_user(self, function, *args):
        """Override testtools' `_run_user`.

        `_run_user` is used in testtools for running functions in the test
        case that may or may not return a `Deferred`. Here we also check for
        generators, a good sign that a test case (or `setUp`, or `tearDown`)
        is yielding without `inlineCallbacks` to support it.
        """
        d = defer.maybeDeferred(function, *args)
        d.addCallback(check_for_generator)
        d.addErrback(self._got_user_failure)
        return d
