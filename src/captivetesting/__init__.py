# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Testing infrastructure for the captive portal's access control."""

from os import environ
from warnings import filterwarnings


def get_testing_timeout(timeout=None):
    wait_time = (
        environ.get("CAPTIVE_WAIT_FOR_REACTOR", 120.0)
        if timeout is None
        else timeout
    )
    return float(wait_time)


# get_testing_timeout is a test helper, not a test.
get_testing_timeout.__test__ = False

# Enable some warnings that we ought to pay heed to.
filterwarnings("error", category=BytesWarning, module=r"^captive")
filterwarnings("default", category=DeprecationWarning, module=r"^captive")

# Ignore noisy deprecation warnings inside Twisted.
filterwarnings("ignore", category=DeprecationWarning, module=r"^twisted\b")
