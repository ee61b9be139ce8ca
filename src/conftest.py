# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

import pytest


@pytest.fixture(autouse=True)
def isolate_configuration(monkeypatch):
    # Never read the host's configuration during tests.
    monkeypatch.delenv("CAPTIVE_ACCESS_CONFIG", raising=False)
    yield
