# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Fixtures for tests of network access control."""

__all__ = [
    "AccessConfigurationFixture",
    "TempDirectory",
]

from os import path
import sys

import fixtures
from fixtures import EnvironmentVariableFixture
import yaml

from captiveaccess.config import AccessConfiguration


class TempDirectory(fixtures.TempDir):
    """Create a temporary directory, ensuring Unicode paths."""

    def setUp(self):
        super().setUp()
        if isinstance(self.path, bytes):
            encoding = sys.getfilesystemencoding()
            self.path = self.path.decode(encoding)


class AccessConfigurationFixture(fixtures.Fixture):
    """Write an access configuration file and point the environment at it.

    :ivar path: Full path to the YAML file.
    :ivar environ: The environment variables exported by this fixture.
    """

    configuration = AccessConfiguration

    def __init__(self, **options):
        super().__init__()
        self.options = options

    def setUp(self):
        super().setUp()
        self.path = path.join(
            self.useFixture(TempDirectory()).path,
            path.basename(self.configuration.DEFAULT_FILENAME),
        )
        with open(self.path, "wb") as stream:
            yaml.safe_dump(self.options, stream=stream, encoding="utf-8")
        self.environ = {self.configuration.envvar: self.path}
        for name, value in self.environ.items():
            self.useFixture(EnvironmentVariableFixture(name, value))
