# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Utilities for executing external commands."""

__all__ = [
    "call_and_check",
    "DEFAULT_TOOL_TIMEOUT",
    "get_env_with_locale",
]

import os
from subprocess import PIPE, Popen, TimeoutExpired

from twisted.logger import Logger

from captiveaccess.exceptions import ExternalToolError

log = Logger()

# Seconds an external command may run before it is killed.
DEFAULT_TOOL_TIMEOUT = 10


def call_and_check(command, *, tool, timeout=DEFAULT_TOOL_TIMEOUT, env=None):
    """Execute a command, similar to `subprocess.check_output()`.

    The command is killed if it has not finished within `timeout` seconds.

    :param command: Command line, as a list of strings.
    :param tool: The name of the collaborator being called, for errors.
    :param timeout: Seconds to wait for the command.
    :return: The command's standard output, decoded as UTF-8.
    :raise ExternalToolError: If the command could not be started, returns
        nonzero, or times out.
    """
    if env is None:
        env = get_env_with_locale()
    log.debug("Running {tool} command: {command}", tool=tool, command=command)
    try:
        process = Popen(command, stdout=PIPE, stderr=PIPE, env=env)
    except OSError as error:
        raise ExternalToolError(
            tool, 127, command, output=error.strerror
        ) from error
    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except TimeoutExpired as error:
        process.kill()
        stdout, stderr = process.communicate()
        raise ExternalToolError(
            tool,
            process.returncode,
            command,
            output=stderr.strip(),
            timed_out=True,
        ) from error
    if process.returncode != 0:
        raise ExternalToolError(
            tool, process.returncode, command, output=stderr.strip()
        )
    return stdout.decode("utf-8", "replace")


def get_env_with_locale(environ=os.environ, locale="C.UTF-8"):
    """Return an environment dict with locale vars set (to C.UTF-8 by default).

    The output of tools like `arp` is only parseable in a predictable locale.
    This takes a starting environment, by default that of the current
    process, strips away all locale and language settings (i.e. LC_* and
    LANG) and selects the specified locale in their place.

    :param environ: A base environment to start from. By default this is
        ``os.environ``. It will not be modified.
    :param locale: The locale to set in the environment, 'C.UTF-8' by default.
    """
    environ = {
        name: value
        for name, value in environ.items()
        if not name.startswith("LC_")
    }
    environ.update({"LC_ALL": locale, "LANG": locale, "LANGUAGE": locale})
    return environ
