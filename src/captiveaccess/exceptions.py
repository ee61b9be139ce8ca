# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Errors raised by the network access subsystem."""

__all__ = [
    "AccessControlError",
    "ExternalToolError",
    "InvalidMacFormat",
    "MacResolutionError",
]

from shlex import quote
from string import printable
from subprocess import CalledProcessError

# A table suitable for use with bytes.translate() to replace each
# non-printable and non-ASCII character with a question mark.
non_printable_replace_table = "".join(
    chr(i) if chr(i) in printable else "?" for i in range(0xFF + 0x01)
).encode("ascii")


class AccessControlError(Exception):
    """Base class for network access errors."""


class InvalidMacFormat(AccessControlError, ValueError):
    """The given value is not a MAC address."""

    def __init__(self, value):
        super().__init__("Invalid MAC address format: %r" % (value,))
        self.value = value


class MacResolutionError(AccessControlError):
    """No MAC address could be found for a client."""

    def __init__(self, client_ip):
        super().__init__(
            "Could not determine MAC address for client %s" % client_ip
        )
        self.client_ip = client_ip


class ExternalToolError(AccessControlError, CalledProcessError):
    """Raised when a collaborator could not be read or invoked.

    `tool` names the collaborator: ``neighbours``, ``leases`` or
    ``whitelist``. Unlike `CalledProcessError`, `__str__()` includes the
    output of the failed process, keeping only printable characters.
    """

    def __init__(self, tool, returncode, cmd, output=None, timed_out=False):
        CalledProcessError.__init__(self, returncode, cmd, output=output)
        self.tool = tool
        self.timed_out = timed_out

    @staticmethod
    def _to_unicode(string):
        if isinstance(string, bytes):
            return string.decode("ascii", "replace")
        else:
            return str(string)

    @staticmethod
    def _to_ascii(string, table=non_printable_replace_table):
        if isinstance(string, bytes):
            return string.translate(table)
        elif isinstance(string, str):
            return string.encode("ascii", "replace").translate(table)
        else:
            return str(string).encode("ascii", "replace").translate(table)

    def __str__(self):
        if isinstance(self.cmd, (list, tuple)):
            cmd = " ".join(quote(self._to_unicode(part)) for part in self.cmd)
        else:
            cmd = self._to_unicode(self.cmd)
        output = "" if self.output is None else self._to_unicode(self.output)
        if self.timed_out:
            return "%s: command `%s` timed out:\n%s" % (
                self.tool,
                cmd,
                output,
            )
        if self.returncode is None:
            # Not a process; a file that could not be read.
            return "%s: could not read %s: %s" % (self.tool, cmd, output)
        return "%s: command `%s` returned non-zero exit status %d:\n%s" % (
            self.tool,
            cmd,
            self.returncode,
            output,
        )

    @property
    def output_as_ascii(self):
        """The command's output as printable ASCII.

        Non-printable and non-ASCII characters are filtered out.
        """
        return self._to_ascii(b"" if self.output is None else self.output)

    @property
    def output_as_unicode(self):
        """The command's output as Unicode text.

        Invalid Unicode characters are filtered out.
        """
        return self._to_unicode("" if self.output is None else self.output)
