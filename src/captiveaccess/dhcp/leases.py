# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Read the DHCP server's leases file.

The file is read afresh on every query, in a thread, so that the reactor
is never blocked on disk and the answer always reflects what the DHCP
server last wrote.
"""

__all__ = [
    "DEFAULT_LEASES_FILE",
    "LeaseFile",
    "read_leases_file",
]

from twisted.internet.defer import inlineCallbacks
from twisted.internet.threads import deferToThread

from captiveaccess.dhcp.leases_parser import find_lease_for_ip, parse_leases
from captiveaccess.exceptions import ExternalToolError
from captiveaccess.logger import get_access_logger

accesslog = get_access_logger("dhcp.leases")

DEFAULT_LEASES_FILE = "/var/lib/dhcp/dhcpd.leases"


def read_leases_file(path):
    """Return the contents of the leases file at `path`.

    :raise ExternalToolError: If the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fd:
            return fd.read()
    except OSError as error:
        raise ExternalToolError(
            "leases", None, path, output=error.strerror
        ) from error


class LeaseFile:
    """The ISC dhcpd leases file at `path`."""

    tool = "leases"

    def __init__(self, path=DEFAULT_LEASES_FILE):
        self.path = path

    @inlineCallbacks
    def get_leases(self):
        """Return every active lease in the file, in file order.

        :return: A `Deferred` firing with a list of `LeaseRecord`.
        """
        contents = yield deferToThread(read_leases_file, self.path)
        return parse_leases(contents)

    @inlineCallbacks
    def find_mac(self, ip):
        """Return the MAC address most recently leased `ip`, or `None`."""
        leases = yield self.get_leases()
        lease = find_lease_for_ip(leases, ip)
        if lease is None:
            accesslog.debug("No active lease for %s in %s.", ip, self.path)
            return None
        return lease.mac
