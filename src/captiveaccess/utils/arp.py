# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Utilities for reading the operating system's neighbour (ARP) table.

The table is read with ``arp -an``, which prints one line per binding::

    ? (192.168.1.50) at aa:bb:cc:dd:ee:ff [ether] on br-lan

Column positions differ between platforms, so lines are matched by pattern:
an address in parentheses followed by `at` and a 17-character MAC.
"""

__all__ = [
    "NeighbourEntry",
    "NeighbourTable",
    "parse_neighbours",
]

import re
from typing import List, NamedTuple

from twisted.internet.defer import inlineCallbacks
from twisted.internet.threads import deferToThread

from captiveaccess.logger import get_access_logger
from captiveaccess.utils.network import same_ip
from captiveaccess.utils.shell import (
    call_and_check,
    DEFAULT_TOOL_TIMEOUT,
    get_env_with_locale,
)

accesslog = get_access_logger("arp")

# Hosts with no binding yet are shown as "at <incomplete>"; they never match.
re_neighbour = re.compile(
    r"\((?P<ip>[0-9a-f.:]+)\) at (?P<mac>[0-9a-f]{2}(?::[0-9a-f]{2}){5})\b",
    re.IGNORECASE,
)


class NeighbourEntry(NamedTuple):
    """A binding currently observed by the operating system."""

    ip: str
    mac: str
    interface: str


def parse_neighbours(text: str) -> List[NeighbourEntry]:
    """Parse the output of ``arp -an`` into `NeighbourEntry` tuples.

    Lines that do not look like a complete binding are ignored.
    """
    entries = []
    for line in text.splitlines():
        match = re_neighbour.search(line)
        if match is None:
            continue
        entries.append(
            NeighbourEntry(
                ip=match.group("ip"),
                mac=match.group("mac").lower(),
                interface=line.split()[-1],
            )
        )
    return entries


class NeighbourTable:
    """The live neighbour table, read through an external command.

    Nothing is cached; every query runs the command again.

    :param command: The command line that prints the whole table. The
        client's address is appended to it for single lookups.
    :param timeout: Seconds before the command is killed.
    """

    tool = "neighbours"

    def __init__(
        self, command=("arp", "-an"), timeout=DEFAULT_TOOL_TIMEOUT
    ):
        self.command = list(command)
        self.timeout = timeout

    def _run(self, *args):
        return deferToThread(
            call_and_check,
            self.command + list(args),
            tool=self.tool,
            timeout=self.timeout,
            env=get_env_with_locale(locale="C"),
        )

    @inlineCallbacks
    def get_entries(self):
        """Return every complete binding in the table.

        :return: A `Deferred` firing with a list of `NeighbourEntry`.
        """
        output = yield self._run()
        return parse_neighbours(output)

    @inlineCallbacks
    def find_mac(self, ip: str):
        """Return the MAC address bound to `ip`, or `None`.

        If the table lists the address more than once the first binding
        wins.
        """
        output = yield self._run(ip)
        for entry in parse_neighbours(output):
            if same_ip(entry.ip, ip):
                return entry.mac
        accesslog.debug("No neighbour entry for %s.", ip)
        return None
