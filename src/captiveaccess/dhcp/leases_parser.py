# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Parser for ISC dhcpd leases file.

The parser is very minimal.  All we really care about is which IP
addresses are currently associated with which respective MAC addresses.
The parser works out no other information than that, and does not
pretend to parse the full format of the leases file faithfully.

A leases file is a log: a renewal appends a new block for the same
address rather than rewriting the old one, so the *last* active block
for an address is the one that counts.
"""

__all__ = [
    "find_lease_for_ip",
    "LeaseRecord",
    "parse_leases",
]

import re
from typing import Iterable, List, NamedTuple, Optional

from captiveaccess.exceptions import InvalidMacFormat
from captiveaccess.utils.network import normalise_mac, same_ip

BINDING_STATE_ACTIVE = "active"

# Each block starts with "lease" or "host" at the beginning of a line.
re_entry_start = re.compile(r"^[ \t]*(lease|host)[ \t]+", re.MULTILINE)


class LeaseRecord(NamedTuple):
    """An active lease of `ip` to the device with hardware address `mac`."""

    ip: str
    mac: str
    binding_state: str = BINDING_STATE_ACTIVE


def _get_statement_value(line):
    """Return the third token of a statement, minus its trailing ';'."""
    tokens = line.split()
    if len(tokens) < 3:
        return None
    return tokens[2].rstrip(";")


def _parse_block(block):
    """Parse a single lease block.

    :return: A `LeaseRecord`, or `None` if the block is incomplete or not
        active.
    """
    lines = block.splitlines()
    if len(lines) == 0:
        return None
    ip = lines[0].split("{", 1)[0].strip()
    mac = state = None
    for line in lines[1:]:
        line = line.strip()
        # Whatever follows the closing brace is outside the lease.
        if line.startswith("}"):
            break
        elif line.startswith("hardware "):
            mac = _get_statement_value(line)
        elif line.startswith("binding state"):
            state = _get_statement_value(line)
    if not ip or mac is None or state != BINDING_STATE_ACTIVE:
        return None
    try:
        mac = normalise_mac(mac)
    except InvalidMacFormat:
        return None
    return LeaseRecord(ip, mac, state)


def parse_leases(leases_contents: str) -> List[LeaseRecord]:
    """Parse contents of a leases file.

    Blocks that lack a hardware address, lack a binding state, or are not
    active are skipped. Malformed text never raises.

    :param leases_contents: Contents (as unicode) of the leases file.
    :return: A list of `LeaseRecord` in file order, with possible
        duplicates for the same IP address.
    """
    # Anything before the first entry is the file's preamble. Host
    # declarations carry a MAC too, but they are not leases.
    parts = re_entry_start.split(leases_contents)[1:]
    leases = (
        _parse_block(block)
        for kind, block in zip(parts[0::2], parts[1::2])
        if kind == "lease"
    )
    return [lease for lease in leases if lease is not None]


def find_lease_for_ip(
    leases: Iterable[LeaseRecord], ip: str
) -> Optional[LeaseRecord]:
    """Return the most recent active lease for `ip`, or `None`.

    :param leases: Records in file order, as returned by `parse_leases`.
    """
    for lease in reversed(list(leases)):
        if same_ip(lease.ip, ip):
            return lease
    return None
