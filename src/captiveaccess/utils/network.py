# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Generic helpers for `netaddr` and network-related types."""

__all__ = [
    "format_eui",
    "is_canonical_mac",
    "is_mac",
    "normalise_ip",
    "normalise_mac",
    "same_ip",
]

import re

from netaddr import EUI, IPAddress
from netaddr.core import AddrFormatError

from captiveaccess.exceptions import InvalidMacFormat

# Six octets, each separated by a colon or a hyphen.
MAC_OCTETS_RE = re.compile(r"^([0-9a-f]{2}[-:]){5}[0-9a-f]{2}$", re.I)
# Twelve hex digits with no separator at all.
MAC_BARE_RE = re.compile(r"^[0-9a-f]{12}$", re.I)
# Three groups of four digits, as Cisco writes them.
MAC_DOTTED_RE = re.compile(r"^([0-9a-f]{4}\.){2}[0-9a-f]{4}$", re.I)
# The only form handed to the whitelist or returned to callers.
CANONICAL_MAC_RE = re.compile(r"^([0-9a-f]{2}:){5}[0-9a-f]{2}$")


def format_eui(eui):
    """Returns the specified netaddr.EUI object formatted as a colon-separated
    lowercase MAC address."""
    return str(eui).replace("-", ":").lower()


def is_mac(mac: str) -> bool:
    """Return whether or not the string is a MAC address."""
    mac = str(mac)
    return (
        MAC_OCTETS_RE.fullmatch(mac) is not None
        or MAC_BARE_RE.fullmatch(mac) is not None
        or MAC_DOTTED_RE.fullmatch(mac) is not None
    )


def is_canonical_mac(mac: str) -> bool:
    """Return whether `mac` is already in canonical form."""
    if not isinstance(mac, str):
        return False
    return CANONICAL_MAC_RE.fullmatch(mac) is not None


def normalise_mac(mac: str) -> str:
    """Return `mac` as six colon-separated lowercase octets.

    Letter case is ignored and octets may be separated by colons or hyphens,
    not separated at all, or grouped in threes of four digits. Nothing else
    is accepted: short octets are not padded and surrounding whitespace is
    not trimmed.

    :raise InvalidMacFormat: If `mac` is not a MAC address.
    """
    if not isinstance(mac, str) or not is_mac(mac):
        raise InvalidMacFormat(mac)
    digits = re.sub(r"[-:.]", "", mac)
    return format_eui(EUI(int(digits, 16), version=48))


def normalise_ip(ip) -> str:
    """Return `ip` in its compact textual form.

    IPv4 addresses that arrive mapped into IPv6, as dual-stack listeners
    report them, are unwrapped to plain IPv4.

    :raise ValueError: If `ip` is not an IP address.
    """
    try:
        address = IPAddress(ip)
    except (AddrFormatError, TypeError, ValueError) as error:
        raise ValueError("Invalid IP address: %r" % (ip,)) from error
    if address.version == 6 and address.is_ipv4_mapped():
        address = address.ipv4()
    return str(address)


def same_ip(ip1, ip2) -> bool:
    """Return whether `ip1` and `ip2` are the same address.

    Anything that is not an IP address matches nothing.
    """
    try:
        return normalise_ip(ip1) == normalise_ip(ip2)
    except ValueError:
        return False
