# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Find the MAC address of the device behind a request.

A `MACResolver` holds an ordered chain of strategies and asks each in turn;
the first one to name a MAC address wins. The usual chain is:

1. `ClaimedMACStrategy`: the address forwarded by a trusted upstream
   device in a request header. This is taken on trust: it is NOT checked
   against the neighbour table, so anyone who can reach the portal without
   passing through that device can claim any MAC address. Deployments
   without such a device should turn `trust_mac_header` off.

2. `NeighbourTableStrategy`: the operating system's live ARP table.

3. `LeaseTableStrategy`: the DHCP server's leases file.

Resolution changes nothing; it only reads.
"""

__all__ = [
    "ClaimedMACStrategy",
    "ClientRequest",
    "DEFAULT_MAC_HEADER",
    "LeaseTableStrategy",
    "MACResolver",
    "make_strategies",
    "NeighbourTableStrategy",
]

from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from netaddr import IPAddress
from twisted.internet.defer import inlineCallbacks, maybeDeferred, succeed
from twisted.logger import Logger
from zope.interface import implementer

from captiveaccess.exceptions import ExternalToolError
from captiveaccess.interfaces import IMACResolverStrategy
from captiveaccess.logger import get_access_logger
from captiveaccess.utils.network import normalise_ip, normalise_mac

accesslog = get_access_logger("resolver")
log = Logger()

DEFAULT_MAC_HEADER = "X-MAC-Address"


class ClientRequest(NamedTuple):
    """The parts of an inbound request that matter here."""

    client_ip: str
    headers: Mapping[str, str] = MappingProxyType({})

    def get_header(self, name: str) -> Optional[str]:
        """Return the value of header `name`, ignoring case, or `None`."""
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


@implementer(IMACResolverStrategy)
class ClaimedMACStrategy:
    """Believe the MAC address claimed on the client's behalf."""

    name = "claimed"

    def try_resolve(self, client_ip, claimed_mac=None):
        if not claimed_mac:
            return succeed(None)
        # A malformed claim is refused rather than passed over.
        return maybeDeferred(normalise_mac, claimed_mac)


@implementer(IMACResolverStrategy)
class NeighbourTableStrategy:
    """Look the client up in the live neighbour table.

    The table only holds IPv4 bindings, so IPv6 clients are passed over.
    """

    name = "neighbours"

    def __init__(self, table):
        self.table = table

    def try_resolve(self, client_ip, claimed_mac=None):
        if client_ip is None:
            return succeed(None)
        if IPAddress(client_ip).version != 4:
            log.debug(
                "Not looking up IPv6 client {ip} in the neighbour table.",
                ip=client_ip,
            )
            return succeed(None)
        return self.table.find_mac(client_ip)


@implementer(IMACResolverStrategy)
class LeaseTableStrategy:
    """Look the client up in the DHCP leases file."""

    name = "leases"

    def __init__(self, lease_file):
        self.lease_file = lease_file

    def try_resolve(self, client_ip, claimed_mac=None):
        if client_ip is None:
            return succeed(None)
        return self.lease_file.find_mac(client_ip)


def make_strategies(table, lease_file, *, trust_claims=True):
    """Return the usual chain of strategies, most authoritative first.

    :param table: A `NeighbourTable`.
    :param lease_file: A `LeaseFile`.
    :param trust_claims: Whether to believe claimed MAC addresses.
    """
    strategies = [
        NeighbourTableStrategy(table),
        LeaseTableStrategy(lease_file),
    ]
    if trust_claims:
        strategies.insert(0, ClaimedMACStrategy())
    return strategies


class MACResolver:
    """Ask each of `strategies` in turn for the client's MAC address.

    :param strategies: Providers of `IMACResolverStrategy`, in order.
    :param mac_header: The request header carrying a claimed MAC address.
    """

    def __init__(self, strategies, mac_header=DEFAULT_MAC_HEADER):
        self.strategies = list(strategies)
        self.mac_header = mac_header

    @inlineCallbacks
    def resolve(self, client_ip, claimed_mac=None):
        """Return the MAC address of the device at `client_ip`.

        A strategy whose source cannot be read is skipped. If no later
        strategy finds an answer the first such error is raised, since an
        unreadable source is not evidence that there is no answer.

        :return: A `Deferred` firing with the MAC address in canonical
            form, or with `None` if no strategy could find one.
        :raise InvalidMacFormat: If `claimed_mac` is not a MAC address.
        :raise ExternalToolError: If no MAC was found and a source failed.
        """
        try:
            lookup_ip = normalise_ip(client_ip)
        except ValueError:
            # Only a claimed address can help now.
            accesslog.warning("Not a client IP address: %r", client_ip)
            lookup_ip = None
        first_error = None
        for strategy in self.strategies:
            try:
                mac = yield strategy.try_resolve(lookup_ip, claimed_mac)
            except ExternalToolError as error:
                accesslog.warning(
                    "Could not consult %s for %s: %s",
                    strategy.name,
                    client_ip,
                    error,
                )
                if first_error is None:
                    first_error = error
                continue
            if mac is not None:
                accesslog.info(
                    "Found MAC address %s for IP %s (via %s).",
                    mac,
                    client_ip,
                    strategy.name,
                )
                return mac
            log.debug(
                "Strategy {name} found nothing for {ip}.",
                name=strategy.name,
                ip=client_ip,
            )
        if first_error is not None:
            raise first_error
        accesslog.warning(
            "Could not determine MAC address for IP %s.", client_ip
        )
        return None

    def resolve_request(self, request: ClientRequest):
        """Resolve the MAC address of the client behind `request`."""
        return self.resolve(
            request.client_ip, request.get_header(self.mac_header)
        )
