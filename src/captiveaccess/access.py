# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Grant and revoke network access for authenticated devices.

A device is let through the portal by adding its MAC address to the
firewall's whitelist, and shut out again by removing it. The whitelist
command is the system of record; nothing here remembers who was let in.
"""

__all__ = [
    "AccessController",
    "AccessGrant",
    "AccessStatus",
]

from collections import namedtuple

from twisted.internet.defer import inlineCallbacks, maybeDeferred, succeed

from captiveaccess.dhcp.leases import LeaseFile
from captiveaccess.exceptions import ExternalToolError, MacResolutionError
from captiveaccess.logger import get_access_logger
from captiveaccess.resolver import make_strategies, MACResolver
from captiveaccess.utils.arp import NeighbourTable
from captiveaccess.whitelist import Whitelist

accesslog = get_access_logger("access")


# The outcome of a successful grant. Not stored anywhere.
AccessGrant = namedtuple(
    "AccessGrant", ("mac_address", "user_id", "client_ip")
)

# Whether the device behind a request may currently reach the network.
AccessStatus = namedtuple(
    "AccessStatus", ("has_access", "mac_address", "reason")
)

REASON_NOT_DETECTED = "MAC address not detected"
REASON_WHITELISTED = "MAC address is whitelisted"
REASON_NOT_WHITELISTED = "MAC address is not whitelisted"


class AccessController:
    """Decide which devices may pass the portal.

    :param resolver: A `MACResolver`.
    :param whitelist: A `Whitelist`.
    :param neighbour_table: A `NeighbourTable`, for `list_neighbours`.
    :param lease_file: A `LeaseFile`, for `list_leases`.
    :param user_store: A provider of `IUserStore`, or `None`.
    """

    def __init__(
        self,
        resolver,
        whitelist,
        neighbour_table=None,
        lease_file=None,
        user_store=None,
    ):
        self.resolver = resolver
        self.whitelist = whitelist
        self.neighbour_table = neighbour_table
        self.lease_file = lease_file
        self.user_store = user_store

    @classmethod
    def from_configuration(cls, config, user_store=None):
        """Build a controller from an `AccessConfiguration`."""
        timeout = config.tool_timeout
        table = NeighbourTable(config.neighbour_command, timeout=timeout)
        lease_file = LeaseFile(config.leases_file)
        resolver = MACResolver(
            make_strategies(
                table, lease_file, trust_claims=config.trust_mac_header
            ),
            mac_header=config.mac_header,
        )
        whitelist = Whitelist(
            config.whitelist_command,
            timeout=timeout,
            use_sudo=config.whitelist_use_sudo,
        )
        return cls(
            resolver,
            whitelist,
            neighbour_table=table,
            lease_file=lease_file,
            user_store=user_store,
        )

    @inlineCallbacks
    def grant_access(self, request, user_id):
        """Let the device behind `request` through the portal.

        The user store is told about the device first, but only as a
        courtesy: if it fails the grant goes ahead regardless. The
        whitelist, however, must accept the device or nothing is granted.

        :param request: A `ClientRequest`.
        :param user_id: The authenticated user's identity; opaque.
        :return: A `Deferred` firing with an `AccessGrant`.
        :raise MacResolutionError: If the device cannot be identified.
        :raise ExternalToolError: If the whitelist refuses the device, or
            if a source failed while identifying it.
        """
        mac_address = yield self.resolver.resolve_request(request)
        if mac_address is None:
            raise MacResolutionError(request.client_ip)
        if self.user_store is not None:
            yield self._associate(user_id, mac_address)
        yield self.whitelist.add(mac_address)
        accesslog.info(
            "Access granted to %s for user %s (IP %s).",
            mac_address,
            user_id,
            request.client_ip,
        )
        return AccessGrant(mac_address, user_id, request.client_ip)

    def _associate(self, user_id, mac_address):
        d = maybeDeferred(
            self.user_store.associate_mac, user_id, mac_address
        )

        def eb_associate(failure):
            accesslog.error(
                "Could not record MAC address %s for user %s: %s",
                mac_address,
                user_id,
                failure.getErrorMessage(),
            )

        return d.addErrback(eb_associate)

    @inlineCallbacks
    def revoke_access(self, mac_address):
        """Shut the device `mac_address` out again.

        Revoking a device that has no access succeeds.

        :raise InvalidMacFormat: If `mac_address` is not a MAC address.
        :raise ExternalToolError: If the whitelist could not be changed.
        """
        yield self.whitelist.remove(mac_address)
        accesslog.info("Access revoked for %s.", mac_address)

    def get_client_mac(self, request):
        """Return the MAC address of the device behind `request`.

        :return: A `Deferred` firing with a MAC address or `None`.
        """
        return self.resolver.resolve_request(request)

    @inlineCallbacks
    def get_access_status(self, request):
        """Report whether the device behind `request` may pass.

        :return: A `Deferred` firing with an `AccessStatus`.
        """
        mac_address = yield self.resolver.resolve_request(request)
        if mac_address is None:
            return AccessStatus(False, None, REASON_NOT_DETECTED)
        has_access = yield self.whitelist.is_member(mac_address)
        if has_access:
            return AccessStatus(True, mac_address, REASON_WHITELISTED)
        else:
            return AccessStatus(False, mac_address, REASON_NOT_WHITELISTED)

    def list_whitelisted(self):
        """Return the whitelisted MAC addresses, or `[]` if unavailable."""
        return self._degrade(self.whitelist.list(), "whitelist")

    def list_leases(self):
        """Return the active DHCP leases, or `[]` if unavailable."""
        if self.lease_file is None:
            return succeed([])
        return self._degrade(self.lease_file.get_leases(), "leases")

    def list_neighbours(self):
        """Return the neighbour table, or `[]` if unavailable."""
        if self.neighbour_table is None:
            return succeed([])
        return self._degrade(
            self.neighbour_table.get_entries(), "neighbour table"
        )

    def _degrade(self, d, what):
        def eb_unavailable(failure):
            failure.trap(ExternalToolError)
            accesslog.warning(
                "Could not read the %s: %s", what, failure.value
            )
            return []

        return d.addErrback(eb_unavailable)
