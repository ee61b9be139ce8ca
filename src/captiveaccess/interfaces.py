# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Interfaces for the network access subsystem."""

from zope import interface


class IMACResolverStrategy(interface.Interface):
    """One way of finding out the MAC address behind a client address."""

    name = interface.Attribute("name", "A short name, used in the log.")

    def try_resolve(client_ip, claimed_mac=None):
        """Try to find the MAC address of the device at `client_ip`.

        Must not change any system state.

        :param client_ip: The address the request came from.
        :param claimed_mac: A MAC address claimed on behalf of the client by
            an upstream device, or `None`.
        :return: A `Deferred` firing with a MAC address in canonical form,
            or `None` if this strategy cannot tell.
        """


class IUserStore(interface.Interface):
    """The external store of registered users."""

    def associate_mac(user_id, mac_address):
        """Record that user `user_id` is using the device `mac_address`.

        :return: `None` or a `Deferred`.
        """
