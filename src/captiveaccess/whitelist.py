# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Python wrapper around the firewall's MAC whitelist command.

The command is the only source of truth for which devices may reach the
network. It takes three verbs::

    captive-whitelist add <mac>
    captive-whitelist remove <mac>
    captive-whitelist list

The whitelist may be edited by other tools at any time, so nothing here is
cached: every question is put to the command afresh.
"""

__all__ = [
    "DEFAULT_WHITELIST_COMMAND",
    "parse_whitelist",
    "Whitelist",
]

from twisted.internet.defer import inlineCallbacks
from twisted.internet.threads import deferToThread
from twisted.logger import Logger

from captiveaccess.exceptions import ExternalToolError
from captiveaccess.logger import get_access_logger
from captiveaccess.utils import sudo, unique
from captiveaccess.utils.network import is_canonical_mac, normalise_mac
from captiveaccess.utils.shell import call_and_check, DEFAULT_TOOL_TIMEOUT

accesslog = get_access_logger("whitelist")
log = Logger()

DEFAULT_WHITELIST_COMMAND = "captive-whitelist"


def parse_whitelist(output):
    """Return the MAC addresses in the output of the ``list`` verb.

    Headers and other decoration are dropped: only lines holding nothing but
    a colon-separated MAC address, in either case, count.
    """
    macs = (line.strip().lower() for line in output.splitlines())
    return unique(mac for mac in macs if is_canonical_mac(mac))


class Whitelist:
    """Wrap up the whitelist command in Python.

    :param command: The whitelist executable.
    :param timeout: Seconds before a call to `command` is killed.
    :param use_sudo: Whether to run `command` with ``sudo -n``.
    """

    tool = "whitelist"

    def __init__(
        self,
        command=DEFAULT_WHITELIST_COMMAND,
        timeout=DEFAULT_TOOL_TIMEOUT,
        use_sudo=False,
    ):
        self.command = command
        self.timeout = timeout
        self.use_sudo = use_sudo

    def _run(self, *args):
        command = [self.command, *args]
        if self.use_sudo:
            command = sudo(command)
        return deferToThread(
            call_and_check, command, tool=self.tool, timeout=self.timeout
        )

    @inlineCallbacks
    def list(self):
        """Return the MAC addresses currently whitelisted.

        :return: A `Deferred` firing with a list of MAC addresses in
            canonical form.
        """
        output = yield self._run("list")
        return parse_whitelist(output)

    @inlineCallbacks
    def is_member(self, mac_address):
        """Return whether `mac_address` is currently whitelisted."""
        mac_address = normalise_mac(mac_address)
        members = yield self.list()
        return mac_address in members

    @inlineCallbacks
    def add(self, mac_address):
        """Whitelist `mac_address`.

        Adding a MAC address that is already whitelisted is left to the
        command, which treats it as success.

        :raise InvalidMacFormat: Before the command is run, if
            `mac_address` is not a MAC address.
        :raise ExternalToolError: If the command fails.
        """
        mac_address = normalise_mac(mac_address)
        yield self._run("add", mac_address)
        accesslog.info("MAC address whitelisted: %s", mac_address)

    @inlineCallbacks
    def remove(self, mac_address):
        """Remove `mac_address` from the whitelist.

        Removing a MAC address that is not whitelisted succeeds: if the
        command complains, the whitelist is listed and the complaint is
        ignored when the address is indeed absent.

        :raise InvalidMacFormat: Before the command is run, if
            `mac_address` is not a MAC address.
        :raise ExternalToolError: If the command fails and the address is,
            or may still be, whitelisted.
        """
        mac_address = normalise_mac(mac_address)
        try:
            yield self._run("remove", mac_address)
        except ExternalToolError as error:
            if error.timed_out:
                raise
            try:
                members = yield self.list()
            except ExternalToolError:
                raise error from None
            if mac_address in members:
                raise error
            log.debug(
                "Ignoring failed removal of {mac}; it is not whitelisted.",
                mac=mac_address,
            )
        else:
            accesslog.info(
                "MAC address removed from whitelist: %s", mac_address
            )
