# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Test object factories."""

from itertools import islice, repeat
import os.path
import random
import string

from netaddr import IPAddress, IPNetwork

from captiveaccess.exceptions import ExternalToolError

# Occasionally a parameter needs separate values for None and "no value
# given, make one up."  In that case, use NO_VALUE as the default and
# accept None as a normal value.
NO_VALUE = object()


class Factory:

    random_letters = map(
        random.choice, repeat(string.ascii_letters + string.digits)
    )

    random_letters_with_spaces = map(
        random.choice, repeat(string.ascii_letters + string.digits + " ")
    )

    random_octets = iter(lambda: random.randint(0, 255), None)

    def make_string(self, size=10, spaces=False, prefix=""):
        """Return a `str` filled with random ASCII letters or digits."""
        source = (
            self.random_letters_with_spaces if spaces else self.random_letters
        )
        return prefix + "".join(islice(source, size))

    def make_name(self, prefix=None, sep="-", size=6):
        """Generate a random name.

        :param prefix: Optional prefix.  Pass one to help make test failures
            and tracebacks easier to read!  If you don't, you might as well
            use `make_string`.
        :param sep: Separator that will go between the prefix and the random
            portion of the name.  Defaults to a dash.
        :param size: Length of the random portion of the name.
        :return: A randomized unicode string.
        """
        if prefix is None:
            return self.make_string(size=size)
        else:
            return prefix + sep + self.make_string(size=size)

    def pick_bool(self):
        """Return an arbitrary Boolean value (`True` or `False`)."""
        return random.choice((True, False))

    def make_ipv4_address(self):
        octets = list(islice(self.random_octets, 4))
        if octets[0] == 0:
            octets[0] = 1
        return "%d.%d.%d.%d" % tuple(octets)

    def make_ipv6_address(self):
        # We return from the fc00::/7 space because that's a private
        # space and shouldn't cause problems of addressing the outside
        # world.
        network = IPNetwork("fc00::/7")
        random_address_index = random.randint(0, network.size - 1)
        return str(IPAddress(network[random_address_index]))

    def make_mac_address(self, delimiter=":", padding=True):
        assert isinstance(delimiter, str)
        octets = islice(self.random_octets, 6)
        return delimiter.join(
            format(octet, "02x" if padding else "x") for octet in octets
        )

    def make_file(self, location, name=None, contents=None):
        """Create a file, and write data to it.

        Prefer the eponymous convenience wrapper in
        :class:`captivetesting.testcase.AccessTestCase`.  It creates a
        temporary directory and arranges for its eventual cleanup.

        :param location: Directory.  Use a temporary directory for this, and
            make sure it gets cleaned up after the test!
        :param name: Optional name for the file.  If none is given, one will
            be made up.
        :param contents: Optional contents for the file. If omitted, some
            arbitrary ASCII text will be written. If Unicode content is
            provided, it will be encoded with UTF-8.
        :return: Path to the file.
        """
        if name is None:
            name = self.make_string()
        if contents is None:
            contents = self.make_string().encode("ascii")
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        path = os.path.join(location, name)
        with open(path, "wb") as f:
            f.write(contents)
        return path

    def make_lease_block(
        self, ip=None, mac=NO_VALUE, binding_state="active", extra=()
    ):
        """Return the text of one lease block from an ISC dhcpd leases file.

        Pass `None` for `mac` or `binding_state` and the corresponding
        statement is left out.
        """
        if ip is None:
            ip = self.make_ipv4_address()
        if mac is NO_VALUE:
            mac = self.make_mac_address()
        lines = ["lease %s {" % ip, "  starts 4 2026/10/15 08:02:11;"]
        if binding_state is not None:
            lines.append("  binding state %s;" % binding_state)
            lines.append("  next binding state free;")
        if mac is not None:
            lines.append("  hardware ethernet %s;" % mac)
        lines.extend("  %s" % line for line in extra)
        lines.append("}")
        return "\n".join(lines) + "\n"

    def make_neighbour_line(self, ip=None, mac=None, interface=None):
        """Return one line of ``arp -an`` output."""
        if ip is None:
            ip = self.make_ipv4_address()
        if mac is None:
            mac = self.make_mac_address()
        if interface is None:
            interface = self.make_name("eth", sep="")
        return "? (%s) at %s [ether] on %s" % (ip, mac, interface)

    def make_ExternalToolError(
        self, tool=None, returncode=1, timed_out=False
    ):
        if tool is None:
            tool = random.choice(("neighbours", "leases", "whitelist"))
        return ExternalToolError(
            tool,
            returncode,
            [self.make_name("command"), self.make_name("arg")],
            output=self.make_string(spaces=True),
            timed_out=timed_out,
        )


# Create factory singleton.
factory = Factory()
