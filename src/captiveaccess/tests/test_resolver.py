# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Tests for MAC address resolution."""

from unittest.mock import MagicMock

from twisted.internet.defer import inlineCallbacks, succeed
from zope.interface import implementer
from zope.interface.verify import verifyObject

from captiveaccess.exceptions import ExternalToolError, InvalidMacFormat
from captiveaccess.interfaces import IMACResolverStrategy
from captiveaccess.resolver import (
    ClaimedMACStrategy,
    ClientRequest,
    LeaseTableStrategy,
    MACResolver,
    make_strategies,
    NeighbourTableStrategy,
)
from captivetesting import get_testing_timeout
from captivetesting.factory import factory
from captivetesting.testcase import AccessTestCase, AccessTwistedRunTest
from captivetesting.twisted import always_fail_with, always_succeed_with


def fake_source(result=None, error=None):
    """Return something shaped like a `NeighbourTable` or `LeaseFile`."""
    source = MagicMock()
    if error is None:
        source.find_mac.side_effect = always_succeed_with(result)
    else:
        source.find_mac.side_effect = always_fail_with(error)
    return source


class TestClientRequest(AccessTestCase):
    def test_get_header_ignores_case(self):
        mac = factory.make_mac_address()
        request = ClientRequest("10.0.0.1", {"x-mac-address": mac})
        self.assertEqual(mac, request.get_header("X-MAC-Address"))

    def test_get_header_returns_None_when_absent(self):
        request = ClientRequest("10.0.0.1")
        self.assertIsNone(request.get_header("X-MAC-Address"))

    def test_default_headers_are_read_only(self):
        request = ClientRequest("10.0.0.1")
        with self.assertRaises(TypeError):
            request.headers["X-MAC-Address"] = factory.make_mac_address()
        self.assertEqual({}, dict(ClientRequest("10.0.0.2").headers))


class TestStrategies(AccessTestCase):

    run_tests_with = AccessTwistedRunTest.make_factory(
        timeout=get_testing_timeout()
    )

    def test_strategies_provide_interface(self):
        for strategy in make_strategies(fake_source(), fake_source()):
            self.assertTrue(verifyObject(IMACResolverStrategy, strategy))

    def test_make_strategies_orders_most_authoritative_first(self):
        strategies = make_strategies(fake_source(), fake_source())
        self.assertEqual(
            ["claimed", "neighbours", "leases"],
            [strategy.name for strategy in strategies],
        )

    def test_make_strategies_can_distrust_claims(self):
        strategies = make_strategies(
            fake_source(), fake_source(), trust_claims=False
        )
        self.assertEqual(
            ["neighbours", "leases"],
            [strategy.name for strategy in strategies],
        )

    @inlineCallbacks
    def test_claimed_strategy_normalises_claim(self):
        mac = yield ClaimedMACStrategy().try_resolve(
            "10.0.0.1", "AA-BB-CC-DD-EE-FF"
        )
        self.assertEqual("aa:bb:cc:dd:ee:ff", mac)

    @inlineCallbacks
    def test_claimed_strategy_passes_without_claim(self):
        strategy = ClaimedMACStrategy()
        self.assertIsNone((yield strategy.try_resolve("10.0.0.1", None)))
        self.assertIsNone((yield strategy.try_resolve("10.0.0.1", "")))

    @inlineCallbacks
    def test_claimed_strategy_refuses_malformed_claim(self):
        with self.assertRaisesRegex(InvalidMacFormat, "not-a-mac"):
            yield ClaimedMACStrategy().try_resolve("10.0.0.1", "not-a-mac")

    @inlineCallbacks
    def test_neighbour_strategy_asks_table(self):
        ip = factory.make_ipv4_address()
        mac = factory.make_mac_address()
        table = fake_source(mac)
        found = yield NeighbourTableStrategy(table).try_resolve(ip)
        self.assertEqual(mac, found)
        table.find_mac.assert_called_once_with(ip)

    @inlineCallbacks
    def test_lease_strategy_asks_lease_file(self):
        ip = factory.make_ipv4_address()
        mac = factory.make_mac_address()
        lease_file = fake_source(mac)
        found = yield LeaseTableStrategy(lease_file).try_resolve(ip)
        self.assertEqual(mac, found)
        lease_file.find_mac.assert_called_once_with(ip)

    @inlineCallbacks
    def test_table_strategies_skip_missing_ip(self):
        for strategy_class in (NeighbourTableStrategy, LeaseTableStrategy):
            source = fake_source(factory.make_mac_address())
            found = yield strategy_class(source).try_resolve(None)
            self.assertIsNone(found)
            source.find_mac.assert_not_called()

    @inlineCallbacks
    def test_neighbour_strategy_skips_ipv6_client(self):
        table = fake_source(error=factory.make_ExternalToolError())
        strategy = NeighbourTableStrategy(table)
        found = yield strategy.try_resolve(factory.make_ipv6_address())
        self.assertIsNone(found)
        table.find_mac.assert_not_called()


class TestMACResolver(AccessTestCase):

    run_tests_with = AccessTwistedRunTest.make_factory(
        timeout=get_testing_timeout()
    )

    def make_resolver(self, table=None, lease_file=None, **kwargs):
        table = fake_source() if table is None else table
        lease_file = fake_source() if lease_file is None else lease_file
        return MACResolver(make_strategies(table, lease_file, **kwargs))

    @inlineCallbacks
    def test_claim_wins_without_consulting_tables(self):
        table = fake_source(factory.make_mac_address())
        lease_file = fake_source(factory.make_mac_address())
        resolver = self.make_resolver(table, lease_file)
        mac = yield resolver.resolve("10.0.0.1", "AA:BB:CC:DD:EE:FF")
        self.assertEqual("aa:bb:cc:dd:ee:ff", mac)
        table.find_mac.assert_not_called()
        lease_file.find_mac.assert_not_called()

    @inlineCallbacks
    def test_malformed_claim_is_an_error(self):
        table = fake_source(factory.make_mac_address())
        resolver = self.make_resolver(table)
        with self.assertRaisesRegex(InvalidMacFormat, "bogus"):
            yield resolver.resolve("10.0.0.1", "bogus")
        table.find_mac.assert_not_called()

    @inlineCallbacks
    def test_claim_ignored_when_not_trusted(self):
        mac = factory.make_mac_address()
        resolver = self.make_resolver(fake_source(mac), trust_claims=False)
        found = yield resolver.resolve("10.0.0.1", "aa:bb:cc:dd:ee:ff")
        self.assertEqual(mac, found)

    @inlineCallbacks
    def test_neighbour_hit_without_lease(self):
        ip = factory.make_ipv4_address()
        mac = factory.make_mac_address()
        lease_file = fake_source(None)
        resolver = self.make_resolver(fake_source(mac), lease_file)
        found = yield resolver.resolve(ip)
        self.assertEqual(mac, found)
        lease_file.find_mac.assert_not_called()

    @inlineCallbacks
    def test_falls_back_to_leases(self):
        ip = factory.make_ipv4_address()
        mac = factory.make_mac_address()
        table = fake_source(None)
        resolver = self.make_resolver(table, fake_source(mac))
        found = yield resolver.resolve(ip)
        self.assertEqual(mac, found)
        table.find_mac.assert_called_once_with(ip)

    @inlineCallbacks
    def test_returns_None_when_nothing_found(self):
        resolver = self.make_resolver()
        found = yield resolver.resolve(factory.make_ipv4_address())
        self.assertIsNone(found)

    @inlineCallbacks
    def test_looks_up_normalised_ip(self):
        ip = factory.make_ipv4_address()
        table = fake_source(None)
        resolver = self.make_resolver(table)
        yield resolver.resolve("::ffff:" + ip)
        table.find_mac.assert_called_once_with(ip)

    @inlineCallbacks
    def test_ipv6_client_is_looked_up_in_leases_only(self):
        ip = factory.make_ipv6_address()
        mac = factory.make_mac_address()
        table = fake_source(error=factory.make_ExternalToolError())
        lease_file = fake_source(mac)
        resolver = self.make_resolver(table, lease_file)
        found = yield resolver.resolve(ip)
        self.assertEqual(mac, found)
        table.find_mac.assert_not_called()
        lease_file.find_mac.assert_called_once_with(ip)

    @inlineCallbacks
    def test_unknown_ipv6_client_is_not_a_tool_error(self):
        table = fake_source(error=factory.make_ExternalToolError())
        resolver = self.make_resolver(table)
        found = yield resolver.resolve(factory.make_ipv6_address())
        self.assertIsNone(found)

    @inlineCallbacks
    def test_invalid_ip_skips_tables(self):
        table = fake_source(factory.make_mac_address())
        lease_file = fake_source(factory.make_mac_address())
        resolver = self.make_resolver(table, lease_file)
        found = yield resolver.resolve(factory.make_name("ip"))
        self.assertIsNone(found)
        table.find_mac.assert_not_called()
        lease_file.find_mac.assert_not_called()

    @inlineCallbacks
    def test_invalid_ip_still_honours_claim(self):
        resolver = self.make_resolver()
        found = yield resolver.resolve(None, "aa:bb:cc:dd:ee:ff")
        self.assertEqual("aa:bb:cc:dd:ee:ff", found)

    @inlineCallbacks
    def test_source_error_falls_through_to_next_source(self):
        mac = factory.make_mac_address()
        error = factory.make_ExternalToolError("neighbours")
        resolver = self.make_resolver(
            fake_source(error=error), fake_source(mac)
        )
        found = yield resolver.resolve(factory.make_ipv4_address())
        self.assertEqual(mac, found)

    @inlineCallbacks
    def test_source_error_is_not_a_negative_answer(self):
        error = factory.make_ExternalToolError("neighbours", timed_out=True)
        resolver = self.make_resolver(fake_source(error=error))
        with self.assertRaisesRegex(ExternalToolError, "timed out"):
            yield resolver.resolve(factory.make_ipv4_address())

    @inlineCallbacks
    def test_first_source_error_is_raised(self):
        first = factory.make_ExternalToolError("neighbours")
        second = factory.make_ExternalToolError("leases")
        resolver = self.make_resolver(
            fake_source(error=first), fake_source(error=second)
        )
        try:
            yield resolver.resolve(factory.make_ipv4_address())
        except ExternalToolError as error:
            self.assertEqual("neighbours", error.tool)
        else:
            self.fail("ExternalToolError not raised")

    @inlineCallbacks
    def test_strategies_are_tried_in_order(self):
        calls = []

        @implementer(IMACResolverStrategy)
        class Recorder:
            def __init__(self, name, result):
                self.name, self.result = name, result

            def try_resolve(self, client_ip, claimed_mac=None):
                calls.append(self.name)
                return succeed(self.result)

        resolver = MACResolver(
            [
                Recorder("one", None),
                Recorder("two", "00:00:00:00:00:02"),
                Recorder("three", "00:00:00:00:00:03"),
            ]
        )
        found = yield resolver.resolve(factory.make_ipv4_address())
        self.assertEqual("00:00:00:00:00:02", found)
        self.assertEqual(["one", "two"], calls)

    @inlineCallbacks
    def test_resolve_request_reads_configured_header(self):
        header = factory.make_name("X-Header")
        resolver = MACResolver([ClaimedMACStrategy()], mac_header=header)
        request = ClientRequest(
            "10.0.0.1", {header.upper(): "00-11-22-33-44-55"}
        )
        found = yield resolver.resolve_request(request)
        self.assertEqual("00:11:22:33:44:55", found)

    @inlineCallbacks
    def test_resolve_request_uses_client_ip(self):
        ip = factory.make_ipv4_address()
        table = fake_source(None)
        resolver = self.make_resolver(table)
        yield resolver.resolve_request(ClientRequest(ip))
        table.find_mac.assert_called_once_with(ip)

    @inlineCallbacks
    def test_resolution_is_repeatable(self):
        mac = factory.make_mac_address()
        resolver = self.make_resolver(fake_source(mac))
        ip = factory.make_ipv4_address()
        first = yield resolver.resolve(ip)
        second = yield resolver.resolve(ip)
        self.assertEqual(first, second)
