# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Tests for logging configuration."""

import io
import logging

from twisted.logger import LogLevel

from captiveaccess import logger
from captiveaccess.logger import _twisted as logger_twisted
from captiveaccess.logger._accesslog import AccessLogger, get_access_logger
from captiveaccess.logger._logging import (
    get_logging_config,
    get_logging_level,
)
from captiveaccess.logger._twisted import (
    _formatModernEvent,
    EventLogger,
    get_twisted_logging_level,
    set_twisted_verbosity,
)
from captivetesting.factory import factory
from captivetesting.testcase import AccessTestCase


class TestGetAccessLogger(AccessTestCase):
    def test_names_logger_by_tag(self):
        tag = factory.make_name("tag")
        accesslog = get_access_logger(tag)
        self.assertEqual("captiveaccess.%s" % tag, accesslog.name)
        self.assertIsInstance(accesslog, AccessLogger)

    def test_root_access_logger(self):
        self.assertEqual("captiveaccess", get_access_logger().name)

    def test_refuses_to_log_exceptions(self):
        accesslog = get_access_logger(factory.make_name("tag"))
        self.assertRaises(
            NotImplementedError, accesslog.exception, "Oops"
        )

    def test_returns_same_logger_for_same_tag(self):
        tag = factory.make_name("tag")
        self.assertIs(get_access_logger(tag), get_access_logger(tag))


class TestVerbosityLevels(AccessTestCase):
    def test_logging_levels(self):
        self.assertEqual(
            [logging.ERROR, logging.WARN, logging.INFO, logging.DEBUG],
            [get_logging_level(verbosity) for verbosity in range(4)],
        )

    def test_logging_levels_are_clamped(self):
        self.assertEqual(logging.ERROR, get_logging_level(-5))
        self.assertEqual(logging.DEBUG, get_logging_level(99))

    def test_twisted_levels(self):
        self.assertEqual(
            [LogLevel.error, LogLevel.warn, LogLevel.info, LogLevel.debug],
            [get_twisted_logging_level(verbosity) for verbosity in range(4)],
        )

    def test_twisted_levels_are_clamped(self):
        self.assertEqual(LogLevel.error, get_twisted_logging_level(-1))
        self.assertEqual(LogLevel.debug, get_twisted_logging_level(4))

    def test_logging_config_sets_package_level(self):
        config = get_logging_config(3)
        self.assertEqual(
            logging.DEBUG, config["loggers"]["captiveaccess"]["level"]
        )
        self.assertEqual(
            "%(name)s: [%(levelname)s] %(message)s",
            config["formatters"]["stdout"]["format"],
        )


class TestTwistedLogging(AccessTestCase):
    def setUp(self):
        super().setUp()
        self.patch(
            logger_twisted, "_filterByLevels", logger_twisted._filterByLevels
        )

    def test_format_matches_standard_logging(self):
        event = {
            "log_format": "Found {mac}.",
            "mac": "aa:bb:cc:dd:ee:ff",
            "log_level": LogLevel.info,
            "log_namespace": "captiveaccess.resolver",
        }
        self.assertEqual(
            "captiveaccess.resolver: [info] Found aa:bb:cc:dd:ee:ff.\n",
            _formatModernEvent(event),
        )

    def test_format_indents_continuation_lines(self):
        event = {"log_format": "one\ntwo", "log_level": LogLevel.warn}
        self.assertEqual("-: [warn] one\n\ttwo\n", _formatModernEvent(event))

    def test_verbosity_filters_events(self):
        set_twisted_verbosity(1)
        stream = io.StringIO()
        observer = EventLogger(stream)
        observer({"log_format": "hidden", "log_level": LogLevel.info})
        observer({"log_format": "shown", "log_level": LogLevel.warn})
        self.assertEqual("-: [warn] shown\n", stream.getvalue())

    def test_debug_verbosity_shows_everything(self):
        set_twisted_verbosity(3)
        stream = io.StringIO()
        observer = EventLogger(stream)
        observer({"log_format": "detail", "log_level": LogLevel.debug})
        self.assertEqual("-: [debug] detail\n", stream.getvalue())


class TestConfigure(AccessTestCase):
    def setUp(self):
        super().setUp()
        self.patch(logger, "current_verbosity", logger.current_verbosity)
        self.patch(logger, "make_logging_level_names_consistent")
        self.configure_twisted = self.patch(
            logger, "configure_twisted_logging"
        )
        self.configure_standard = self.patch(
            logger, "configure_standard_logging"
        )
        self.set_twisted = self.patch(logger, "set_twisted_verbosity")
        self.set_standard = self.patch(logger, "set_standard_verbosity")

    def test_configure_defaults_to_normal_verbosity(self):
        logger.configure()
        self.configure_twisted.assert_called_once_with(2)
        self.configure_standard.assert_called_once_with(2)
        self.assertEqual(2, logger.current_verbosity)

    def test_configure_with_verbosity(self):
        logger.configure(3)
        self.configure_twisted.assert_called_once_with(3)
        self.configure_standard.assert_called_once_with(3)
        self.assertEqual(3, logger.current_verbosity)

    def test_set_verbosity(self):
        logger.set_verbosity(0)
        self.set_twisted.assert_called_once_with(0)
        self.set_standard.assert_called_once_with(0)
        self.assertEqual(0, logger.current_verbosity)
