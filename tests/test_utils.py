"""
Unit tests for utility helpers.
"""

import io
import logging
import tempfile
import unittest
from pathlib import Path

from location_analyzer.utils.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Tests for logging setup."""

    def setUp(self):
        root = logging.getLogger()
        self.saved_handlers = list(root.handlers)
        self.saved_level = root.level
        self.saved_package_level = logging.getLogger(PACKAGE_LOGGER).level

    def tearDown(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            root.addHandler(handler)
        root.setLevel(self.saved_level)
        logging.getLogger(PACKAGE_LOGGER).setLevel(self.saved_package_level)

    def test_verbose_logs_debug_to_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = Path(tmpdir) / "logs" / "analyzer.log"

            package_logger = setup_logging(verbose=True, log_file=log_file, stream=io.StringIO())
            get_logger("location_analyzer.test").debug("hello from test")
            for handler in logging.getLogger().handlers:
                handler.flush()

            self.assertEqual(package_logger.level, logging.DEBUG)
            self.assertTrue(any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers))
            self.assertIn("hello from test", log_file.read_text(encoding="utf-8"))

            for handler in list(logging.getLogger().handlers):
                logging.getLogger().removeHandler(handler)
                handler.close()

    def test_quiet_by_default(self):
        stream = io.StringIO()

        setup_logging(stream=stream)
        get_logger("location_analyzer.test").info("progress")
        get_logger("location_analyzer.test").warning("retrying")

        output = stream.getvalue()
        self.assertNotIn("progress", output)
        self.assertIn("retrying", output)

    def test_verbose_does_not_enable_transport_debug(self):
        stream = io.StringIO()

        setup_logging(verbose=True, stream=stream)
        logging.getLogger("urllib3.connectionpool").debug("Starting new HTTPS connection")

        self.assertEqual(logging.getLogger("urllib3").level, logging.WARNING)
        self.assertNotIn("Starting new HTTPS connection", stream.getvalue())

    def test_get_logger_namespaces_foreign_names(self):
        self.assertEqual(get_logger("__main__").name, "location_analyzer.__main__")
        self.assertEqual(get_logger("location_analyzer.cli").name, "location_analyzer.cli")


if __name__ == "__main__":
    unittest.main()
