import logging
import unittest
from unittest.mock import patch

from floodline.core.config import settings
from floodline.core.logging import NOISY_LOGGERS, add_service, resolve_level, setup_logging


class TestLoggingSetup(unittest.TestCase):

    def setUp(self):
        # Put the process back to the configured level afterwards
        self.addCleanup(setup_logging)

    def test_level_names(self):
        self.assertEqual(resolve_level("debug"), logging.DEBUG)
        self.assertEqual(resolve_level("WARNING"), logging.WARNING)
        self.assertEqual(resolve_level("nonsense"), logging.INFO)

    def test_events_tagged_with_service(self):
        event = add_service(None, "info", {"event": "gov_sync_started"})
        self.assertEqual(event["service"], "floodline")

    @patch.object(settings, "LOG_LEVEL", "INFO")
    def test_third_party_chatter_quieted_at_info(self):
        setup_logging()
        self.assertEqual(logging.getLogger().level, logging.INFO)
        for name in NOISY_LOGGERS:
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)

    @patch.object(settings, "LOG_LEVEL", "DEBUG")
    def test_debug_lets_everything_through(self):
        setup_logging()
        self.assertEqual(logging.getLogger("httpx").level, logging.DEBUG)

    @patch.object(settings, "LOG_LEVEL", "ERROR")
    def test_noisy_loggers_never_louder_than_root(self):
        setup_logging()
        self.assertEqual(logging.getLogger("sqlalchemy.engine").level, logging.ERROR)


if __name__ == "__main__":
    unittest.main()
