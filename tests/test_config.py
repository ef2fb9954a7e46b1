import logging
import tempfile
import unittest
from pathlib import Path

from stellar_habits.config import load_settings
from stellar_habits.log import setup_logging


class SettingsTests(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings({})
        self.assertEqual(settings.week_starts_on, 1)
        self.assertEqual(settings.log_level, "WARNING")
        self.assertIsNone(settings.log_file)
        self.assertEqual(settings.data_dir.name, ".stellar-habits")

    def test_environment_overrides(self):
        settings = load_settings({
            "STELLAR_HABITS_WEEK_STARTS_ON": "Sunday",
            "STELLAR_HABITS_DIR": "/tmp/habits",
            "STELLAR_HABITS_LOG_LEVEL": "debug",
            "STELLAR_HABITS_LOG_FILE": "/tmp/habits/app.log",
        })
        self.assertEqual(settings.week_starts_on, 0)
        self.assertEqual(settings.data_dir, Path("/tmp/habits"))
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.log_file, Path("/tmp/habits/app.log"))

    def test_anything_but_sunday_starts_on_monday(self):
        self.assertEqual(load_settings({"STELLAR_HABITS_WEEK_STARTS_ON": "saturday"}).week_starts_on, 1)


class LoggingSetupTests(unittest.TestCase):
    def test_setup_logging_adds_file_handler(self):
        logger = logging.getLogger("stellar_habits")
        saved = list(logger.handlers)
        logger.handlers = []
        try:
            with tempfile.TemporaryDirectory() as tmp:
                log_file = Path(tmp) / "logs" / "habits.log"
                configured = setup_logging("info", log_file)
                self.assertIs(configured, logger)
                self.assertEqual(logger.level, logging.INFO)
                self.assertEqual(len(logger.handlers), 2)
                for handler in logger.handlers:
                    handler.close()
                self.assertTrue(log_file.parent.exists())
        finally:
            logger.handlers = saved
            logger.setLevel(logging.NOTSET)


if __name__ == "__main__":
    unittest.main()
