import asyncio
import json
import logging
import os
import tempfile
import unittest

from src.second_brain.logging_setup import LOG_FILE_ENV, configure_logging, get_logger
from src.second_brain.persistent_state import PersistentStateContainer
from src.second_brain.storage import InMemoryKeyValueStore


class TestLoggingFile(unittest.TestCase):
    def setUp(self):
        fd, self.path = tempfile.mkstemp()
        os.close(fd)

    def tearDown(self):
        logging.getLogger().handlers = []
        os.remove(self.path)
        os.environ.pop(LOG_FILE_ENV, None)

    def _read(self):
        for h in logging.getLogger().handlers:
            h.flush()
        with open(self.path, "r") as f:
            return f.read()

    def test_logs_written_to_file(self):
        os.environ[LOG_FILE_ENV] = self.path
        configure_logging()
        log = get_logger("test")
        log.info("file_log_test", key="val")
        self.assertIn("file_log_test", self._read())

    def test_storage_failures_are_logged_not_raised(self):
        configure_logging(log_file=self.path)
        store = InMemoryKeyValueStore({"k": "{broken"})
        container = PersistentStateContainer("k", [], store)
        asyncio.run(container.hydrate())
        data = self._read()
        line = next(line for line in data.splitlines() if "state_read_failed" in line)
        # JsonFormatter wraps the structlog JSON payload as the message
        payload = json.loads(json.loads(line)["message"])
        self.assertEqual(payload["key"], "k")
        self.assertEqual(payload["level"], "warning")
        self.assertEqual(container.read(), [])


if __name__ == "__main__":
    unittest.main()
