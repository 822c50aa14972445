"""
Tests for the queue-based logging configuration.
"""
import logging
import logging.handlers

from care_console.logging_config import NOISY_LOGGERS, ThreadSafeLoggingConfig


class TestThreadSafeLoggingConfig:

    def setup_method(self):
        self.root = logging.getLogger()
        self.saved_handlers = list(self.root.handlers)
        self.saved_level = self.root.level

    def teardown_method(self):
        self.root.handlers[:] = self.saved_handlers
        self.root.setLevel(self.saved_level)

    def test_setup_installs_queue_handler(self):
        config = ThreadSafeLoggingConfig()
        try:
            config.setup_logging(debug=False)

            assert config.is_running
            assert any(isinstance(h, logging.handlers.QueueHandler) for h in self.root.handlers)
            assert self.root.level == logging.INFO
            for name in NOISY_LOGGERS:
                assert logging.getLogger(name).level == logging.WARNING
        finally:
            config.stop()

        assert not config.is_running

    def test_debug_level_and_restart(self):
        config = ThreadSafeLoggingConfig()
        try:
            config.setup_logging(debug=False)
            config.setup_logging(debug=True)

            assert self.root.level == logging.DEBUG
            assert sum(isinstance(h, logging.handlers.QueueHandler) for h in self.root.handlers) == 1
        finally:
            config.stop()
