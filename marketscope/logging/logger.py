import logging
from typing import Any, Dict

from marketscope.config.settings import Config
from .handlers import build_handlers

ROOT_LOGGER_NAME = "marketscope"

class AnalyticsLogger:
    """Custom logger with context support"""

    def __init__(self, name: str = ROOT_LOGGER_NAME):
        self.logger = logging.getLogger(name)
        self._context: Dict[str, Any] = {}
        self._setup_done = False

    def setup(self, config: Config):
        """Attach handlers to the package logger based on config"""
        if self._setup_done:
            return

        self.logger.setLevel(config.log_level)
        self.logger.handlers.clear()
        for handler in build_handlers(config):
            self.logger.addHandler(handler)
        # Handlers live on the package logger; don't repeat records on root
        self.logger.propagate = False

        self._setup_done = True

    def with_context(self, **kwargs) -> "AnalyticsLogger":
        """Return logger with additional context"""
        new_logger = AnalyticsLogger(self.logger.name)
        new_logger.logger = self.logger
        new_logger._context = {**self._context, **kwargs}
        new_logger._setup_done = self._setup_done
        return new_logger

    def _log(self, level: int, msg: str, **kwargs):
        # Merge context
        context = {**self._context, **kwargs}
        extra = {"context": context} if context else {}
        self.logger.log(level, msg, extra=extra)

    def debug(self, msg: str, **kwargs):
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs):
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs):
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs):
        self._log(logging.ERROR, msg, **kwargs)

    def signal(self, signal_type: str, **kwargs):
        """Log detected signal"""
        self.info(f"SIGNAL: {signal_type}", signal=True, **kwargs)

# Singleton
logger = AnalyticsLogger()

def setup_logging(config: Config):
    """Initialize logging"""
    logger.setup(config)
