from .logger import logger, setup_logging, AnalyticsLogger
from .decorators import log_timing

__all__ = ["logger", "setup_logging", "AnalyticsLogger", "log_timing"]
