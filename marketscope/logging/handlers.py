import logging
import logging.handlers
import os
from typing import List

from .formatters import JSONFormatter, PrettyFormatter
from marketscope.config.settings import Config

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def build_handlers(config: Config) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    # Console Handler
    console_handler = logging.StreamHandler()
    if config.env == "development":
        console_handler.setFormatter(PrettyFormatter(fmt=CONSOLE_FORMAT))
    else:
        console_handler.setFormatter(JSONFormatter())
    console_handler.setLevel(config.log_level)
    handlers.append(console_handler)

    log_file = config.log_file
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # File Handler (JSON)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10*1024*1024, backupCount=7
        )
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(logging.DEBUG) # Catch all in file
        handlers.append(file_handler)

    return handlers
