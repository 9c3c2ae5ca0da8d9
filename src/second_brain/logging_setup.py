"""
JSON logging for the Second Brain service.

structlog events are rendered to JSON and handed to the stdlib root logger,
which writes them to stdout and, when configured, to a file. The file comes
from `log_file` in config/default.yaml (passed by service.main) or from the
SECOND_BRAIN_LOG_FILE environment variable.
"""
import logging
import os
from typing import Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

LOG_FILE_ENV = "SECOND_BRAIN_LOG_FILE"


def configure_logging(log_file: Optional[str] = None, level: int = logging.INFO):
    """Install JSON handlers on the root logger; explicit `log_file` wins over the env var."""
    # Stdlib root logger emits JSON to stdout and, optionally, to a file
    logger = logging.getLogger()
    logger.setLevel(level)
    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    log_path = log_file or os.environ.get(LOG_FILE_ENV)
    handlers = [stream_handler]
    if log_path:
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logger.handlers = handlers
    logger.propagate = False

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    return structlog.get_logger(name)
