"""
Centralized logging configuration for the Cloudways cache client.

This module provides a function to set up application-wide logging, including formatting,
log levels, and handlers for console and optional rotating file output. Modules only ever call
`logging.getLogger(__name__)`; this is the single place where handlers are attached.
"""

import json
import logging
import logging.handlers
import sys
from typing import Optional

# Extra fields copied into structured records when a log call passes them via `extra=`
STRUCTURED_FIELDS = ("server_id", "action", "operation_id")

DEFAULT_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StructuredLogFormatter(logging.Formatter):
    """
    Formatter that renders each record as a single JSON object.

    Features:
    - Standard fields: timestamp, level, logger, message
    - `server_id`, `action`, and `operation_id` when supplied through `extra`
    - Formatted exception text when the record carries exc_info
    """

    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_app_logging(config: Optional[dict] = None, default_level=logging.INFO, stream=None) -> None:
    """
    Set up logging for the entire application.

    Configures the root logger with a console handler and, when a file path is given, a
    rotating file handler. Existing root handlers are removed first so repeated calls do not
    duplicate output.

    Args:
        config (dict, optional): Logging settings. Expected keys:
            - 'level': Log level name (e.g., "DEBUG", "INFO").
            - 'file_path': Path to the log file; falsy disables file logging.
            - 'max_bytes': Max size of the log file before rotation.
            - 'backup_count': Number of rotated files to keep.
            - 'date_format': Timestamp format string.
        default_level (int, optional): Level used when 'level' is missing or invalid.
        stream (optional): Console stream; defaults to stderr so stdout stays free for
            command output and polling progress.
    """
    if config is None:
        config = {}

    log_level_str = str(config.get("level") or logging.getLevelName(default_level)).upper()
    numeric_log_level = getattr(logging, log_level_str, None)
    if not isinstance(numeric_log_level, int):
        print(
            f"Warning: Invalid log level string '{log_level_str}'. "
            f"Using default level {logging.getLevelName(default_level)}.",
            file=sys.stderr,
        )
        numeric_log_level = default_level

    formatter = StructuredLogFormatter(datefmt=config.get("date_format") or DEFAULT_LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file_path = config.get("file_path")
    if log_file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path,
            maxBytes=int(config.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(config.get("backup_count", 3)),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger(__name__).debug("Application logging setup complete. Level: %s", log_level_str)
