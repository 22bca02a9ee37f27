"""
Unified logging module for the Melon web app.
Supports dual output: console (for container logs) and Logtail (for centralized logging).
"""
import json
import logging
import os
import sys
from typing import Dict

from logtail import LogtailHandler


class StructuredFormatter(logging.Formatter):
    """Formatter that renders dict messages as JSON lines for Logtail."""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            log_data = {
                "message": record.msg.get("message", ""),
                "level": record.levelname,
                "module": record.module,
                "timestamp": self.formatTime(record, self.datefmt),
            }
            log_data.update({k: v for k, v in record.msg.items() if k != "message"})
            return json.dumps(log_data, default=str, ensure_ascii=False)
        return super().format(record)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


# Global logger cache
_loggers: Dict[str, logging.Logger] = {}


def _resolve_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with console and (optionally) Logtail handlers.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    level = _resolve_level()
    logger.setLevel(level)

    # Prevent duplicate handlers if logger already exists
    if logger.handlers:
        _loggers[name] = logger
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(console_handler)

    logtail_token = os.getenv("LOGTAIL_SOURCE_TOKEN")
    logtail_host = os.getenv("LOGTAIL_INGEST_HOST", "in.logtail.com")

    if logtail_token:
        try:
            logtail_handler = LogtailHandler(
                source_token=logtail_token,
                host=logtail_host
            )
            logtail_handler.setLevel(level)
            logtail_handler.setFormatter(StructuredFormatter())
            logger.addHandler(logtail_handler)
            logger.info({"event": "logger_init", "module": name, "logtail_enabled": True})
        except Exception as e:
            # Console logging still works without Logtail
            logger.warning(f"Failed to initialize Logtail handler: {e}. Using console logging only.")
    else:
        logger.debug("LOGTAIL_SOURCE_TOKEN not set. Logtail logging disabled.")

    _loggers[name] = logger
    return logger
