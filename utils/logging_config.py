"""Logging configuration for the finance client."""
import logging
import logging.config
import sys
from typing import Any, Dict


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure root logging once at startup. Modules log through
    logging.getLogger(__name__)."""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "simple",
            "stream": sys.stderr,
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": 1048576,  # 1MB
            "backupCount": 3,
            "encoding": "utf8",
        }

    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "%(levelname)s | %(name)s | %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            # httpx logs every request at INFO
            "httpx": {"level": "WARNING"},
        },
        "root": {
            "level": "DEBUG" if log_file else level,
            "handlers": list(handlers),
        },
    }
    logging.config.dictConfig(logging_config)
