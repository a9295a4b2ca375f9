"""
Logging configuration with secret redaction.
"""

import logging
import logging.config
from collections import Counter
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

REDACTED = "<sensitive>"

# Reference counts so overlapping runs sharing a secret keep it masked
_secrets: "Counter[str]" = Counter()


def register_secret(value: str) -> None:
    """Mask value in every log record until it is unregistered."""
    if value:
        _secrets[value] += 1


def unregister_secret(value: str) -> None:
    """Drop one registration of value; it stays masked while others remain."""
    if not value or value not in _secrets:
        return
    _secrets[value] -= 1
    if _secrets[value] <= 0:
        del _secrets[value]


@contextmanager
def redacting(*values: Optional[str]) -> Iterator[None]:
    """Mask values in log records for the duration of the block."""
    registered = [v for v in values if v]
    for value in registered:
        register_secret(value)
    try:
        yield
    finally:
        for value in registered:
            unregister_secret(value)


def registered_secrets() -> List[str]:
    return list(_secrets)


def clear_secrets() -> None:
    _secrets.clear()


class SecretRedactionFilter(logging.Filter):
    """Filter that replaces registered secrets in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record's message with secrets masked; never drops records."""
        if not _secrets:
            return True

        message = record.getMessage()
        redacted = message
        # Longest first so a secret containing another is masked whole
        for secret in sorted(_secrets, key=len, reverse=True):
            redacted = redacted.replace(secret, REDACTED)

        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with secret redaction."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_redaction": {
                "()": SecretRedactionFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "ui": {
                "format": "==> %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["secret_redaction"]
            },
            "ui": {
                "class": "logging.StreamHandler",
                "formatter": "ui",
                "stream": "ext://sys.stdout",
                "filters": ["secret_redaction"]
            }
        },
        "loggers": {
            "psprovisioner": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "psprovisioner.ui": {
                "handlers": ["ui"],
                "level": "INFO",
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
