"""Logging setup: one stdout handler, quieter libraries, no tokens in log lines."""

import logging
import re
import sys
from typing import Optional

from fintrack.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that are chatty at INFO
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "uvicorn": logging.INFO,
}

_SECRET_PATTERN = re.compile(
    r"(Bearer\s+|(?:access_token|refresh_token|password)[\"']?\s*[:=]\s*[\"']?)[^\s\"'&,}]+",
    re.IGNORECASE,
)


def redact(text: str) -> str:
    """Mask bearer tokens, token fields and passwords in a string."""
    return _SECRET_PATTERN.sub(r"\1***", text)


class SecretRedactingFilter(logging.Filter):
    """Rewrites records so broker credentials never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging at `level` (default: the configured log_level)."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SecretRedactingFilter())

    logging.basicConfig(
        level=getattr(logging, (level or get_settings().log_level).upper()),
        format=LOG_FORMAT,
        handlers=[handler],
    )

    for name, lib_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(lib_level)
