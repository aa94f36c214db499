"""Logging for vaultsync.

Console output goes through Rich on stderr so stdout stays clean for
command output. An optional log file receives every record.

Credentials must never reach a log. Call sites avoid logging them, and
``RedactingFilter`` masks bearer tokens, password form fields and cipher
strings in any record that slips through.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


console = Console(stderr=True)

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(message)s"

REDACTED = "[REDACTED]"

_SECRET_PATTERNS = (
    # Authorization header values
    re.compile(r"(?i)\b(bearer)\s+[A-Za-z0-9\-._~+/]{16,}=*"),
    # Token request form and JSON fields
    re.compile(r"(?i)\b(password|access_token|refresh_token)([\"']?\s*[=:]\s*[\"']?)[^\s&\"',}]+"),
    # Encrypted strings ("2.<iv>|<data>|<mac>")
    re.compile(r"\b[0-6]\.[A-Za-z0-9+/=]{16,}(?:\|[A-Za-z0-9+/=]+)*"),
)


def redact(text: str) -> str:
    """Mask credentials and encrypted values in a log message."""
    text = _SECRET_PATTERNS[0].sub(lambda m: f"{m.group(1)} {REDACTED}", text)
    text = _SECRET_PATTERNS[1].sub(lambda m: f"{m.group(1)}{m.group(2)}{REDACTED}", text)
    return _SECRET_PATTERNS[2].sub(REDACTED, text)


class RedactingFilter(logging.Filter):
    """Rewrite each record's message with credentials masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    rich_output: bool = True,
) -> logging.Logger:
    """
    Configure the ``vaultsync`` logger.

    Args:
        level: Console log level name
        log_file: Optional file that receives DEBUG and above
        rich_output: Use Rich for the console handler

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("vaultsync")
    logger.setLevel(logging.DEBUG if log_file else log_level)
    logger.handlers.clear()

    if rich_output:
        console_handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
        )
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    console_handler.setLevel(log_level)
    console_handler.addFilter(RedactingFilter())
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(RedactingFilter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger under the ``vaultsync`` hierarchy."""
    return logging.getLogger(name)
