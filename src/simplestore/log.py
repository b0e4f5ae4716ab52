"""
Logging setup for SimpleStore.

Modules log through ``logging.getLogger(__name__)``; this module only
decides where records go and scrubs private keys out of them.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Optional

LOG_LEVEL_ENV = "SIMPLESTORE_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

SENSITIVE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"(private[_-]?key['\"]?\s*[:=]\s*['\"]?)(0x)?[A-Fa-f0-9]{64}", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
    # Bare 32-byte hex strings (keys). Tx hashes look the same, so they are
    # only preserved when written with a 0x prefix.
    (re.compile(r"(?<![0-9A-Fa-fx])[A-Fa-f0-9]{64}\b"), "[KEY_REDACTED]"),
]


def sanitize_message(message: str) -> str:
    if not message:
        return message
    for pattern, replacement in SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = sanitize_message(record.getMessage())
        record.args = None
        return True


def _resolve_level(level: Optional[str | int]) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.environ.get(LOG_LEVEL_ENV, "WARNING")).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def configure_logging(level: Optional[str | int] = None, stream=None) -> logging.Logger:
    """
    Configure the ``simplestore`` logger.

    Args:
        level: Level name or number; defaults to $SIMPLESTORE_LOG_LEVEL or WARNING
        stream: Output stream (default: stderr)

    Returns:
        The package logger
    """
    root = logging.getLogger("simplestore")
    root.setLevel(_resolve_level(level))

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    handler.addFilter(RedactingFilter())
    root.addHandler(handler)
    root.propagate = False
    return root
