"""Logging filters that scrub sensitive content."""

from __future__ import annotations

import logging
import re

_SENSITIVE_PATTERN = re.compile(
    r"(Authorization: Bearer\s+[\w\.-]+"
    r"|access_token\"?\s*[:=]\s*\"?[\w\.-]+\"?"
    r"|password\"?\s*[:=]\s*\"?[^\"\s,}]+\"?)",
    re.IGNORECASE,
)


def redact(text: str) -> str:
    """Replace bearer tokens and passwords in ``text`` with a marker."""
    return _SENSITIVE_PATTERN.sub("**REDACTED**", text)


class SensitiveFilter(logging.Filter):
    """Replace sensitive tokens in log messages with a redaction marker."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        return True


__all__ = ["SensitiveFilter", "redact"]
