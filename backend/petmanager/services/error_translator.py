"""Map classified failures to user-safe messages.

Nothing returned from here may contain exception text, codes or identifiers.
Full detail goes to the ``petmanager.errors`` logger, which is server-only.
"""

from __future__ import annotations

import logging

from petmanager.core.config import get_settings
from petmanager.services.errors import (
    DATABASE_KINDS,
    STORAGE_KINDS,
    StoreFailure,
    StoreFailureKind,
    ValidationFailure,
)

error_logger = logging.getLogger("petmanager.errors")

GENERIC_MESSAGE = "Something went wrong. Please try again later."
VALIDATION_MESSAGE = "Please check your input and try again."
DATABASE_MESSAGE = "Database error. Please try again."
STORAGE_MESSAGE = "An error occurred. Please try again."
UPLOAD_FAILED_MESSAGE = "Failed to upload image. Please try again."

_MESSAGES: dict[StoreFailureKind, str] = {
    StoreFailureKind.DUPLICATE: "This record already exists",
    StoreFailureKind.NOT_FOUND: "Record not found",
    StoreFailureKind.RELATED_MISSING: "Related record not found",
    StoreFailureKind.UPLOAD_FAILED: UPLOAD_FAILED_MESSAGE,
    StoreFailureKind.INVALID_CREDENTIALS: "Email or password is incorrect",
    StoreFailureKind.EMAIL_TAKEN: "An account with this email already exists",
}


def user_message(failure: object) -> str:
    """Return the user-facing message for ``failure``."""
    if isinstance(failure, ValidationFailure):
        return VALIDATION_MESSAGE
    if isinstance(failure, StoreFailure):
        message = _MESSAGES.get(failure.kind)
        if message is not None:
            return message
        if failure.kind in DATABASE_KINDS:
            return DATABASE_MESSAGE
        if failure.kind in STORAGE_KINDS:
            return STORAGE_MESSAGE
    return GENERIC_MESSAGE


def log_failure(exc: BaseException, context: str) -> None:
    """Record ``exc`` on the server-only channel, with detail gated by environment."""
    if get_settings().is_debug_environment:
        error_logger.error("[%s] %r", context, exc, exc_info=exc)
        return
    kind = exc.kind.value if isinstance(exc, StoreFailure) else "unclassified"
    error_logger.error("[%s] %s (%s)", context, type(exc).__name__, kind)


__all__ = [
    "GENERIC_MESSAGE",
    "UPLOAD_FAILED_MESSAGE",
    "VALIDATION_MESSAGE",
    "log_failure",
    "user_message",
]
