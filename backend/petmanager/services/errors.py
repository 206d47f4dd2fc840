"""Closed failure taxonomy shared by the store, storage and identity boundaries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class StoreFailureKind(str, enum.Enum):
    """Classification assigned where a collaborator call returns."""

    # relational store
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    RELATED_MISSING = "related_missing"
    CONSTRAINT = "constraint"
    UNAVAILABLE = "unavailable"
    DATABASE = "database"
    # object store
    UPLOAD_FAILED = "upload_failed"
    DELETE_FAILED = "delete_failed"
    STORAGE = "storage"
    # identity provider
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_TAKEN = "email_taken"


DATABASE_KINDS = frozenset(
    {
        StoreFailureKind.DUPLICATE,
        StoreFailureKind.NOT_FOUND,
        StoreFailureKind.RELATED_MISSING,
        StoreFailureKind.CONSTRAINT,
        StoreFailureKind.UNAVAILABLE,
        StoreFailureKind.DATABASE,
    }
)
STORAGE_KINDS = frozenset(
    {
        StoreFailureKind.UPLOAD_FAILED,
        StoreFailureKind.DELETE_FAILED,
        StoreFailureKind.STORAGE,
    }
)


class StoreFailure(Exception):
    """Raised by a collaborator boundary with an already-classified kind."""

    def __init__(
        self, kind: StoreFailureKind, *, source: str, detail: str | None = None
    ) -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.source = source
        self.detail = detail

    def __repr__(self) -> str:
        return f"StoreFailure(kind={self.kind.value!r}, source={self.source!r})"


@dataclass(frozen=True)
class ValidationFailure:
    """Field-scoped validation errors, returned as data."""

    field_errors: dict[str, list[str]] = field(default_factory=dict)


__all__ = [
    "DATABASE_KINDS",
    "STORAGE_KINDS",
    "StoreFailure",
    "StoreFailureKind",
    "ValidationFailure",
]
