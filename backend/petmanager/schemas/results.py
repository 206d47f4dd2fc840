"""Structured results returned by pet and auth actions.

Navigation is data here: a successful action carries ``navigate_to`` and the
caller decides how to realise it.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, computed_field

from petmanager.schemas.pet import PetRead

LOGIN_PATH = "/login"

T = TypeVar("T")


class ResultKind(str, enum.Enum):
    SUCCESS = "success"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FAILURE = "failure"
    LOGIN_REQUIRED = "login_required"


def login_redirect(next_path: str) -> str:
    """Login entry point that returns the caller to ``next_path`` afterwards."""
    return f"{LOGIN_PATH}?redirect={quote(next_path, safe='/')}"


class ActionResult(BaseModel):
    """``{error?, field_errors?, success}`` plus an explicit variant tag."""

    kind: ResultKind
    error: str | None = None
    field_errors: dict[str, list[str]] | None = None
    navigate_to: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @classmethod
    def succeeded(cls, navigate_to: str, **extra: object):  # type: ignore[no-untyped-def]
        return cls(kind=ResultKind.SUCCESS, navigate_to=navigate_to, **extra)

    @classmethod
    def invalid(cls, field_errors: dict[str, list[str]]):  # type: ignore[no-untyped-def]
        return cls(kind=ResultKind.INVALID, field_errors=field_errors)

    @classmethod
    def not_found(cls, message: str):  # type: ignore[no-untyped-def]
        return cls(kind=ResultKind.NOT_FOUND, error=message)

    @classmethod
    def failed(cls, message: str):  # type: ignore[no-untyped-def]
        return cls(kind=ResultKind.FAILURE, error=message)

    @classmethod
    def login_required(cls, next_path: str):  # type: ignore[no-untyped-def]
        return cls(kind=ResultKind.LOGIN_REQUIRED, navigate_to=login_redirect(next_path))


class PetActionResult(ActionResult):
    pet: PetRead | None = None


class AuthActionResult(ActionResult):
    access_token: str | None = None
    token_type: str | None = None


@dataclass(frozen=True)
class PetLookup(Generic[T]):
    """Outcome of a read: found, not found, login required, or failed."""

    kind: ResultKind
    value: T | None = None
    error: str | None = None
    navigate_to: str | None = None

    @property
    def found(self) -> bool:
        return self.kind is ResultKind.SUCCESS

    @classmethod
    def of(cls, value: T) -> "PetLookup[T]":
        return cls(kind=ResultKind.SUCCESS, value=value)

    @classmethod
    def missing(cls) -> "PetLookup[T]":
        return cls(kind=ResultKind.NOT_FOUND, error="Pet not found")

    @classmethod
    def failed(cls, message: str) -> "PetLookup[T]":
        return cls(kind=ResultKind.FAILURE, error=message)

    @classmethod
    def login_required(cls, next_path: str) -> "PetLookup[T]":
        return cls(kind=ResultKind.LOGIN_REQUIRED, navigate_to=login_redirect(next_path))
