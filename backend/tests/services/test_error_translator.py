"""Tests for failure classification and user-safe messages."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from petmanager.core.config import get_settings
from petmanager.services.error_translator import log_failure, user_message
from petmanager.services.errors import StoreFailure, StoreFailureKind, ValidationFailure
from petmanager.services.pet_service import classify_database_error


@pytest.mark.parametrize(
    ("kind", "message"),
    [
        (StoreFailureKind.DUPLICATE, "This record already exists"),
        (StoreFailureKind.NOT_FOUND, "Record not found"),
        (StoreFailureKind.RELATED_MISSING, "Related record not found"),
        (StoreFailureKind.UNAVAILABLE, "Database error. Please try again."),
        (StoreFailureKind.UPLOAD_FAILED, "Failed to upload image. Please try again."),
        (StoreFailureKind.STORAGE, "An error occurred. Please try again."),
        (StoreFailureKind.INVALID_CREDENTIALS, "Email or password is incorrect"),
    ],
)
def test_store_failures_map_to_fixed_messages(kind: StoreFailureKind, message: str) -> None:
    failure = StoreFailure(kind, source="test", detail="psycopg: secret internals")
    assert user_message(failure) == message


def test_unrecognised_failures_fall_back() -> None:
    assert user_message(ValidationFailure({"name": ["x"]})) == (
        "Please check your input and try again."
    )
    assert user_message(RuntimeError("Traceback: boom at 0x7f")) == (
        "Something went wrong. Please try again later."
    )


def test_database_errors_are_classified_at_the_boundary() -> None:
    unique = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
    foreign = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))
    check = IntegrityError("INSERT", {}, Exception("CHECK constraint failed"))
    down = OperationalError("SELECT 1", {}, Exception("could not connect to server"))

    assert classify_database_error(unique) is StoreFailureKind.DUPLICATE
    assert classify_database_error(foreign) is StoreFailureKind.RELATED_MISSING
    assert classify_database_error(check) is StoreFailureKind.CONSTRAINT
    assert classify_database_error(down) is StoreFailureKind.UNAVAILABLE


def test_log_detail_is_gated_by_environment(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    failure = StoreFailure(StoreFailureKind.DATABASE, source="database", detail="secret dsn")

    monkeypatch.setenv("APP_ENV", "production")
    get_settings.cache_clear()
    try:
        with caplog.at_level(logging.ERROR, logger="petmanager.errors"):
            log_failure(failure, "pets.create")
        assert "StoreFailure (database)" in caplog.text
        assert "secret dsn" not in caplog.text
        assert caplog.records[-1].exc_info is None
    finally:
        monkeypatch.setenv("APP_ENV", "test")
        get_settings.cache_clear()

    caplog.clear()
    with caplog.at_level(logging.ERROR, logger="petmanager.errors"):
        log_failure(failure, "pets.create")
    assert caplog.records[-1].exc_info is not None
