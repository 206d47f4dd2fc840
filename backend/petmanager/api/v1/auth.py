"""Authentication endpoints."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Form, Request, Response, status
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from petmanager.api.deps import get_current_user, get_db_session, get_token_claims
from petmanager.api.responses import result_response
from petmanager.core.config import get_settings
from petmanager.models.user import User
from petmanager.schemas.auth import (
    LOGIN_MESSAGES,
    REGISTER_MESSAGES,
    LoginRequest,
    RegistrationRequest,
    UserRead,
)
from petmanager.schemas.results import LOGIN_PATH, AuthActionResult
from petmanager.services import auth_service
from petmanager.services.error_translator import log_failure, user_message
from petmanager.services.errors import StoreFailure, StoreFailureKind
from petmanager.services.pet_lifecycle import PETS_PATH
from petmanager.services.validation import field_errors_from_validation_error

logger = logging.getLogger(__name__)

router = APIRouter()

_settings = get_settings()

_DEF_LIMITS = _settings.rate_limit_default
_LOGIN_LIMITS = _settings.rate_limit_login


def _parse_rate(value: str, *, fallback: tuple[int, int]) -> tuple[int, int]:
    try:
        count_str, window_str = value.split("/", 1)
        count = int(count_str.strip())
    except ValueError:
        return fallback
    window = window_str.strip().lower()
    seconds_map = {
        "second": 1,
        "seconds": 1,
        "minute": 60,
        "minutes": 60,
        "hour": 3600,
        "hours": 3600,
        "day": 86400,
        "days": 86400,
    }
    seconds = seconds_map.get(window, fallback[1])
    return count, seconds


_LOGIN_LIMIT = _parse_rate(_LOGIN_LIMITS, fallback=(10, 60))
_DEFAULT_LIMIT = _parse_rate(_DEF_LIMITS, fallback=(100, 60))


def _rate_dependency(limit: tuple[int, int]):  # type: ignore[no-untyped-def]
    async def _dependency(request: Request, response: Response) -> None:
        if FastAPILimiter.redis is None:
            return None
        limiter = RateLimiter(times=limit[0], seconds=limit[1])
        await limiter(request, response)

    return Depends(_dependency)


_LOGIN_RATE_DEP = _rate_dependency(_LOGIN_LIMIT)
_DEFAULT_RATE_DEP = _rate_dependency(_DEFAULT_LIMIT)


def safe_redirect(target: str | None, default: str = PETS_PATH) -> str:
    """Accept only local absolute paths such as ``/pets/123``."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    if "\\" in target or "://" in target:
        return default
    return target


def _signed_in(user: User, navigate_to: str) -> AuthActionResult:
    return AuthActionResult.succeeded(
        navigate_to,
        access_token=auth_service.issue_token(user),
        token_type="bearer",
    )


@router.post(
    "/register",
    response_model=AuthActionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def register(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    payload: Annotated[dict[str, Any], Body()],
) -> JSONResponse:
    """Create an account and sign it in."""
    try:
        request = RegistrationRequest.model_validate(payload)
    except ValidationError as exc:
        return result_response(
            AuthActionResult.invalid(
                field_errors_from_validation_error(exc, REGISTER_MESSAGES)
            )
        )
    try:
        user = await auth_service.sign_up(session, request.email, request.password)
    except StoreFailure as exc:
        log_failure(exc, "auth.register")
        return result_response(AuthActionResult.failed(user_message(exc)))
    return result_response(
        _signed_in(user, PETS_PATH), success_status=status.HTTP_201_CREATED
    )


@router.post(
    "/login",
    response_model=AuthActionResult,
    summary="Obtain access token",
    dependencies=[_LOGIN_RATE_DEP],
)
async def login(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    password: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    redirect: Annotated[str | None, Form()] = None,
) -> JSONResponse:
    """Validate credentials and issue a bearer token."""
    raw = {"email": email or username, "password": password}
    try:
        credentials = LoginRequest.model_validate(
            {key: value for key, value in raw.items() if value is not None}
        )
    except ValidationError as exc:
        return result_response(
            AuthActionResult.invalid(
                field_errors_from_validation_error(exc, LOGIN_MESSAGES)
            )
        )
    try:
        user = await auth_service.sign_in(
            session, credentials.email, credentials.password
        )
    except StoreFailure as exc:
        if exc.kind is not StoreFailureKind.INVALID_CREDENTIALS:
            log_failure(exc, "auth.login")
        return result_response(
            AuthActionResult.failed(user_message(exc)),
            failure_status=status.HTTP_401_UNAUTHORIZED,
        )
    return result_response(_signed_in(user, safe_redirect(redirect)))


@router.post("/logout", response_model=AuthActionResult, summary="Sign out")
async def logout(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    claims: Annotated[dict[str, Any] | None, Depends(get_token_claims)],
) -> JSONResponse:
    """Revoke the presented token; always ends on the login page."""
    if claims is not None:
        try:
            await auth_service.sign_out(session, claims)
        except StoreFailure as exc:
            log_failure(exc, "auth.logout")
    return result_response(AuthActionResult.succeeded(LOGIN_PATH))


@router.get("/me", response_model=UserRead, summary="Current user")
async def read_current_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserRead:
    return UserRead.model_validate(current_user)
