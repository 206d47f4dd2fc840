"""Identity provider: sign-up, sign-in, sign-out and token resolution."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from petmanager.core.security import (
    create_access_token,
    decode_access_token,
    verify_password,
)
from petmanager.models.revoked_token import RevokedToken
from petmanager.models.user import User
from petmanager.services import user_service
from petmanager.services.errors import StoreFailure, StoreFailureKind
from petmanager.services.pet_service import classify_database_error

logger = logging.getLogger(__name__)


async def sign_up(session: AsyncSession, email: str, password: str) -> User:
    """Create an account; raises ``StoreFailure(EMAIL_TAKEN)`` for a used email."""
    existing = await user_service.get_user_by_email(session, email=email)
    if existing is not None:
        raise StoreFailure(StoreFailureKind.EMAIL_TAKEN, source="identity")
    try:
        user = await user_service.create_user(session, email=email, password=password)
    except IntegrityError as exc:
        raise StoreFailure(StoreFailureKind.EMAIL_TAKEN, source="identity") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreFailure(
            classify_database_error(exc), source="identity", detail=str(exc)
        ) from exc
    logger.info("Registered user %s", user.id)
    return user


async def sign_in(session: AsyncSession, email: str, password: str) -> User:
    """Validate credentials; raises ``StoreFailure(INVALID_CREDENTIALS)``."""
    user = await user_service.get_user_by_email(session, email=email)
    if user is None or not verify_password(password, user.hashed_password):
        raise StoreFailure(StoreFailureKind.INVALID_CREDENTIALS, source="identity")
    return user


def issue_token(user: User) -> str:
    """Generate a JWT for a user."""
    return create_access_token(str(user.id))


def read_token(token: str | None) -> dict[str, Any] | None:
    """Decode ``token``; ``None`` when it is absent, malformed or expired."""
    if not token:
        return None
    try:
        return decode_access_token(token)
    except JWTError:
        return None


async def is_revoked(session: AsyncSession, jti: str | None) -> bool:
    if not jti:
        return False
    result = await session.execute(
        select(RevokedToken.id).where(RevokedToken.jti == jti)
    )
    return result.scalar_one_or_none() is not None


async def current_user(session: AsyncSession, token: str | None) -> User | None:
    """Resolve the signed-in user, or ``None`` for any unusable token."""
    claims = read_token(token)
    if claims is None:
        return None
    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except (ValueError, TypeError):
        return None
    if await is_revoked(session, claims.get("jti")):
        return None
    return await user_service.get_user(session, user_id)


async def sign_out(session: AsyncSession, claims: dict[str, Any]) -> None:
    """Revoke the token described by ``claims``; repeated calls are no-ops."""
    jti = claims.get("jti")
    if not jti or await is_revoked(session, jti):
        return
    try:
        user_id = uuid.UUID(str(claims.get("sub")))
    except (ValueError, TypeError):
        return
    expires = claims.get("exp")
    expires_at = (
        datetime.fromtimestamp(expires, UTC)
        if isinstance(expires, (int, float))
        else datetime.now(UTC)
    )
    session.add(RevokedToken(jti=jti, user_id=user_id, expires_at=expires_at))
    try:
        await session.commit()
    except IntegrityError:
        # revoked concurrently
        await session.rollback()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise StoreFailure(
            classify_database_error(exc), source="identity", detail=str(exc)
        ) from exc
