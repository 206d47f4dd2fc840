"""Common API dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from petmanager.core.config import Settings, get_settings
from petmanager.db.session import get_session
from petmanager.integrations import S3Client, build_s3_client
from petmanager.models.user import User
from petmanager.services import auth_service

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_v1_prefix}/auth/login", auto_error=False
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in get_session():
        yield session


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache
def _build_s3_client() -> S3Client:
    return build_s3_client()


def get_s3_client() -> S3Client:
    """Return the shared bucket client."""
    return _build_s3_client()


async def get_optional_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> User | None:
    """Resolve the bearer token to a user; ``None`` when signed out."""
    return await auth_service.current_user(session, token)


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Authenticate request via bearer token."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_token_claims(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> dict[str, Any] | None:
    """Decoded claims of the presented token, if it is still valid."""
    return auth_service.read_token(token)
