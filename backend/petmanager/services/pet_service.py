"""Owner-scoped pet persistence helpers."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping
from datetime import date
from typing import Any, Sequence, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from petmanager.models.pet import Pet, PetGender
from petmanager.services.errors import StoreFailure, StoreFailureKind

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "category", "birthday", "gender", "image_path"})

T = TypeVar("T")


def classify_database_error(exc: SQLAlchemyError) -> StoreFailureKind:
    """Map a SQLAlchemy error onto the closed failure taxonomy."""
    if isinstance(exc, IntegrityError):
        message = str(exc.orig or exc).lower()
        if "unique" in message or "duplicate" in message:
            return StoreFailureKind.DUPLICATE
        if "foreign key" in message:
            return StoreFailureKind.RELATED_MISSING
        return StoreFailureKind.CONSTRAINT
    if isinstance(exc, (OperationalError, InterfaceError)):
        return StoreFailureKind.UNAVAILABLE
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StoreFailureKind.UNAVAILABLE
    return StoreFailureKind.DATABASE


async def _guarded(session: AsyncSession, operation: Callable[[], Awaitable[T]]) -> T:
    try:
        return await operation()
    except SQLAlchemyError as exc:
        await session.rollback()
        kind = classify_database_error(exc)
        logger.debug("Pet store call failed as %s", kind.value)
        raise StoreFailure(kind, source="database", detail=str(exc)) from exc


def _owned_pet_query(owner_id: uuid.UUID) -> Select[tuple[Pet]]:
    """Return a base query for pets scoped to an owner."""
    return select(Pet).where(Pet.owner_id == owner_id)


async def list_pets(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    limit: int = 20,
) -> Sequence[Pet]:
    """Return the owner's newest pets first, capped at ``limit``."""

    async def _run() -> Sequence[Pet]:
        stmt = (
            _owned_pet_query(owner_id)
            .order_by(Pet.created_at.desc(), Pet.id.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    return await _guarded(session, _run)


async def get_pet(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    pet_id: uuid.UUID,
) -> Pet | None:
    """Return a single pet, or ``None`` when it is missing or owned by someone else."""

    async def _run() -> Pet | None:
        stmt = (
            _owned_pet_query(owner_id)
            .where(Pet.id == pet_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    return await _guarded(session, _run)


async def create_pet(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    name: str,
    category: str,
    birthday: date,
    gender: PetGender,
    image_path: str | None = None,
) -> Pet:
    """Insert a pet for ``owner_id``."""

    async def _run() -> Pet:
        pet = Pet(
            owner_id=owner_id,
            name=name,
            category=category,
            birthday=birthday,
            gender=gender,
            image_path=image_path,
        )
        session.add(pet)
        await session.commit()
        await session.refresh(pet)
        return pet

    return await _guarded(session, _run)


async def update_pet(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    pet_id: uuid.UUID,
    changes: Mapping[str, Any],
) -> Pet | None:
    """Apply ``changes`` to an owned pet; ``None`` when no row matched."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported pet fields: {sorted(unknown)}")
    if not changes:
        return await get_pet(session, owner_id=owner_id, pet_id=pet_id)

    async def _run() -> int:
        stmt = (
            update(Pet)
            .where(Pet.id == pet_id, Pet.owner_id == owner_id)
            .values(**dict(changes))
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        await session.commit()
        return result.rowcount

    if await _guarded(session, _run) == 0:
        return None
    return await get_pet(session, owner_id=owner_id, pet_id=pet_id)


async def delete_pet(
    session: AsyncSession,
    *,
    owner_id: uuid.UUID,
    pet_id: uuid.UUID,
) -> bool:
    """Delete an owned pet; ``False`` when no row matched."""

    async def _run() -> int:
        stmt = (
            delete(Pet)
            .where(Pet.id == pet_id, Pet.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        await session.commit()
        return result.rowcount

    return await _guarded(session, _run) > 0
