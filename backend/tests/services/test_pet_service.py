"""Tests for owner-scoped pet persistence."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from petmanager.models import Pet, PetGender, User
from petmanager.services import pet_service
from petmanager.services.errors import StoreFailure, StoreFailureKind

pytestmark = pytest.mark.asyncio


async def _create(session: AsyncSession, owner: User, **overrides: object) -> Pet:
    attrs: dict[str, object] = {
        "name": "Max",
        "category": "Dog",
        "birthday": date(2020, 3, 15),
        "gender": PetGender.MALE,
        "image_path": None,
    }
    attrs.update(overrides)
    return await pet_service.create_pet(session, owner_id=owner.id, **attrs)  # type: ignore[arg-type]


async def test_create_then_get_round_trips(db_session: AsyncSession, owner: User) -> None:
    created = await _create(db_session, owner)
    fetched = await pet_service.get_pet(db_session, owner_id=owner.id, pet_id=created.id)

    assert fetched is not None
    assert (fetched.name, fetched.category, fetched.birthday, fetched.gender) == (
        "Max",
        "Dog",
        date(2020, 3, 15),
        PetGender.MALE,
    )
    assert fetched.image_path is None
    assert fetched.owner_id == owner.id
    assert fetched.created_at is not None


async def test_other_owner_never_sees_the_row(
    db_session: AsyncSession, owner: User, other_owner: User
) -> None:
    pet = await _create(db_session, owner)

    assert await pet_service.get_pet(db_session, owner_id=other_owner.id, pet_id=pet.id) is None
    assert (
        await pet_service.update_pet(
            db_session, owner_id=other_owner.id, pet_id=pet.id, changes={"name": "Stolen"}
        )
        is None
    )
    assert await pet_service.delete_pet(db_session, owner_id=other_owner.id, pet_id=pet.id) is False
    assert list(await pet_service.list_pets(db_session, owner_id=other_owner.id)) == []

    still_there = await pet_service.get_pet(db_session, owner_id=owner.id, pet_id=pet.id)
    assert still_there is not None
    assert still_there.name == "Max"


async def test_list_is_capped_and_newest_first(db_session: AsyncSession, owner: User) -> None:
    start = datetime(2024, 1, 1, tzinfo=UTC)
    for index in range(25):
        db_session.add(
            Pet(
                owner_id=owner.id,
                name=f"pet-{index:02d}",
                category="Fish",
                birthday=date(2022, 1, 1),
                gender=PetGender.FEMALE,
                created_at=start + timedelta(minutes=index),
            )
        )
    await db_session.commit()

    pets = await pet_service.list_pets(db_session, owner_id=owner.id, limit=20)

    assert len(pets) == 20
    assert [pet.name for pet in pets] == [f"pet-{index:02d}" for index in range(24, 4, -1)]


async def test_partial_update_leaves_other_fields(db_session: AsyncSession, owner: User) -> None:
    pet = await _create(db_session, owner, image_path="u/pets/a.png")

    updated = await pet_service.update_pet(
        db_session, owner_id=owner.id, pet_id=pet.id, changes={"name": "NewName"}
    )

    assert updated is not None
    assert updated.name == "NewName"
    assert updated.category == "Dog"
    assert updated.birthday == date(2020, 3, 15)
    assert updated.gender is PetGender.MALE
    assert updated.image_path == "u/pets/a.png"


async def test_update_rejects_unknown_fields(db_session: AsyncSession, owner: User) -> None:
    pet = await _create(db_session, owner)
    with pytest.raises(ValueError):
        await pet_service.update_pet(
            db_session, owner_id=owner.id, pet_id=pet.id, changes={"owner_id": uuid.uuid4()}
        )


async def test_delete_is_permanent(db_session: AsyncSession, owner: User) -> None:
    pet = await _create(db_session, owner)

    assert await pet_service.delete_pet(db_session, owner_id=owner.id, pet_id=pet.id) is True
    assert await pet_service.get_pet(db_session, owner_id=owner.id, pet_id=pet.id) is None
    assert await pet_service.delete_pet(db_session, owner_id=owner.id, pet_id=pet.id) is False


async def test_missing_owner_is_classified(db_session: AsyncSession) -> None:
    with pytest.raises(StoreFailure) as excinfo:
        await pet_service.create_pet(
            db_session,
            owner_id=uuid.uuid4(),
            name="Ghost",
            category="Cat",
            birthday=date(2020, 1, 1),
            gender=PetGender.FEMALE,
        )
    assert excinfo.value.kind is StoreFailureKind.RELATED_MISSING
    assert excinfo.value.source == "database"

