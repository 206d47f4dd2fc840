"""Add a few sample pets for an existing user."""
from __future__ import annotations

import argparse
import asyncio
import uuid
from datetime import date

from petmanager.db.session import dispose_engine, get_sessionmaker
from petmanager.models.pet import PetGender
from petmanager.services import pet_service, user_service

SAMPLE_PETS = (
    ("Max", "Dog", date(2020, 3, 15), PetGender.MALE),
    ("Luna", "Cat", date(2021, 7, 22), PetGender.FEMALE),
    ("Charlie", "Dog", date(2019, 11, 8), PetGender.MALE),
)


async def add_test_pets(user_id: uuid.UUID) -> int:
    sessionmaker = get_sessionmaker()
    created = 0
    async with sessionmaker() as session:
        if await user_service.get_user(session, user_id) is None:
            raise SystemExit(f"User {user_id} does not exist")
        for name, category, birthday, gender in SAMPLE_PETS:
            pet = await pet_service.create_pet(
                session,
                owner_id=user_id,
                name=name,
                category=category,
                birthday=birthday,
                gender=gender,
            )
            print(f"Created pet: {pet.name} ({pet.id})")
            created += 1
    await dispose_engine()
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Add sample pets for a user")
    parser.add_argument("user_id", type=uuid.UUID, help="ID of the owning user")
    args = parser.parse_args()
    created = asyncio.run(add_test_pets(args.user_id))
    print(f"Added {created} test pet(s).")


if __name__ == "__main__":
    main()
