"""Pydantic schemas for pet records."""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    StringConstraints,
    ValidationInfo,
    computed_field,
    field_validator,
)
from pydantic_core import PydanticCustomError

from petmanager.models.pet import PetGender

MIN_BIRTH_YEAR = 1900
ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

PetName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
PetCategory = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)
]


def age_in_years(birthday: date, today: date | None = None) -> int:
    """Whole years elapsed since ``birthday``."""
    today = today or date.today()
    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return age


class PetCreate(BaseModel):
    """Full set of attributes required to create a pet."""

    name: PetName
    category: PetCategory
    birthday: date
    gender: PetGender

    model_config = ConfigDict(extra="ignore")

    @field_validator("birthday", mode="before")
    @classmethod
    def _birthday_is_iso_date(cls, value: object) -> object:
        # Only YYYY-MM-DD strings; no timestamps or other ISO variants.
        if value is None or isinstance(value, date):
            return value
        if isinstance(value, str) and ISO_DATE_PATTERN.fullmatch(value.strip()):
            try:
                return date.fromisoformat(value.strip())
            except ValueError:
                pass
        raise PydanticCustomError("birthday_invalid", "Birthday must be a valid date")

    @field_validator("birthday")
    @classmethod
    def _birthday_in_range(cls, value: date | None, info: ValidationInfo) -> date | None:
        if value is None:
            return value
        today = (info.context or {}).get("today") or date.today()
        if value > today:
            raise PydanticCustomError(
                "birthday_future", "Birthday cannot be in the future"
            )
        if value.year < MIN_BIRTH_YEAR:
            raise PydanticCustomError(
                "birthday_too_old", "Birthday must be after year 1900"
            )
        return value


class PetUpdate(PetCreate):
    """Partial patch; every field independently optional."""

    name: PetName | None = None
    category: PetCategory | None = None
    birthday: date | None = None
    gender: PetGender | None = None


class PetRead(BaseModel):
    """Serialized pet representation."""

    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    category: str
    birthday: date
    gender: PetGender
    image_path: str | None = None
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def age_years(self) -> int:
        return age_in_years(self.birthday)
