"""Turn raw pet form input into normalised attributes or field errors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel, ValidationError

from petmanager.core.config import Settings, get_settings
from petmanager.schemas.pet import PetCreate, PetUpdate
from petmanager.services.image_service import (
    ACCEPTED_IMAGE_TYPES,
    UploadedImage,
    normalise_content_type,
)

PET_FIELDS = ("name", "category", "birthday", "gender")

NAME_REQUIRED = "Pet name is required"
NAME_TOO_LONG = "Pet name must be less than 50 characters"
CATEGORY_REQUIRED = "Category is required"
CATEGORY_TOO_LONG = "Category must be less than 50 characters"
BIRTHDAY_REQUIRED = "Birthday is required"
BIRTHDAY_INVALID = "Birthday must be a valid date"
GENDER_REQUIRED = "Gender is required"
GENDER_INVALID = "Gender must be either male or female"
IMAGE_TYPE_INVALID = "Image must be JPEG or PNG format"

PET_MESSAGES: dict[tuple[str, str], str] = {
    ("name", "missing"): NAME_REQUIRED,
    ("name", "string_too_short"): NAME_REQUIRED,
    ("name", "string_type"): NAME_REQUIRED,
    ("name", "string_too_long"): NAME_TOO_LONG,
    ("category", "missing"): CATEGORY_REQUIRED,
    ("category", "string_too_short"): CATEGORY_REQUIRED,
    ("category", "string_type"): CATEGORY_REQUIRED,
    ("category", "string_too_long"): CATEGORY_TOO_LONG,
    ("birthday", "missing"): BIRTHDAY_REQUIRED,
    ("gender", "missing"): GENDER_REQUIRED,
    ("gender", "enum"): GENDER_INVALID,
}

# Fallbacks for error types not listed above, keyed by field.
_FIELD_FALLBACKS = {
    "name": NAME_REQUIRED,
    "category": CATEGORY_REQUIRED,
    "birthday": BIRTHDAY_INVALID,
    "gender": GENDER_INVALID,
}


@dataclass
class PetValidation:
    """Either ``attributes`` (only supplied fields) or ``field_errors``."""

    attributes: dict[str, Any] = field(default_factory=dict)
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    image: UploadedImage | None = None

    @property
    def ok(self) -> bool:
        return not self.field_errors


def field_errors_from_validation_error(
    exc: ValidationError,
    messages: Mapping[tuple[str, str], str],
    fallbacks: Mapping[str, str] | None = None,
) -> dict[str, list[str]]:
    """Group pydantic errors by top-level field, using fixed messages."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("__root__",)
        field_name = str(loc[0])
        error_type = error.get("type", "")
        message = messages.get((field_name, error_type))
        if message is None and error_type.startswith(field_name + "_"):
            # custom validator errors carry their own message
            message = error.get("msg")
        if message is None and fallbacks:
            message = fallbacks.get(field_name)
        if message is None:
            message = error.get("msg", "Invalid value")
        bucket = errors.setdefault(field_name, [])
        if message not in bucket:
            bucket.append(message)
    return errors


def validate_image(
    image: UploadedImage | None, settings: Settings | None = None
) -> tuple[UploadedImage | None, list[str]]:
    """Return the normalised image (``None`` when empty) and any image errors."""
    if image is None or image.is_empty:
        return None, []
    settings = settings or get_settings()
    errors: list[str] = []
    if image.size > settings.image_max_bytes:
        errors.append(
            f"Image size must be less than {settings.image_size_limit_label}"
        )
    content_type = normalise_content_type(image.content_type)
    if content_type not in ACCEPTED_IMAGE_TYPES:
        errors.append(IMAGE_TYPE_INVALID)
    if errors:
        return None, errors
    return UploadedImage(image.filename, content_type, image.data), []


def _supplied(raw: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for key in PET_FIELDS:
        value = raw.get(key)
        if isinstance(value, str) and key in {"birthday", "gender"}:
            value = value.strip()
            if not value and not partial:
                # blank select/date inputs count as missing on create
                value = None
        if value is None:
            continue
        data[key] = value
    return data


def validate_pet(
    raw: Mapping[str, Any],
    *,
    image: UploadedImage | None = None,
    partial: bool = False,
    today: date | None = None,
    settings: Settings | None = None,
) -> PetValidation:
    """Validate a create (``partial=False``) or update (``partial=True``) payload.

    Never raises for bad input. In partial mode a key that is absent or
    ``None`` means "leave unchanged"; a present value is checked in full.
    """
    data = _supplied(raw, partial=partial)
    schema: type[BaseModel] = PetUpdate if partial else PetCreate

    field_errors: dict[str, list[str]] = {}
    attributes: dict[str, Any] = {}
    try:
        model = schema.model_validate(data, context={"today": today or date.today()})
    except ValidationError as exc:
        field_errors.update(
            field_errors_from_validation_error(exc, PET_MESSAGES, _FIELD_FALLBACKS)
        )
    else:
        attributes = model.model_dump(include=set(data), exclude_none=True)

    normalised_image, image_errors = validate_image(image, settings)
    if image_errors:
        field_errors["image"] = image_errors

    if field_errors:
        return PetValidation(field_errors=field_errors)
    return PetValidation(attributes=attributes, image=normalised_image)


__all__ = [
    "PET_MESSAGES",
    "PetValidation",
    "field_errors_from_validation_error",
    "validate_image",
    "validate_pet",
]
