"""User-facing pet operations.

Each operation sequences validation, the image side effect and the owner-scoped
database write, then reports a structured result. Nothing raised by a
collaborator escapes: failures are logged server-side and returned as
user-safe messages.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from petmanager.core.config import Settings, get_settings
from petmanager.integrations import S3Client
from petmanager.models.pet import Pet
from petmanager.models.user import User
from petmanager.schemas.pet import PetRead
from petmanager.schemas.results import PetActionResult, PetLookup
from petmanager.services import image_service, pet_service
from petmanager.services.error_translator import (
    UPLOAD_FAILED_MESSAGE,
    log_failure,
    user_message,
)
from petmanager.services.errors import StoreFailure
from petmanager.services.image_service import UploadedImage
from petmanager.services.validation import validate_pet

logger = logging.getLogger(__name__)

PETS_PATH = "/pets"
NEW_PET_PATH = "/pets/new"
EDIT_NOT_FOUND_MESSAGE = "Pet not found or you do not have permission to edit it."
DELETE_NOT_FOUND_MESSAGE = "Pet not found or you do not have permission to delete it."


def pet_path(pet_id: uuid.UUID | str) -> str:
    return f"{PETS_PATH}/{pet_id}"


def edit_pet_path(pet_id: uuid.UUID | str) -> str:
    return f"{PETS_PATH}/{pet_id}/edit"


class PathInvalidator(Protocol):
    """Receives the view paths whose cached rendering is now stale."""

    def invalidate(self, path: str) -> None: ...


class NullInvalidator:
    def invalidate(self, path: str) -> None:
        return None


@dataclass
class CollectingInvalidator:
    """Records invalidated paths in order, without duplicates."""

    paths: list[str] = field(default_factory=list)

    def invalidate(self, path: str) -> None:
        if path not in self.paths:
            self.paths.append(path)

    def header_value(self) -> str:
        return ", ".join(self.paths)


@dataclass
class PetContext:
    """Everything an operation needs; the caller supplies the identity."""

    session: AsyncSession
    storage: S3Client
    user: User | None = None
    settings: Settings = field(default_factory=get_settings)
    invalidator: PathInvalidator = field(default_factory=NullInvalidator)
    today: date | None = None


def pet_to_read(pet: Pet, settings: Settings) -> PetRead:
    """Serialize ``pet`` with its public image URL."""
    read = PetRead.model_validate(pet)
    return read.model_copy(
        update={"image_url": image_service.public_image_url(pet.image_path, settings)}
    )


def _failure(exc: Exception, context: str) -> PetActionResult:
    log_failure(exc, context)
    return PetActionResult.failed(user_message(exc))


def _upload(ctx: PetContext, owner_id: uuid.UUID, image: UploadedImage) -> str:
    return image_service.upload_pet_image(
        ctx.storage, owner_id=owner_id, image=image, settings=ctx.settings
    )


async def create_pet(
    ctx: PetContext,
    raw: Mapping[str, Any],
    image: UploadedImage | None = None,
) -> PetActionResult:
    """Validate, upload the optional image, then insert the row."""
    if ctx.user is None:
        return PetActionResult.login_required(NEW_PET_PATH)
    owner_id = ctx.user.id

    validation = validate_pet(
        raw, image=image, today=ctx.today, settings=ctx.settings
    )
    if not validation.ok:
        return PetActionResult.invalid(validation.field_errors)

    try:
        image_path: str | None = None
        if validation.image is not None:
            try:
                image_path = _upload(ctx, owner_id, validation.image)
            except StoreFailure as exc:
                log_failure(exc, "pets.create.upload")
                return PetActionResult.failed(UPLOAD_FAILED_MESSAGE)

        pet = await pet_service.create_pet(
            ctx.session, owner_id=owner_id, image_path=image_path, **validation.attributes
        )
    except Exception as exc:
        return _failure(exc, "pets.create")

    logger.info("Created pet %s for user %s", pet.id, owner_id)
    ctx.invalidator.invalidate(PETS_PATH)
    return PetActionResult.succeeded(PETS_PATH, pet=pet_to_read(pet, ctx.settings))


async def update_pet(
    ctx: PetContext,
    pet_id: uuid.UUID,
    raw: Mapping[str, Any],
    image: UploadedImage | None = None,
    remove_image: bool = False,
) -> PetActionResult:
    """Apply a partial patch and the resolved image change to an owned pet.

    ``remove_image`` takes precedence over a new file. Replacing an image
    deletes the old object first (best-effort) and only writes the new key
    after a successful upload.
    """
    if ctx.user is None:
        return PetActionResult.login_required(edit_pet_path(pet_id))
    owner_id = ctx.user.id

    try:
        existing = await pet_service.get_pet(
            ctx.session, owner_id=owner_id, pet_id=pet_id
        )
        if existing is None:
            return PetActionResult.not_found(EDIT_NOT_FOUND_MESSAGE)

        validation = validate_pet(
            raw, image=image, partial=True, today=ctx.today, settings=ctx.settings
        )
        if not validation.ok:
            return PetActionResult.invalid(validation.field_errors)

        changes = dict(validation.attributes)
        old_key = existing.image_path
        if remove_image:
            image_service.discard_image(ctx.storage, old_key)
            changes["image_path"] = None
        elif validation.image is not None:
            image_service.discard_image(ctx.storage, old_key)
            try:
                changes["image_path"] = _upload(ctx, owner_id, validation.image)
            except StoreFailure as exc:
                log_failure(exc, "pets.update.upload")
                return PetActionResult.failed(UPLOAD_FAILED_MESSAGE)

        pet = await pet_service.update_pet(
            ctx.session, owner_id=owner_id, pet_id=pet_id, changes=changes
        )
    except Exception as exc:
        return _failure(exc, "pets.update")

    if pet is None:
        return PetActionResult.not_found(EDIT_NOT_FOUND_MESSAGE)

    logger.info("Updated pet %s (%s)", pet_id, ", ".join(sorted(changes)) or "no changes")
    ctx.invalidator.invalidate(PETS_PATH)
    ctx.invalidator.invalidate(pet_path(pet_id))
    return PetActionResult.succeeded(
        pet_path(pet_id), pet=pet_to_read(pet, ctx.settings)
    )


async def delete_pet(ctx: PetContext, pet_id: uuid.UUID) -> PetActionResult:
    """Delete an owned pet and, best-effort, its image."""
    if ctx.user is None:
        return PetActionResult.login_required(PETS_PATH)
    owner_id = ctx.user.id

    try:
        existing = await pet_service.get_pet(
            ctx.session, owner_id=owner_id, pet_id=pet_id
        )
        if existing is None:
            return PetActionResult.not_found(DELETE_NOT_FOUND_MESSAGE)

        image_service.discard_image(ctx.storage, existing.image_path)
        deleted = await pet_service.delete_pet(
            ctx.session, owner_id=owner_id, pet_id=pet_id
        )
    except Exception as exc:
        return _failure(exc, "pets.delete")

    if not deleted:
        return PetActionResult.not_found(DELETE_NOT_FOUND_MESSAGE)

    logger.info("Deleted pet %s for user %s", pet_id, owner_id)
    ctx.invalidator.invalidate(PETS_PATH)
    return PetActionResult.succeeded(PETS_PATH)


async def list_pets(ctx: PetContext) -> PetLookup[Sequence[PetRead]]:
    """Newest pets first, capped by ``PET_LIST_LIMIT``."""
    if ctx.user is None:
        return PetLookup.login_required(PETS_PATH)
    try:
        pets = await pet_service.list_pets(
            ctx.session, owner_id=ctx.user.id, limit=ctx.settings.pet_list_limit
        )
    except Exception as exc:
        log_failure(exc, "pets.list")
        return PetLookup.failed(user_message(exc))
    return PetLookup.of([pet_to_read(pet, ctx.settings) for pet in pets])


async def get_pet(ctx: PetContext, pet_id: uuid.UUID) -> PetLookup[PetRead]:
    if ctx.user is None:
        return PetLookup.login_required(pet_path(pet_id))
    try:
        pet = await pet_service.get_pet(
            ctx.session, owner_id=ctx.user.id, pet_id=pet_id
        )
    except Exception as exc:
        log_failure(exc, "pets.get")
        return PetLookup.failed(user_message(exc))
    if pet is None:
        return PetLookup.missing()
    return PetLookup.of(pet_to_read(pet, ctx.settings))


__all__ = [
    "CollectingInvalidator",
    "DELETE_NOT_FOUND_MESSAGE",
    "EDIT_NOT_FOUND_MESSAGE",
    "NullInvalidator",
    "PathInvalidator",
    "PetContext",
    "create_pet",
    "delete_pet",
    "get_pet",
    "list_pets",
    "pet_to_read",
    "update_pet",
]
