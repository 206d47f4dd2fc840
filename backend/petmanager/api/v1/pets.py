"""Pet management API.

Mutations accept multipart forms so an image can travel with the attributes.
Unauthenticated calls are answered with a ``login_required`` result that
carries the login path and the originally requested destination.
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from petmanager.api import deps
from petmanager.api.responses import lookup_response, result_response
from petmanager.core.config import Settings
from petmanager.integrations import S3Client
from petmanager.models.user import User
from petmanager.schemas.pet import PetRead
from petmanager.schemas.results import PetActionResult
from petmanager.services import pet_lifecycle
from petmanager.services.image_service import UploadedImage
from petmanager.services.pet_lifecycle import CollectingInvalidator, PetContext

router = APIRouter()

SessionDep = Annotated[AsyncSession, Depends(deps.get_db_session)]
StorageDep = Annotated[S3Client, Depends(deps.get_s3_client)]
SettingsDep = Annotated[Settings, Depends(deps.get_app_settings)]
OptionalUserDep = Annotated[User | None, Depends(deps.get_optional_user)]


async def _read_upload(upload: UploadFile | None) -> UploadedImage | None:
    if upload is None:
        return None
    return UploadedImage(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        data=await upload.read(),
    )


def _context(
    session: AsyncSession, storage: S3Client, user: User | None, settings: Settings
) -> PetContext:
    return PetContext(
        session=session,
        storage=storage,
        user=user,
        settings=settings,
        invalidator=CollectingInvalidator(),
    )


def _respond(
    result: PetActionResult, ctx: PetContext, *, success_status: int = status.HTTP_200_OK
) -> JSONResponse:
    invalidator = ctx.invalidator
    return result_response(
        result,
        success_status=success_status,
        invalidator=invalidator if isinstance(invalidator, CollectingInvalidator) else None,
    )


@router.get(
    "",
    response_model=list[PetRead],
    summary="List pets",
    responses={401: {"description": "Login required"}},
)
async def list_pets(
    session: SessionDep,
    storage: StorageDep,
    settings: SettingsDep,
    current_user: OptionalUserDep,
) -> JSONResponse:
    """Return the caller's newest pets."""
    ctx = _context(session, storage, current_user, settings)
    return lookup_response(await pet_lifecycle.list_pets(ctx))


@router.post(
    "",
    response_model=PetActionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create pet",
)
async def create_pet(
    session: SessionDep,
    storage: StorageDep,
    settings: SettingsDep,
    current_user: OptionalUserDep,
    name: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    birthday: Annotated[str | None, Form()] = None,
    gender: Annotated[str | None, Form()] = None,
    image: Annotated[UploadFile | None, File()] = None,
) -> JSONResponse:
    """Create a pet, uploading the optional photo first."""
    ctx = _context(session, storage, current_user, settings)
    raw = {"name": name, "category": category, "birthday": birthday, "gender": gender}
    result = await pet_lifecycle.create_pet(ctx, raw, await _read_upload(image))
    return _respond(result, ctx, success_status=status.HTTP_201_CREATED)


@router.get("/{pet_id}", response_model=PetRead, summary="Get pet")
async def get_pet(
    pet_id: uuid.UUID,
    session: SessionDep,
    storage: StorageDep,
    settings: SettingsDep,
    current_user: OptionalUserDep,
) -> JSONResponse:
    """Fetch a pet profile."""
    ctx = _context(session, storage, current_user, settings)
    return lookup_response(await pet_lifecycle.get_pet(ctx, pet_id))


@router.patch("/{pet_id}", response_model=PetActionResult, summary="Update pet")
async def update_pet(
    pet_id: uuid.UUID,
    session: SessionDep,
    storage: StorageDep,
    settings: SettingsDep,
    current_user: OptionalUserDep,
    name: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    birthday: Annotated[str | None, Form()] = None,
    gender: Annotated[str | None, Form()] = None,
    remove_image: Annotated[bool, Form()] = False,
    image: Annotated[UploadFile | None, File()] = None,
) -> JSONResponse:
    """Patch the supplied fields and apply the requested image change."""
    ctx = _context(session, storage, current_user, settings)
    raw = {"name": name, "category": category, "birthday": birthday, "gender": gender}
    result = await pet_lifecycle.update_pet(
        ctx, pet_id, raw, image=await _read_upload(image), remove_image=remove_image
    )
    return _respond(result, ctx)


@router.delete("/{pet_id}", response_model=PetActionResult, summary="Delete pet")
async def delete_pet(
    pet_id: uuid.UUID,
    session: SessionDep,
    storage: StorageDep,
    settings: SettingsDep,
    current_user: OptionalUserDep,
) -> JSONResponse:
    """Delete a pet and its photo."""
    ctx = _context(session, storage, current_user, settings)
    return _respond(await pet_lifecycle.delete_pet(ctx, pet_id), ctx)
