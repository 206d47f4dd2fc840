"""Pet photo handling: key derivation, compression and bucket side effects."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, replace
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from petmanager.core.config import Settings
from petmanager.integrations import S3Client, S3ClientError
from petmanager.services.errors import StoreFailure, StoreFailureKind

logger = logging.getLogger(__name__)

JPEG = "image/jpeg"
PNG = "image/png"
ACCEPTED_IMAGE_TYPES = (JPEG, PNG)
_CONTENT_TYPE_ALIASES = {"image/jpg": JPEG, "image/pjpeg": JPEG}
_PIL_FORMATS = {JPEG: "JPEG", PNG: "PNG"}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_JPEG_QUALITY_STEPS = (85, 75, 65, 55, 45)


@dataclass(frozen=True)
class UploadedImage:
    """An image file attached to a pet form."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_empty(self) -> bool:
        return not self.data


def normalise_content_type(content_type: str | None) -> str:
    value = (content_type or "").split(";", 1)[0].strip().lower()
    return _CONTENT_TYPE_ALIASES.get(value, value)


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename) or "image"


def build_storage_key(owner_id: uuid.UUID | str, filename: str) -> str:
    """Return ``{owner}/pets/{uuid}-{filename}``; unique even for reused names."""
    return f"{owner_id}/pets/{uuid.uuid4()}-{sanitize_filename(filename)}"


def _resize(image: Image.Image, max_dimension: int) -> Image.Image:
    width, height = image.size
    longest = max(width, height)
    if longest <= max_dimension:
        return image
    scale = max_dimension / float(longest)
    new_size = (max(int(width * scale), 1), max(int(height * scale), 1))
    return image.resize(new_size, Image.Resampling.LANCZOS)


def _encode(image: Image.Image, pil_format: str, quality: int) -> bytes:
    buffer = BytesIO()
    if pil_format == "JPEG":
        if image.mode not in {"RGB", "L"}:
            image = image.convert("RGB")
        image.save(buffer, format="JPEG", quality=quality, optimize=True)
    else:
        image.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def compress_image(
    upload: UploadedImage,
    *,
    max_dimension: int = 1920,
    max_bytes: int = 1024 * 1024,
) -> UploadedImage:
    """Shrink ``upload`` in its own format; fall back to the original on any failure.

    The longest side is bounded by ``max_dimension``. JPEG quality is lowered
    step by step until the result fits ``max_bytes`` or the floor is reached.
    A result that is not smaller than the input is discarded.
    """
    pil_format = _PIL_FORMATS.get(normalise_content_type(upload.content_type))
    if pil_format is None:
        return upload

    try:
        with Image.open(BytesIO(upload.data)) as source:
            source.load()
            resized = _resize(source, max_dimension)
            if pil_format == "JPEG":
                output = b""
                for quality in _JPEG_QUALITY_STEPS:
                    output = _encode(resized, pil_format, quality)
                    if len(output) <= max_bytes:
                        break
            else:
                output = _encode(resized, pil_format, 0)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        MemoryError,
    ) as exc:
        logger.warning("Image compression failed for %s: %s", upload.filename, exc)
        return upload

    if not output or len(output) >= upload.size:
        return upload
    return replace(upload, data=output)


def upload_pet_image(
    storage: S3Client,
    *,
    owner_id: uuid.UUID,
    image: UploadedImage,
    settings: Settings,
) -> str:
    """Compress (optionally) and store ``image``; return the new storage key."""
    if settings.image_compress:
        image = compress_image(
            image,
            max_dimension=settings.image_max_dimension,
            max_bytes=settings.image_target_bytes,
        )
    key = build_storage_key(owner_id, image.filename)
    try:
        storage.put_object(
            key,
            image.data,
            content_type=normalise_content_type(image.content_type),
            overwrite=False,
            cache_seconds=settings.s3_cache_seconds,
        )
    except S3ClientError as exc:
        raise StoreFailure(
            StoreFailureKind.UPLOAD_FAILED, source="storage", detail=str(exc)
        ) from exc
    logger.info("Stored pet image %s (%d bytes)", key, image.size)
    return key


def discard_image(storage: S3Client, key: str | None) -> bool:
    """Best-effort delete; failures are logged and reported as ``False``."""
    if not key:
        return True
    try:
        storage.delete_object(key)
    except S3ClientError as exc:
        logger.warning("Failed to delete pet image %s: %s", key, exc)
        return False
    return True


def public_image_url(key: str | None, settings: Settings) -> str | None:
    """Public URL for a stored key; no network access."""
    if key is None:
        return None
    base = settings.storage_public_base_url or settings.s3_endpoint_url
    normalised = key.lstrip("/")
    if base:
        return f"{base.rstrip('/')}/{settings.s3_bucket}/{normalised}"
    return f"/{settings.s3_bucket}/{normalised}"
