"""Tests for pet image key derivation, compression and storage helpers."""

from __future__ import annotations

import logging
import uuid
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from petmanager.core.config import get_settings
from petmanager.integrations import S3Client, S3ObjectExistsError
from petmanager.services.errors import StoreFailure, StoreFailureKind
from petmanager.services.image_service import (
    UploadedImage,
    build_storage_key,
    compress_image,
    discard_image,
    public_image_url,
    upload_pet_image,
)


def _create_sample_jpeg(width: int = 2400, height: int = 1600) -> bytes:
    image = Image.effect_noise((width, height), 64).convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def test_storage_key_is_namespaced_and_unique() -> None:
    owner_id = uuid.uuid4()
    first = build_storage_key(owner_id, "my dog (1).png")
    second = build_storage_key(owner_id, "my dog (1).png")

    assert first != second
    assert first.startswith(f"{owner_id}/pets/")
    assert first.endswith("-my_dog__1_.png")
    assert build_storage_key(owner_id, "").endswith("-image")


def test_compress_bounds_dimensions_and_keeps_format() -> None:
    original = UploadedImage("big.jpg", "image/jpeg", _create_sample_jpeg())
    compressed = compress_image(original, max_dimension=800, max_bytes=200_000)

    assert compressed.size < original.size
    with Image.open(BytesIO(compressed.data)) as result:
        assert result.format == "JPEG"
        assert max(result.size) <= 800


def test_compress_returns_original_for_non_images() -> None:
    raw = UploadedImage("broken.png", "image/png", b"not-an-image")
    assert compress_image(raw) is raw


def test_compress_falls_back_for_oversized_pixel_counts(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    buffer = BytesIO()
    Image.new("1", (400, 400)).save(buffer, format="PNG")
    huge = UploadedImage("huge.png", "image/png", buffer.getvalue())
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10_000)

    assert compress_image(huge, max_dimension=100) is huge


def test_upload_writes_without_overwrite(tmp_path: Path) -> None:
    storage = S3Client("pet-images", root=tmp_path)
    owner_id = uuid.uuid4()
    image = UploadedImage("luna.png", "image/png", b"\x89PNG-not-really")

    key = upload_pet_image(
        storage, owner_id=owner_id, image=image, settings=get_settings()
    )

    assert key.startswith(f"{owner_id}/pets/")
    assert storage.get_object_bytes(key) == image.data
    stored = storage.get_object_metadata(key)
    assert stored is not None
    assert stored.cache_control == f"max-age={get_settings().s3_cache_seconds}"
    assert storage.build_object_url(key) == f"/pet-images/{key}"
    with pytest.raises(S3ObjectExistsError):
        storage.put_object(key, b"other", content_type="image/png")


def test_upload_failure_is_classified(tmp_path: Path) -> None:
    class BrokenStorage(S3Client):
        def put_object(self, key, data, **kwargs):  # type: ignore[no-untyped-def]
            raise S3ObjectExistsError("collision")

    storage = BrokenStorage("pet-images", root=tmp_path)
    image = UploadedImage("luna.png", "image/png", b"data")

    with pytest.raises(StoreFailure) as excinfo:
        upload_pet_image(
            storage, owner_id=uuid.uuid4(), image=image, settings=get_settings()
        )
    assert excinfo.value.kind is StoreFailureKind.UPLOAD_FAILED


def test_discard_is_best_effort(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    storage = S3Client("pet-images", root=tmp_path)
    storage.put_object("u/pets/a.png", b"data", content_type="image/png")

    assert discard_image(storage, "u/pets/a.png") is True
    assert not storage.object_exists("u/pets/a.png")

    with caplog.at_level(logging.WARNING):
        assert discard_image(storage, "u/pets/a.png") is False
    assert "Failed to delete pet image" in caplog.text
    assert discard_image(storage, None) is True


def test_public_url_is_pure() -> None:
    settings = get_settings()
    assert public_image_url(None, settings) is None
    assert (
        public_image_url("u/pets/a.png", settings)
        == f"/{settings.s3_bucket}/u/pets/a.png"
    )

    cdn = settings.model_copy(
        update={"storage_public_base_url": "https://cdn.example.com/"}
    )
    assert (
        public_image_url("u/pets/a.png", cdn)
        == f"https://cdn.example.com/{settings.s3_bucket}/u/pets/a.png"
    )
