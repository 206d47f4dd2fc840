"""Filesystem-backed S3-style bucket used for pet images."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


class S3ClientError(RuntimeError):
    """Raised when storage operations fail."""


class S3ObjectExistsError(S3ClientError):
    """Raised when a no-overwrite put targets an existing key."""


@dataclass
class StoredObject:
    """Metadata for an object stored via the helper."""

    key: str
    path: Path
    size: int
    content_type: str
    cache_control: str | None = None


class S3Client:
    """Very small, file-system backed S3 facade for tests and local dev."""

    def __init__(
        self,
        bucket: str,
        *,
        endpoint_url: str | None = None,
        root: Path | None = None,
        default_cache_seconds: int = 0,
    ) -> None:
        if not bucket:
            raise S3ClientError("S3 bucket is not configured")
        self.bucket = bucket
        self._endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None
        self._root = (root or Path.cwd() / ".storage") / bucket
        self._root.mkdir(parents=True, exist_ok=True)
        self._objects: dict[str, StoredObject] = {}
        self._default_cache_seconds = default_cache_seconds

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _normalise_key(self, key: str) -> str:
        normalised = key.lstrip("/")
        if not normalised:
            raise S3ClientError("Storage object key cannot be empty")
        if any(part == ".." for part in normalised.split("/")):
            raise S3ClientError("Storage object key cannot traverse upwards")
        return normalised

    def _path_for(self, key: str) -> Path:
        return self._root / self._normalise_key(key)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def put_object(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        overwrite: bool = False,
        cache_seconds: int | None = None,
    ) -> StoredObject:
        """Write an object; refuses to replace an existing key unless ``overwrite``."""
        normalised = self._normalise_key(key)
        path = self._path_for(normalised)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with path.open("wb" if overwrite else "xb") as handle:
                handle.write(data)
        except FileExistsError as exc:
            raise S3ObjectExistsError(f"Object {normalised} already exists") from exc
        except OSError as exc:
            raise S3ClientError(f"Unable to write object {normalised}") from exc

        seconds = cache_seconds if cache_seconds is not None else self._default_cache_seconds
        stored = StoredObject(
            key=normalised,
            path=path,
            size=len(data),
            content_type=content_type,
            cache_control=f"max-age={seconds}" if seconds > 0 else None,
        )
        self._objects[normalised] = stored
        return stored

    def delete_object(self, key: str) -> None:
        """Remove an object; missing keys are an error."""
        normalised = self._normalise_key(key)
        path = self._path_for(normalised)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise S3ClientError(f"Object {normalised} not found") from exc
        except OSError as exc:
            raise S3ClientError(f"Unable to delete object {normalised}") from exc
        finally:
            self._objects.pop(normalised, None)

    def get_object_bytes(self, key: str) -> bytes:
        path = self._path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise S3ClientError(f"Object {key} not found") from exc

    def object_exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def build_object_url(self, key: str) -> str:
        normalised = self._normalise_key(key)
        if self._endpoint_url:
            return f"{self._endpoint_url}/{self.bucket}/{normalised}"
        return f"/{self.bucket}/{normalised}"

    def get_object_metadata(self, key: str) -> StoredObject | None:
        return self._objects.get(self._normalise_key(key))


def build_s3_client(**overrides: Any) -> S3Client:
    """Factory that honours application settings."""

    from petmanager.core.config import get_settings

    settings = get_settings()
    bucket = overrides.get("bucket") or settings.s3_bucket
    if not bucket:
        raise S3ClientError("S3 bucket is not configured")
    return S3Client(
        bucket,
        endpoint_url=overrides.get("endpoint_url") or settings.s3_endpoint_url,
        root=overrides.get("root") or settings.storage_root,
        default_cache_seconds=settings.s3_cache_seconds,
    )
