"""Application configuration via pydantic settings."""

import math
from functools import lru_cache
from pathlib import Path

from typing import Any

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEBUG_ENVIRONMENTS = frozenset({"local", "development", "dev", "test"})


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Pet Manager API"
    api_v1_prefix: str = Field("/api/v1", alias="API_V1_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        "sqlite+aiosqlite:///./petmanager.db", alias="DATABASE_URL"
    )
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    secret_key: str = Field("change-me", alias="SECRET_KEY")
    jwt_secret_key: str = Field(default="", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    redis_url: str | None = Field(default=None, alias="REDIS_URL")
    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_login: str = Field("10/minute", alias="RATE_LIMIT_LOGIN")

    s3_bucket: str = Field("pet-images", alias="S3_BUCKET")
    s3_endpoint_url: str | None = Field(default=None, alias="S3_ENDPOINT_URL")
    s3_cache_seconds: int = Field(3600, alias="S3_CACHE_SECONDS")
    storage_root: Path | None = Field(default=None, alias="STORAGE_ROOT")
    storage_public_base_url: str | None = Field(
        default=None, alias="STORAGE_PUBLIC_BASE_URL"
    )

    image_max_bytes: int = Field(20 * 1024 * 1024, alias="IMAGE_MAX_BYTES")
    image_compress: bool = Field(True, alias="IMAGE_COMPRESS")
    image_max_dimension: int = Field(1920, alias="IMAGE_MAX_DIMENSION")
    image_target_bytes: int = Field(1024 * 1024, alias="IMAGE_TARGET_BYTES")

    pet_list_limit: int = Field(20, alias="PET_LIST_LIMIT")

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=False, alias="CORS_ALLOW_CREDENTIALS")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        case_sensitive=False,
        extra="ignore",
    )

    def model_post_init(self, __context: Any) -> None:
        """Populate JWT secret from the generic secret when not provided."""

        if not self.jwt_secret_key:
            object.__setattr__(self, "jwt_secret_key", self.secret_key)

    @property
    def is_debug_environment(self) -> bool:
        """Whether full error detail may be written to the server log."""
        return self.app_env.lower() in _DEBUG_ENVIRONMENTS

    @property
    def image_size_limit_label(self) -> str:
        """Human readable upload cap, e.g. ``20MB`` or ``512KB``."""
        megabytes = self.image_max_bytes / (1024 * 1024)
        if megabytes >= 1:
            return f"{round(megabytes, 2):g}MB"
        return f"{math.ceil(self.image_max_bytes / 1024)}KB"

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
