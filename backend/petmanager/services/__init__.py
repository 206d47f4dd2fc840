"""Service layer exports."""
from petmanager.services import (
    auth_service,
    image_service,
    pet_lifecycle,
    pet_service,
    user_service,
)

__all__ = [
    "auth_service",
    "image_service",
    "pet_lifecycle",
    "pet_service",
    "user_service",
]
