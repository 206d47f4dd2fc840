"""ORM models package export."""

from petmanager.models.pet import Pet, PetGender
from petmanager.models.revoked_token import RevokedToken
from petmanager.models.user import User

__all__ = [
    "Pet",
    "PetGender",
    "RevokedToken",
    "User",
]
