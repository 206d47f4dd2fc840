"""Schema exports."""

from petmanager.schemas.auth import (
    LoginRequest,
    RegistrationRequest,
    UserRead,
)
from petmanager.schemas.pet import PetCreate, PetRead, PetUpdate
from petmanager.schemas.results import (
    ActionResult,
    AuthActionResult,
    PetActionResult,
    PetLookup,
    ResultKind,
)

__all__ = [
    "ActionResult",
    "AuthActionResult",
    "LoginRequest",
    "PetActionResult",
    "PetCreate",
    "PetLookup",
    "PetRead",
    "PetUpdate",
    "RegistrationRequest",
    "ResultKind",
    "UserRead",
]
