"""Versioned API router."""

from fastapi import APIRouter

from . import auth, health, pets

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(pets.router, prefix="/pets", tags=["pets"])

__all__ = ["router"]
