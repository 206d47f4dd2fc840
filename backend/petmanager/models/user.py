"""User model backing the identity provider."""
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petmanager.db.base import Base
from petmanager.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from petmanager.models.pet import Pet


class User(TimestampMixin, Base):
    """An account that owns pets."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    pets: Mapped[list["Pet"]] = relationship(
        "Pet",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
