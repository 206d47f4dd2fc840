"""Pet record model."""

from __future__ import annotations

import enum
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from petmanager.db.base import Base
from petmanager.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from petmanager.models.user import User


class PetGender(str, enum.Enum):
    """Accepted pet genders."""

    MALE = "male"
    FEMALE = "female"


class Pet(TimestampMixin, Base):
    """One animal owned by exactly one user."""

    __tablename__ = "pets"

    __table_args__ = (Index("ix_pets_owner_created", "owner_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    birthday: Mapped[date] = mapped_column(Date(), nullable=False)
    gender: Mapped[PetGender] = mapped_column(
        Enum(PetGender, values_callable=lambda kinds: [kind.value for kind in kinds]),
        nullable=False,
    )
    image_path: Mapped[str | None] = mapped_column(String(512))

    owner: Mapped["User"] = relationship("User", back_populates="pets")
