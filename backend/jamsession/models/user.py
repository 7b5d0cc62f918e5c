"""
Jam Session Backend — User SQLAlchemy Model
=============================================

What:  ORM model for the `users` table.
Who:   UserService for CRUD, JamService for authors/attendants, Alembic.

Relationships:
    jams           one-to-many, jams authored by this user
                   (FK jams.author_id ON DELETE CASCADE)
    attended_jams  many-to-many through jam_attendants
"""

from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jamsession.database import Base

if TYPE_CHECKING:
    from jamsession.models.jam import Jam


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A musician profile.

    Lifecycle:
        Created by POST /users, edited by PUT /users/{id} and
        PUT /me/availability, removed by DELETE /users/{id} or /testusers.
        Removing a user removes the jams they authored (database cascade)
        and their attendance rows.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    nickname: Mapped[str] = mapped_column(String(80), nullable=False)

    email: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
    )

    # ── Availability ──────────────────────────────────────────────────────
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    instruments: Mapped[List[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
        comment="Instruments the user can bring to a jam",
    )
    availability_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    availability_expires_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
        comment="When the availability flag stops being meaningful (UTC)",
    )

    # ── Identity ──────────────────────────────────────────────────────────
    auth_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Subject of the identity provider's tokens",
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # ── Relationships ─────────────────────────────────────────────────────
    # passive_deletes: the database cascade removes authored jams, so the ORM
    # never has to load them just to delete the user.
    jams: Mapped[List["Jam"]] = relationship(
        "Jam",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    attended_jams: Mapped[List["Jam"]] = relationship(
        "Jam",
        secondary="jam_attendants",
        back_populates="attendants",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, nickname='{self.nickname}', email='{self.email}')>"
