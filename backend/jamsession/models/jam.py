"""
Jam Session Backend — Jam SQLAlchemy Model
============================================

What:  ORM model for the `jams` table plus the `jam_attendants` association
       table, and the conversion between stored geometries and GeoJSON points.
How:   `coordinates` is a PostGIS geometry(POINT, 4326) column handled by
       GeoAlchemy2; proximity queries run in the database (ST_DWithin).

Table Design:
    - author_id ON DELETE CASCADE: deleting a user deletes the jams they created
    - GiST index on coordinates::geography: proximity queries cast to
      geography, so the index is built on that expression, not on the column
    - jam_attendants: composite primary key (jam_id, user_id), both cascading
"""

from datetime import datetime
from typing import List, Optional, Sequence

from geoalchemy2 import Geography, Geometry
from geoalchemy2.shape import from_shape, to_shape
from shapely.geometry import Point as ShapelyPoint
from sqlalchemy import Column, ForeignKey, Index, Integer, Table, cast, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from jamsession.database import Base
from jamsession.models.user import User, utcnow

# WGS 84: longitude/latitude in degrees
SRID = 4326

# Plain `geography` (no typmod): casting to it makes PostGIS measure in meters
GEOGRAPHY = Geography(geometry_type=None)


jam_attendants = Table(
    "jam_attendants",
    Base.metadata,
    Column("jam_id", ForeignKey("jams.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Jam(Base):
    """
    A location-tagged session other users can join.

    Invariants:
        - coordinates are always set (NOT NULL)
        - the author is among the attendants when the jam is created
    """

    __tablename__ = "jams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    coordinates = mapped_column(
        Geometry(geometry_type="POINT", srid=SRID, spatial_index=False),
        nullable=False,
    )

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

    author: Mapped[Optional[User]] = relationship(User, back_populates="jams")
    attendants: Mapped[List[User]] = relationship(
        User,
        secondary=jam_attendants,
        back_populates="attended_jams",
        order_by=jam_attendants.c.user_id,
    )

    def __repr__(self) -> str:
        return f"<Jam(id={self.id}, author_id={self.author_id})>"


Index(
    "idx_jams_coordinates_geography",
    cast(Jam.coordinates, GEOGRAPHY),
    postgresql_using="gist",
)


# ── Geometry helpers ──────────────────────────────────────────────────────

def point_to_geometry(coordinates: Sequence[float]):
    """Builds the column value for a [lng, lat] pair."""
    lng, lat = coordinates
    return from_shape(ShapelyPoint(lng, lat), srid=SRID)


def geometry_to_coordinates(geometry) -> Optional[List[float]]:
    """Returns [lng, lat] for a stored point, or None when the column is empty."""
    if geometry is None:
        return None
    shape = to_shape(geometry)
    return [shape.x, shape.y]
