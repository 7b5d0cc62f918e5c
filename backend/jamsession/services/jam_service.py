"""
Jam Session Backend — Jam Service
===================================

What:  Jam listing with proximity search, creation, update, joining, and
       author-only deletion.
Who:   Called by the /jams and /testjams route handlers.

Proximity search (GET /jams?point[lng]=..&point[lat]=..&point[maxDistance]=..):
    WHERE ST_DWithin(jams.coordinates::geography, origin::geography, :max, true)
    ORDER BY ST_Distance(jams.coordinates::geography, origin::geography) ASC NULLS FIRST

    origin = ST_SetSRID(ST_GeomFromGeoJSON(:origin), 4326)

    Distances are computed on the spheroid, so :max is in meters. The GiST
    index idx_jams_coordinates_geography is built on the same
    coordinates::geography expression, so it serves the ST_DWithin predicate.
"""

import json
import logging
import math
from typing import Any, List, Optional

from sqlalchemy import cast, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jamsession.auth import TokenUser
from jamsession.config import settings
from jamsession.exceptions import ForbiddenError, NotFoundError, ValidationError
from jamsession.models.jam import (
    GEOGRAPHY,
    SRID,
    Jam,
    geometry_to_coordinates,
    point_to_geometry,
)
from jamsession.models.user import User
from jamsession.schemas.jam import JamCreate, JamResponse, JamUpdate, NearQuery, Point
from jamsession.schemas.user import UserSummary
from jamsession.services.base import translate_db_errors
from jamsession.services.user_service import unknown_caller_error

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    """Parses a query-string value; None when absent or not a finite number."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def build_near_query(
    lng: Any,
    lat: Any,
    max_distance: Any = None,
    default_max_distance: Optional[float] = None,
) -> Optional[NearQuery]:
    """
    Turn the raw `point[...]` query parameters into a NearQuery.

    Returns None (no proximity filter) unless both lng and lat are numeric.
    A missing, non-numeric or non-positive max_distance falls back to the
    configured default radius.

    Raises:
        ValidationError: lng/lat are numeric but outside WGS 84 bounds
    """
    lng_value = _to_float(lng)
    lat_value = _to_float(lat)
    if lng_value is None or lat_value is None:
        return None

    if not -180 <= lng_value <= 180:
        raise ValidationError(
            "point[lng] must be between -180 and 180", field="point[lng]", location="query"
        )
    if not -90 <= lat_value <= 90:
        raise ValidationError(
            "point[lat] must be between -90 and 90", field="point[lat]", location="query"
        )

    radius = _to_float(max_distance)
    if radius is None or radius <= 0:
        radius = default_max_distance or settings.default_max_distance

    return NearQuery(lng=lng_value, lat=lat_value, max_distance=radius)


def jam_to_response(jam: Jam) -> JamResponse:
    """Serializes a jam whose author and attendants are already loaded."""
    coordinates = geometry_to_coordinates(jam.coordinates)
    return JamResponse(
        id=jam.id,
        author=UserSummary.model_validate(jam.author) if jam.author is not None else None,
        coordinates=Point(coordinates=coordinates) if coordinates is not None else None,
        attendants=[UserSummary.model_validate(user) for user in jam.attendants],
        created_at=jam.created_at,
        updated_at=jam.updated_at,
    )


class JamService:
    """Business logic layer for jam operations."""

    def _select_jams(self):
        # Async sessions cannot lazy-load, so relations are loaded up front
        return select(Jam).options(
            selectinload(Jam.author),
            selectinload(Jam.attendants),
        )

    def build_list_query(self, near: Optional[NearQuery] = None):
        """The SELECT behind GET /jams, with the proximity filter when `near` is given."""
        query = self._select_jams()
        if near is None:
            return query.order_by(Jam.id)

        origin = func.ST_SetSRID(func.ST_GeomFromGeoJSON(json.dumps(near.to_geojson())), SRID)
        jam_location = cast(Jam.coordinates, GEOGRAPHY)
        origin_location = cast(origin, GEOGRAPHY)

        return (
            query.where(
                func.ST_DWithin(jam_location, origin_location, near.max_distance, True)
            )
            .order_by(
                func.ST_Distance(jam_location, origin_location).asc().nulls_first(),
                Jam.id,
            )
        )

    async def list_jams(
        self, db: AsyncSession, near: Optional[NearQuery] = None
    ) -> List[JamResponse]:
        async with translate_db_errors("retrieve jams"):
            result = await db.execute(self.build_list_query(near))
            jams = result.scalars().all()

        if near is not None:
            logger.debug(
                "%d jams within %.0fm of (%s, %s)",
                len(jams), near.max_distance, near.lng, near.lat,
            )
        return [jam_to_response(jam) for jam in jams]

    async def get_jam(self, db: AsyncSession, jam_id: int) -> JamResponse:
        """
        Raises:
            NotFoundError: no jam with this id
        """
        jam = await self._load(db, jam_id, action="retrieve")
        return jam_to_response(jam)

    async def create_jam(self, db: AsyncSession, data: JamCreate) -> JamResponse:
        """
        Create a jam at the given [lng, lat] with its author as sole attendant.

        Raises:
            ValidationError: the author id does not match a user
        """
        async with translate_db_errors("create the jam"):
            author = await db.get(User, data.author)
            if author is None:
                raise ValidationError(
                    message="The author of the jam doesn't exist in the db",
                    field="author",
                    context={"author": data.author},
                )

            jam = Jam(
                author=author,
                coordinates=point_to_geometry(data.coordinates),
                attendants=[author],
            )
            db.add(jam)
            await db.flush()

        logger.info("Jam %s created by user %s at %s", jam.id, author.id, data.coordinates)
        return jam_to_response(jam)

    async def update_jam(
        self, db: AsyncSession, jam_id: int, data: JamUpdate
    ) -> JamResponse:
        """
        Apply the submitted coordinates and/or attendant list.

        Raises:
            NotFoundError: no jam with this id
            ValidationError: an attendant id does not match a user
        """
        jam = await self._load(db, jam_id, action="update")

        async with translate_db_errors("update the jam"):
            if data.coordinates is not None:
                jam.coordinates = point_to_geometry(data.coordinates)

            if data.attendants is not None:
                jam.attendants = await self._load_attendants(db, data.attendants)

            await db.flush()

        logger.info("Jam %s updated", jam.id)
        return jam_to_response(jam)

    async def join_jam(
        self, db: AsyncSession, jam_id: int, caller: TokenUser
    ) -> JamResponse:
        """
        Add the caller to the attendants. Joining twice changes nothing.

        Raises:
            NotFoundError: no jam with this id
            ValidationError: no profile exists for the token's e-mail
        """
        jam = await self._load(db, jam_id, action="join")

        async with translate_db_errors("join the jam"):
            result = await db.execute(select(User).where(User.email == caller.email))
            user = result.scalar_one_or_none()
            if user is None:
                raise unknown_caller_error(caller.email)

            if all(attendant.id != user.id for attendant in jam.attendants):
                jam.attendants.append(user)
                await db.flush()
                logger.info("User %s joined jam %s", user.id, jam.id)

        return jam_to_response(jam)

    async def delete_jam(self, db: AsyncSession, jam_id: int, caller: TokenUser) -> None:
        """
        Delete a jam on behalf of its author.

        Raises:
            NotFoundError: no jam with this id
            ForbiddenError: the caller's e-mail is not the author's e-mail
        """
        jam = await self._load(db, jam_id, action="delete")

        if jam.author is None or jam.author.email != caller.email:
            logger.warning("User %s tried to delete jam %s of another author", caller.email, jam_id)
            raise ForbiddenError(
                message="A jam can only be deleted by its author",
                context={"jam_id": jam_id},
            )

        async with translate_db_errors("delete the jam"):
            await db.delete(jam)
            await db.flush()
        logger.info("Jam %s deleted by its author", jam_id)

    async def delete_test_jams(self, db: AsyncSession) -> int:
        """Delete jams authored by test accounts. Returns the count."""
        test_authors = select(User.id).where(User.email.like(settings.test_email_pattern))
        async with translate_db_errors("delete test jams"):
            result = await db.execute(
                delete(Jam)
                .where(Jam.author_id.in_(test_authors))
                .execution_options(synchronize_session=False)
            )
        deleted = result.rowcount or 0
        logger.info("Deleted %d test jams", deleted)
        return deleted

    # ── Internals ────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, jam_id: int, action: str) -> Jam:
        async with translate_db_errors("retrieve the jam"):
            result = await db.execute(self._select_jams().where(Jam.id == jam_id))
            jam = result.scalar_one_or_none()
        if jam is None:
            raise NotFoundError(resource="jam", action=action, resource_id=jam_id)
        return jam

    async def _load_attendants(self, db: AsyncSession, user_ids: List[int]) -> List[User]:
        wanted = list(dict.fromkeys(user_ids))
        if not wanted:
            return []
        result = await db.execute(select(User).where(User.id.in_(wanted)).order_by(User.id))
        users = list(result.scalars().all())
        missing = sorted(set(wanted) - {user.id for user in users})
        if missing:
            raise ValidationError(
                message=f"Unknown attendant ids: {missing}",
                field="attendants",
                context={"missing": missing},
            )
        return users


jam_service = JamService()
