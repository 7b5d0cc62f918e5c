"""
Jam Session Backend — Jam Request/Response Schemas
====================================================

What:  Pydantic models for the /jams API contract and the GeoJSON Point.

Coordinates travel as a raw [lng, lat] pair in request bodies and as a
GeoJSON Point ({"type": "Point", "coordinates": [lng, lat]}) in responses.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from jamsession.schemas.common import MAX_ID, RowId
from jamsession.schemas.user import UserSummary


def validate_lng_lat(v: List[float]) -> List[float]:
    """Checks that a coordinate pair is [longitude, latitude] within range."""
    if len(v) != 2:
        raise ValueError("coordinates must be a [longitude, latitude] pair")
    lng, lat = v
    if not -180 <= lng <= 180:
        raise ValueError("longitude must be between -180 and 180")
    if not -90 <= lat <= 90:
        raise ValueError("latitude must be between -90 and 90")
    return [float(lng), float(lat)]


class Point(BaseModel):
    """A GeoJSON Point in WGS 84."""
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(examples=[[6.3, 4]])

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: List[float]) -> List[float]:
        return validate_lng_lat(v)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class JamCreate(BaseModel):
    """Body of POST /jams. The author becomes the first attendant."""
    author: int = Field(ge=1, le=MAX_ID, description="id of the authoring user", examples=[1])
    coordinates: List[float] = Field(
        description="[longitude, latitude]",
        examples=[[6.3, 4]],
    )

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: List[float]) -> List[float]:
        return validate_lng_lat(v)


class JamUpdate(BaseModel):
    """Body of PUT /jams/{id}. Omitted fields keep their stored value."""
    coordinates: Optional[List[float]] = Field(default=None, examples=[[6.3, 4]])
    attendants: Optional[List[RowId]] = Field(
        default=None,
        description="Complete list of attendant user ids",
        examples=[[1, 2]],
    )

    @field_validator("coordinates")
    @classmethod
    def validate_coordinates(cls, v: Optional[List[float]]) -> Optional[List[float]]:
        if v is None:
            return v
        return validate_lng_lat(v)


class NearQuery(BaseModel):
    """Parsed `point[...]` query parameters of GET /jams."""
    lng: float
    lat: float
    max_distance: float = Field(gt=0, description="Radius in meters")

    def to_geojson(self) -> dict:
        return {"type": "Point", "coordinates": [self.lng, self.lat]}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class JamResponse(BaseModel):
    id: int
    author: Optional[UserSummary] = None
    coordinates: Optional[Point] = None
    attendants: List[UserSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
