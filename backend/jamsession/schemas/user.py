"""
Jam Session Backend — User Request/Response Schemas
=====================================================

What:  Pydantic models defining the /users and /me API contract.
How:   FastAPI validates request bodies against these models before a handler
       runs; a failure becomes a 400 with the list of field errors.

Field constraints:
    nickname  2..80 characters
    email     valid address, 10..100 characters
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


EMAIL_MIN_LENGTH = 10
EMAIL_MAX_LENGTH = 100
MAX_INSTRUMENTS = 20


def _check_email_length(v: str) -> str:
    if not EMAIL_MIN_LENGTH <= len(v) <= EMAIL_MAX_LENGTH:
        raise ValueError(
            f"email must be between {EMAIL_MIN_LENGTH} and {EMAIL_MAX_LENGTH} characters"
        )
    return v


def _clean_instruments(v: List[str]) -> List[str]:
    cleaned = [name.strip() for name in v if name and name.strip()]
    if len(cleaned) > MAX_INSTRUMENTS:
        raise ValueError(f"at most {MAX_INSTRUMENTS} instruments can be listed")
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class UserBase(BaseModel):
    nickname: str = Field(min_length=2, max_length=80, examples=["Javier"])
    email: EmailStr = Field(examples=["avileslopez.javier@gmail.com"])

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return _check_email_length(v)


class UserCreate(UserBase):
    """Body of POST /users."""
    auth_id: Optional[str] = Field(default=None, max_length=255)
    is_available: bool = False
    instruments: List[str] = Field(default_factory=list)
    availability_description: Optional[str] = Field(default=None, max_length=1000)
    availability_expires_at: Optional[datetime] = None

    @field_validator("instruments")
    @classmethod
    def validate_instruments(cls, v: List[str]) -> List[str]:
        return _clean_instruments(v)


class UserUpdate(UserCreate):
    """
    Body of PUT /users/{id}.

    nickname and email are always replaced; the optional fields are only
    applied when present in the body.
    """


class AvailabilityUpdate(BaseModel):
    """Body of PUT /me/availability."""
    is_available: bool
    instruments: List[str] = Field(default_factory=list, examples=[["guitar", "vocals"]])
    description: Optional[str] = Field(default=None, max_length=1000)
    expires_at: Optional[datetime] = Field(
        default=None,
        description="When the availability lapses (ISO 8601). Null means no expiry.",
    )

    @field_validator("instruments")
    @classmethod
    def validate_instruments(cls, v: List[str]) -> List[str]:
        return _clean_instruments(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(BaseModel):
    """Compact user embedded in jam responses (author, attendants)."""
    id: int
    nickname: str
    email: str

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Full user profile returned by the /users endpoints."""
    id: int
    nickname: str
    email: str
    is_available: bool
    instruments: List[str]
    availability_description: Optional[str] = None
    availability_expires_at: Optional[datetime] = None
    auth_id: Optional[str] = None
    is_admin: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
