# socialride/schemas/user.py
import uuid
from datetime import date, datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from socialride.core.security import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    normalize_username,
)


class UserProfile(SQLModel):
    """
    Editable display fields shared by registration and admin updates.

    Validation rules:
      - names are stripped of surrounding whitespace
    """

    model_config = ConfigDict(extra="forbid")

    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: str = Field(default="", max_length=255)
    prefix: str = Field(default="", max_length=8)
    phone: str = Field(default="", max_length=32)
    gender: str = Field(default="", max_length=16)
    birth_date: date | None = None

    @field_validator("first_name", "last_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip()


class UserRegistrant(UserProfile):
    """Payload for local username/password registration."""

    username: str
    password: str = Field(min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        # lengths apply to the stored form
        v = normalize_username(v)
        if not USERNAME_MIN_LENGTH <= len(v) <= USERNAME_MAX_LENGTH:
            raise ValueError(
                f"username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} "
                "characters after trimming"
            )
        return v


class UserReplace(UserProfile):
    """
    Admin full update. Every field is written as given.
    `password`, when present, replaces the local credential's password.
    """

    avatar: str = ""
    passenger_rate: float = Field(default=0.0, ge=0, le=5)
    driver_rate: float = Field(default=0.0, ge=0, le=5)
    is_driver: bool = False
    password: str | None = Field(default=None, min_length=8, max_length=128)


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: str
    first_name: str
    last_name: str
    email: str
    prefix: str
    phone: str
    avatar: str
    gender: str
    birth_date: date | None
    passenger_rate: float
    driver_rate: float
    is_driver: bool
    created_at: datetime


class VehicleCreate(SQLModel):
    """Payload for adding a vehicle to the caller's profile."""

    model_config = ConfigDict(extra="forbid")

    make: str = Field(min_length=1, max_length=50)
    model: str = Field(min_length=1, max_length=50)
    plate: str = Field(min_length=1, max_length=16)
    seats: int = Field(default=4, gt=0, le=8)

    @field_validator("plate")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        return v.strip().upper()


class VehicleRead(SQLModel):
    id: uuid.UUID
    owner_id: str
    make: str
    model: str
    plate: str
    seats: int
    created_at: datetime


class UserDetail(UserRead):
    """Single-user read, including the user's vehicles."""

    vehicles: list[VehicleRead] = []
