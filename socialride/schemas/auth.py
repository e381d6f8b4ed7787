# socialride/schemas/auth.py
from datetime import date
from typing import Any

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class TokenPair(SQLModel):
    """Access and refresh tokens returned by the federated login."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the access token expires


class AccessToken(SQLModel):
    """Result of redeeming a refresh token. The refresh token is not rotated."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginRequest(SQLModel):
    """Legacy local-auth login payload."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)


class AuthenticatedUser(SQLModel):
    """
    Legacy login result: basic profile (never the password) plus the
    access token the client stores and sends back as a bearer credential.
    """

    id: str
    username: str
    first_name: str
    last_name: str
    token: str


class ExternalIdentity(SQLModel):
    """
    Identity asserted by an external provider after it verified the user.

    Only `id` is required. Omitted or empty fields never overwrite what
    is already stored for that user.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, max_length=128)
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    prefix: str | None = None
    phone: str | None = None
    avatar: str | None = None
    gender: str | None = None
    birth_date: date | None = None

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("id cannot be empty")
        return v

    @field_validator("birth_date", mode="before")
    @classmethod
    def empty_date_is_unset(cls, v: Any) -> Any:
        # "" means "keep what is stored", same as for the string fields
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def supplied_fields(self) -> dict[str, Any]:
        """Profile fields that carry a value (not None, not empty)."""
        return {
            name: value
            for name, value in self.model_dump(exclude={"id"}).items()
            if value is not None and value != ""
        }


class Principal(SQLModel):
    """Verified caller, as seen by protected routes."""

    subject: str
    is_admin: bool = False
    claims: dict[str, Any] = {}
