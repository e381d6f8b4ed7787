# socialride/models/user.py
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Canonical identity record for a SocialRide rider/driver.

    Identity:
      - id: provider user id for federated logins, or a generated
        uuid4 hex for local registrants. Never changes once assigned;
        it is the only value carried in token claims ("sub").

    Role:
      - is_admin grants the admin marker claim at token issuance.
        Admins can also be granted through the ADMIN_* allowlists.
    """

    __tablename__ = "users"

    id: str = Field(
        primary_key=True,
        index=True,
        max_length=128,
        description="Stable, provider-independent user id",
    )

    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: str = Field(default="", max_length=255)

    # Phone number split as the mobile clients send it
    prefix: str = Field(default="", max_length=8)
    phone: str = Field(default="", max_length=32)

    avatar: str = Field(default="", description="Avatar image URI")
    gender: str = Field(default="", max_length=16)
    birth_date: date | None = None

    passenger_rate: float = Field(default=0.0, ge=0)
    driver_rate: float = Field(default=0.0, ge=0)
    is_driver: bool = Field(default=False)

    is_admin: bool = Field(
        default=False,
        description="Role attribute; resolved into the admin claim",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Credential(SQLModel, table=True):
    """
    Local username/password credential.

    Only federated users lack a row here. The password is stored as a
    bcrypt hash; the cleartext never reaches the database.
    """

    __tablename__ = "credentials"

    username: str = Field(
        primary_key=True,
        max_length=64,
        description="Normalized username (stripped, lower-cased)",
    )

    user_id: str = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    password_hash: str
