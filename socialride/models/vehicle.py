# socialride/models/vehicle.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Vehicle(SQLModel, table=True):
    """
    Vehicle offered by a user when driving.
    A user may own several vehicles.
    """

    __tablename__ = "vehicles"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    owner_id: str = Field(
        foreign_key="users.id",
        index=True,
    )

    make: str = Field(max_length=50)
    model: str = Field(max_length=50)
    plate: str = Field(max_length=16)

    seats: int = Field(
        default=4,
        gt=0,
        description="Passenger seats, driver excluded",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
