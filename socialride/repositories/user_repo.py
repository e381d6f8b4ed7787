# socialride/repositories/user_repo.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from socialride.database import store_errors
from socialride.models.user import Credential, User
from socialride.models.vehicle import Vehicle


class UserRepository:
    """
    Data access layer for User (and the vehicles hanging off it).

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
      - "Not found" is returned as None, store errors leave as StoreFailure
    """

    # ----- Lookups -----

    def get_by_id(
        self,
        session: Session,
        user_id: str,
        *,
        for_update: bool = False,
    ) -> User | None:
        """
        Return a User by primary key, or None if not found.

        for_update=True locks the row (SELECT ... FOR UPDATE) until the
        session commits, so concurrent logins update it one at a time.
        """
        with store_errors(session):
            if for_update:
                return session.get(
                    User, user_id, with_for_update=True, populate_existing=True
                )
            return session.get(User, user_id)

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[User]:
        """
        Paginated user listing.

        Args:
            skip: offset rows (for paging)
            limit: max number of rows returned

        Returns:
            List[User]
        """
        stmt = select(User).order_by(User.created_at).offset(skip).limit(limit)
        with store_errors(session):
            return list(session.exec(stmt).all())

    # ----- Writes -----

    def insert_if_absent(self, session: Session, user: User) -> User | None:
        """
        Insert a new User.

        Returns None instead of raising when a row with the same id
        already exists (e.g. a concurrent first login won the race).
        """
        with store_errors(session):
            session.add(user)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return None
            session.refresh(user)
            return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        with store_errors(session):
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    def delete(self, session: Session, user: User) -> None:
        """Delete a User together with its credential and vehicles."""
        with store_errors(session):
            for vehicle in session.exec(
                select(Vehicle).where(Vehicle.owner_id == user.id)
            ):
                session.delete(vehicle)
            credential = session.exec(
                select(Credential).where(Credential.user_id == user.id)
            ).first()
            if credential is not None:
                session.delete(credential)
            session.flush()
            session.delete(user)
            session.commit()

    # ----- Vehicles -----

    def list_vehicles(self, session: Session, user_id: str) -> list[Vehicle]:
        stmt = (
            select(Vehicle)
            .where(Vehicle.owner_id == user_id)
            .order_by(Vehicle.created_at)
        )
        with store_errors(session):
            return list(session.exec(stmt).all())

    def add_vehicle(self, session: Session, vehicle: Vehicle) -> Vehicle:
        with store_errors(session):
            session.add(vehicle)
            session.commit()
            session.refresh(vehicle)
            return vehicle
