# socialride/services/user_service.py
import logging

from sqlmodel import Session

from socialride.core.errors import ErrorCode, UserNotFound
from socialride.models.user import User
from socialride.models.vehicle import Vehicle
from socialride.repositories.user_repo import UserRepository
from socialride.schemas.user import (
    UserDetail,
    UserRead,
    UserReplace,
    VehicleCreate,
    VehicleRead,
)
from socialride.services.credential_service import CredentialService

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User profiles.

    Responsibilities:
      - self profile and vehicle registration
      - admin listing, full replace and deletion
      - report missing users with the operation's error code
    """

    def __init__(self, repo: UserRepository, credentials: CredentialService):
        self.repo = repo
        self.credentials = credentials

    def _require_user(self, session: Session, user_id: str, error_code: ErrorCode) -> User:
        user = self.repo.get_by_id(session, user_id)
        if user is None:
            raise UserNotFound(error_code=error_code)
        return user

    # ----- Self profile -----

    def get_me(self, session: Session, user_id: str) -> UserRead:
        """
        Return the caller's profile.

        A valid token for a deleted user is reported as not found.
        """
        return UserRead.model_validate(
            self._require_user(session, user_id, ErrorCode.USER_GET)
        )

    def add_vehicle(
        self, session: Session, user_id: str, payload: VehicleCreate
    ) -> VehicleRead:
        self._require_user(session, user_id, ErrorCode.USER_UPDATE)
        vehicle = self.repo.add_vehicle(
            session, Vehicle(owner_id=user_id, **payload.model_dump())
        )
        return VehicleRead.model_validate(vehicle)

    # ----- Any authenticated caller -----

    def get_user(self, session: Session, user_id: str) -> UserDetail:
        """
        Get a user with their vehicles.

        Raises:
            UserNotFound: if no such user.
        """
        user = self._require_user(session, user_id, ErrorCode.USER_GET)
        vehicles = self.repo.list_vehicles(session, user.id)
        return UserDetail(
            **UserRead.model_validate(user).model_dump(),
            vehicles=[VehicleRead.model_validate(v) for v in vehicles],
        )

    # ----- Admin operations -----

    def list_users(self, session: Session, skip: int, limit: int) -> list[UserRead]:
        """List users with pagination (admin only)."""
        return [UserRead.model_validate(u) for u in self.repo.list(session, skip, limit)]

    def replace_user(
        self, session: Session, user_id: str, payload: UserReplace
    ) -> UserRead:
        """
        Overwrite every profile field of a user (admin only).

        Unlike a federated login, empty values here do clear fields.
        A supplied password replaces the local credential's password.
        Profile and password are committed together or not at all.
        """
        user = self._require_user(session, user_id, ErrorCode.USER_UPDATE)

        for field, value in payload.model_dump(exclude={"password"}).items():
            setattr(user, field, value)

        if payload.password is not None:
            staged = self.credentials.change_password(
                session, user.id, payload.password, commit=False
            )
            if not staged:
                logger.info("User %s has no local credential; password ignored", user.id)

        user = self.repo.update(session, user)

        logger.info("Admin replaced profile of user %s", user.id)
        return UserRead.model_validate(user)

    def delete_user(self, session: Session, user_id: str) -> None:
        """Delete a user, their credential and their vehicles (admin only)."""
        user = self._require_user(session, user_id, ErrorCode.USER_DELETE)
        self.repo.delete(session, user)
        logger.info("Admin deleted user %s", user_id)
