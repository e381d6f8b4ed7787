# socialride/services/identity_service.py
import logging

from sqlmodel import Session

from socialride.core.errors import StoreFailure
from socialride.models.user import User
from socialride.repositories.user_repo import UserRepository
from socialride.schemas.auth import ExternalIdentity

logger = logging.getLogger(__name__)


class IdentityService:
    """
    Resolves federated identities to canonical users.

    Login and first-time registration are the same operation: the user
    row is created on first sight and partially refreshed afterwards.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def resolve_or_create(self, session: Session, identity: ExternalIdentity) -> User:
        """
        Find-or-create the user for an external identity.

        Steps:
          1. Load the user by id, row-locked.
          2. Absent: insert with every supplied field. If a concurrent
             login inserted the same id first, continue with that row.
          3. Present: overwrite supplied, non-empty fields only.

        Applying the same identity twice leaves the same stored state.

        Raises:
            StoreFailure: on any persistence error.
        """
        user = self.repo.get_by_id(session, identity.id, for_update=True)

        if user is None:
            created = self.repo.insert_if_absent(
                session, User(id=identity.id, **identity.supplied_fields())
            )
            if created is not None:
                logger.info("Created user %s on first federated login", created.id)
                return created

            user = self.repo.get_by_id(session, identity.id, for_update=True)
            if user is None:
                raise StoreFailure("User row vanished during federated login")

        return self._merge(session, user, identity)

    def _merge(self, session: Session, user: User, identity: ExternalIdentity) -> User:
        for field, value in identity.supplied_fields().items():
            setattr(user, field, value)

        user = self.repo.update(session, user)
        logger.info("Refreshed user %s from federated login", user.id)
        return user
