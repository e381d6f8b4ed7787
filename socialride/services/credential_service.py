# socialride/services/credential_service.py
import logging
import uuid

from sqlmodel import Session

from socialride.core.errors import InvalidCredentials, UsernameTaken
from socialride.core.security import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    normalize_username,
    verify_password,
)
from socialride.models.user import Credential, User
from socialride.repositories.credential_repo import CredentialRepository
from socialride.schemas.user import UserRegistrant

logger = logging.getLogger(__name__)


class CredentialService:
    """
    Local username/password credentials.

    Responsibilities:
      - verify a username/password pair (uniform failure, no enumeration)
      - username availability pre-flight
      - registration of new local users
    """

    def __init__(self, repo: CredentialRepository):
        self.repo = repo

    def verify(self, session: Session, username: str, password: str) -> User:
        """
        Return the user owning the credential.

        Raises:
            InvalidCredentials: unknown username or wrong password,
                indistinguishable to the caller.
        """
        found = self.repo.get_by_username(session, normalize_username(username))

        if found is None:
            # burn the same bcrypt work as a real check
            verify_password(password, DUMMY_PASSWORD_HASH)
            logger.warning("Rejected login for unknown username")
            raise InvalidCredentials()

        user, password_hash = found
        if not verify_password(password, password_hash):
            logger.warning("Rejected login for user %s", user.id)
            raise InvalidCredentials()

        return user

    def is_available(self, session: Session, username: str) -> bool:
        return not self.repo.exists_by_username(session, normalize_username(username))

    def register(self, session: Session, payload: UserRegistrant) -> User:
        """
        Create a local user and its credential.

        Rules:
          - username is normalized before any check or write
          - availability is checked up front and again by the unique
            constraint at insert time

        Raises:
            UsernameTaken: if the username is already registered.
        """
        username = normalize_username(payload.username)
        if not self.is_available(session, username):
            raise UsernameTaken(username)

        user = User(
            id=uuid.uuid4().hex,
            **payload.model_dump(exclude={"username", "password"}),
        )
        credential = Credential(
            username=username,
            user_id=user.id,
            password_hash=hash_password(payload.password),
        )

        created = self.repo.insert(session, user, credential)
        if created is None:
            raise UsernameTaken(username)

        logger.info("Registered local user %s", created.id)
        return created

    def change_password(
        self, session: Session, user_id: str, password: str, *, commit: bool = True
    ) -> bool:
        """Re-hash and store a new password; False for federated-only users."""
        return self.repo.set_password(
            session, user_id, hash_password(password), commit=commit
        )
