# socialride/repositories/credential_repo.py
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from socialride.database import store_errors
from socialride.models.user import Credential, User


class CredentialRepository:
    """
    Data access for local username/password credentials.

    Usernames must already be normalized by the caller.
    """

    def get_by_username(
        self, session: Session, username: str
    ) -> tuple[User, str] | None:
        """Return (user, password_hash) for a username, or None."""
        stmt = (
            select(User, Credential.password_hash)
            .join(Credential, Credential.user_id == User.id)
            .where(Credential.username == username)
        )
        with store_errors(session):
            row = session.exec(stmt).first()
        if row is None:
            return None
        user, password_hash = row
        return user, password_hash

    def exists_by_username(self, session: Session, username: str) -> bool:
        with store_errors(session):
            return session.get(Credential, username) is not None

    def insert(
        self, session: Session, user: User, credential: Credential
    ) -> User | None:
        """
        Insert a user and its credential in one transaction.

        Returns None when the username was registered in the meantime
        (unique constraint hit at commit time).
        """
        with store_errors(session):
            try:
                session.add(user)
                # users row must exist before the FK on credentials
                session.flush()
                session.add(credential)
                session.commit()
            except IntegrityError:
                session.rollback()
                return None
            session.refresh(user)
            return user

    def set_password(
        self,
        session: Session,
        user_id: str,
        password_hash: str,
        *,
        commit: bool = True,
    ) -> bool:
        """
        Replace the password hash; False if the user has no local credential.

        commit=False only stages the change, so it is written by the
        caller's next commit together with its other changes.
        """
        stmt = select(Credential).where(Credential.user_id == user_id)
        with store_errors(session):
            credential = session.exec(stmt).first()
            if credential is None:
                return False
            credential.password_hash = password_hash
            session.add(credential)
            if commit:
                session.commit()
            return True
