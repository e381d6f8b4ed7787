# socialride/services/session_service.py
import logging

from sqlmodel import Session

from socialride.core.errors import UnknownSubject
from socialride.core.policies import Policy, PolicyEvaluator
from socialride.core.security import normalize_username
from socialride.core.tokens import SUBJECT_CLAIM, LoginFlow, TokenIssuer
from socialride.repositories.user_repo import UserRepository
from socialride.schemas.auth import (
    AccessToken,
    AuthenticatedUser,
    ExternalIdentity,
    TokenPair,
)
from socialride.services.credential_service import CredentialService
from socialride.services.identity_service import IdentityService

logger = logging.getLogger(__name__)


class SessionService:
    """
    Turns verified identities into session tokens.

    Responsibilities:
      - legacy local login: credentials -> one long-lived access token
      - federated login: external identity -> access + refresh tokens
      - refresh: refresh token -> new access token for the same subject
    """

    def __init__(
        self,
        issuer: TokenIssuer,
        evaluator: PolicyEvaluator,
        user_repo: UserRepository,
        credentials: CredentialService,
        identities: IdentityService,
    ):
        self.issuer = issuer
        self.evaluator = evaluator
        self.user_repo = user_repo
        self.credentials = credentials
        self.identities = identities

    def authenticate(
        self, session: Session, username: str, password: str
    ) -> AuthenticatedUser:
        """Local login. The token lives for the local-flow TTL (one day by default)."""
        user = self.credentials.verify(session, username, password)
        token = self.issuer.issue_access_token(
            user, self.issuer.admin_claims(user, username), LoginFlow.LOCAL
        )
        logger.info("Local login for user %s", user.id)
        return AuthenticatedUser(
            id=user.id,
            username=normalize_username(username),
            first_name=user.first_name,
            last_name=user.last_name,
            token=token,
        )

    def login_federated(self, session: Session, identity: ExternalIdentity) -> TokenPair:
        user = self.identities.resolve_or_create(session, identity)
        logger.info("Federated login for user %s", user.id)
        return self.issuer.issue_token_pair(user)

    def refresh(self, session: Session, presented_token: str) -> AccessToken:
        """
        Mint a new access token from a refresh token.

        The refresh policy is checked before anything else, so a token
        without the refresh marker never reaches the store. Admin claims
        are recomputed from the current user record.

        Raises:
            PolicyDenied: token is not a valid refresh token.
            UnknownSubject: the user behind the token was deleted.
        """
        claims = self.evaluator.evaluate(presented_token, Policy.REFRESH_ONLY)

        user = self.user_repo.get_by_id(session, claims[SUBJECT_CLAIM])
        if user is None:
            logger.warning("Refresh for unknown subject %s", claims[SUBJECT_CLAIM])
            raise UnknownSubject()

        access_token = self.issuer.issue_access_token(
            user, self.issuer.admin_claims(user), LoginFlow.FEDERATED
        )
        logger.info("Refreshed access token for user %s", user.id)
        return AccessToken(
            access_token=access_token,
            expires_in=self.issuer.expires_in(LoginFlow.FEDERATED),
        )
