# socialride/core/tokens.py
"""
Session token issuance.

Tokens are compact HMAC-signed JWTs. Two kinds exist:

  access   {sub, iat, exp, typ="access", ...extra claims}
  refresh  {sub, iat, typ="refresh", rfr=<user id>}   (never an exp)

The refresh marker claim (`rfr`) is what the policy evaluator keys on;
`typ` is informational for clients.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError

from socialride.core.config import Settings
from socialride.core.errors import SigningFailure
from socialride.core.security import normalize_username
from socialride.models.user import User
from socialride.schemas.auth import TokenPair

logger = logging.getLogger(__name__)

SUBJECT_CLAIM = "sub"
ISSUED_AT_CLAIM = "iat"
EXPIRY_CLAIM = "exp"
KIND_CLAIM = "typ"
ADMIN_CLAIM = "adm"
REFRESH_CLAIM = "rfr"

ACCESS_KIND = "access"
REFRESH_KIND = "refresh"

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class LoginFlow(str, Enum):
    """Login path a token is minted for; each has its own access TTL."""

    FEDERATED = "federated"
    LOCAL = "local"


@dataclass(frozen=True)
class SigningConfig:
    """Shared HMAC signing configuration for issuer and evaluator."""

    secret: str
    algorithm: str = "HS256"

    def __post_init__(self):
        if not self.secret:
            raise SigningFailure("JWT_SECRET is not configured")
        if self.algorithm not in HMAC_ALGORITHMS:
            raise SigningFailure(
                f"Unsupported signing algorithm {self.algorithm!r}; "
                f"expected one of {', '.join(HMAC_ALGORITHMS)}"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "SigningConfig":
        return cls(secret=settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    Mints signed access and refresh tokens.

    Holds no mutable state: safe to share across request threads.
    """

    def __init__(
        self,
        signing: SigningConfig,
        access_ttls: dict[LoginFlow, timedelta],
        *,
        admin_usernames: Iterable[str] = (),
        admin_subjects: Iterable[str] = (),
        clock: Callable[[], datetime] = _utc_now,
    ):
        missing = set(LoginFlow) - set(access_ttls)
        if missing:
            raise SigningFailure(
                f"No access token TTL configured for: "
                f"{', '.join(sorted(flow.value for flow in missing))}"
            )
        self.signing = signing
        self.access_ttls = dict(access_ttls)
        self.admin_usernames = frozenset(normalize_username(u) for u in admin_usernames)
        self.admin_subjects = frozenset(admin_subjects)
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            SigningConfig.from_settings(settings),
            {
                LoginFlow.FEDERATED: timedelta(
                    seconds=settings.FEDERATED_ACCESS_TOKEN_TTL_SECONDS
                ),
                LoginFlow.LOCAL: timedelta(
                    seconds=settings.LOCAL_ACCESS_TOKEN_TTL_SECONDS
                ),
            },
            admin_usernames=settings.ADMIN_USERNAMES,
            admin_subjects=settings.ADMIN_SUBJECTS,
        )

    # ----- Claims -----

    def admin_claims(self, user: User, username: str | None = None) -> dict[str, Any]:
        """
        Admin marker for privileged principals, empty otherwise.

        A user is privileged when flagged on the record, or listed in
        either configured allowlist (by id, or by login username).
        """
        if (
            user.is_admin
            or user.id in self.admin_subjects
            or (username is not None and normalize_username(username) in self.admin_usernames)
        ):
            return {ADMIN_CLAIM: True}
        return {}

    # ----- Issuance -----

    def issue_access_token(
        self,
        user: User,
        extra_claims: dict[str, Any] | None = None,
        flow: LoginFlow = LoginFlow.FEDERATED,
    ) -> str:
        now = self.clock()
        claims = {
            **(extra_claims or {}),
            SUBJECT_CLAIM: user.id,
            ISSUED_AT_CLAIM: int(now.timestamp()),
            EXPIRY_CLAIM: int((now + self.access_ttls[flow]).timestamp()),
            KIND_CLAIM: ACCESS_KIND,
        }
        # extra claims may not smuggle a refresh marker into an access token
        claims.pop(REFRESH_CLAIM, None)
        return self._encode(claims)

    def issue_refresh_token(self, user: User) -> str:
        claims = {
            SUBJECT_CLAIM: user.id,
            REFRESH_CLAIM: user.id,
            ISSUED_AT_CLAIM: int(self.clock().timestamp()),
            KIND_CLAIM: REFRESH_KIND,
        }
        return self._encode(claims)

    def issue_token_pair(self, user: User, username: str | None = None) -> TokenPair:
        """Access + refresh tokens for the federated login flow."""
        return TokenPair(
            access_token=self.issue_access_token(
                user, self.admin_claims(user, username), LoginFlow.FEDERATED
            ),
            refresh_token=self.issue_refresh_token(user),
            expires_in=self.expires_in(LoginFlow.FEDERATED),
        )

    def expires_in(self, flow: LoginFlow) -> int:
        """Access token lifetime for a flow, in seconds."""
        return int(self.access_ttls[flow].total_seconds())

    def _encode(self, claims: dict[str, Any]) -> str:
        try:
            return jwt.encode(
                claims, self.signing.secret, algorithm=self.signing.algorithm
            )
        except JOSEError as exc:
            logger.error("Token signing failed: %s", exc)
            raise SigningFailure() from exc
