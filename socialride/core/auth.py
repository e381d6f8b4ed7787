# socialride/core/auth.py
import secrets
from functools import lru_cache

from fastapi import Depends, Header, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from socialride.core.config import Settings, get_settings
from socialride.core.errors import PolicyDenied
from socialride.core.policies import Policy, PolicyEvaluator
from socialride.core.tokens import ADMIN_CLAIM, SUBJECT_CLAIM, SigningConfig, TokenIssuer
from socialride.schemas.auth import Principal

# HTTP Bearer scheme:
# - auto_error=False => a missing Authorization header does not raise
#   inside FastAPI, so it is reported through PolicyDenied like every
#   other auth failure (same envelope, same code).
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """
    Issuer built once from settings.

    Raises:
        SigningFailure: if JWT_SECRET / JWT_ALG are unusable. Called
            during startup so a bad secret aborts boot.
    """
    return TokenIssuer.from_settings(get_settings())


@lru_cache
def get_policy_evaluator() -> PolicyEvaluator:
    return PolicyEvaluator(SigningConfig.from_settings(get_settings()))


def bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """
    Raw bearer token from the Authorization header.

    Raises:
        PolicyDenied(401): if the header is missing or not a Bearer credential.
    """
    if credentials is None:
        raise PolicyDenied(
            "Authentication required",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return credentials.credentials


def require_policy(policy: Policy):
    """
    Build a dependency that admits only tokens satisfying `policy`.

    The check runs before the route body, so a denied request never
    executes any part of the protected operation.

    Usage:

        @router.get("/secret")
        def secret(principal: Principal = Depends(require_policy(Policy.ADMIN_ONLY))):
            ...
    """

    def dependency(
        token: str = Depends(bearer_token),
        evaluator: PolicyEvaluator = Depends(get_policy_evaluator),
    ) -> Principal:
        claims = evaluator.evaluate(token, policy)
        return Principal(
            subject=claims[SUBJECT_CLAIM],
            is_admin=claims.get(ADMIN_CLAIM) is True,
            claims=claims,
        )

    return dependency


# Session credential required (any valid access token)
require_auth = require_policy(Policy.AUTHENTICATED)

# Access token carrying the admin marker
require_admin = require_policy(Policy.ADMIN_ONLY)


def require_federation_key(
    x_federation_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Guard for the federated login route.

    The social-login gateway verifies provider tokens and forwards the
    resulting identity with a shared key. With FEDERATION_API_KEY unset
    (local development) the route is open.
    """
    expected = settings.FEDERATION_API_KEY
    if expected is None:
        return
    if x_federation_key is None or not secrets.compare_digest(
        x_federation_key.encode("utf-8"), expected.encode("utf-8")
    ):
        raise PolicyDenied(
            "Invalid federation key",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
