# socialride/core/policies.py
"""
Claim-based authorization policies.

Evaluation always runs in two steps:
  1. structure/signature (and expiry, when an exp claim is present);
     any failure is a 401 with a deliberately vague message
  2. the policy predicate over the verified claims; failure is a 403

Nothing here touches the user store.
"""

import logging
from enum import Enum
from typing import Any

from fastapi import status
from jose import jwt, JWTError

from socialride.core.errors import PolicyDenied
from socialride.core.tokens import (
    ADMIN_CLAIM,
    EXPIRY_CLAIM,
    REFRESH_CLAIM,
    SUBJECT_CLAIM,
    SigningConfig,
)

logger = logging.getLogger(__name__)


class Policy(str, Enum):
    AUTHENTICATED = "authenticated"
    ADMIN_ONLY = "admin-only"
    REFRESH_ONLY = "refresh-only"


def is_refresh_token(claims: dict[str, Any]) -> bool:
    return REFRESH_CLAIM in claims


def satisfies(claims: dict[str, Any], policy: Policy) -> bool:
    """Pure predicate: do already-verified claims satisfy the policy?"""
    if policy is Policy.REFRESH_ONLY:
        return (
            is_refresh_token(claims)
            and EXPIRY_CLAIM not in claims
            and claims[REFRESH_CLAIM] == claims.get(SUBJECT_CLAIM)
        )

    # A refresh token never stands in for a session credential.
    if is_refresh_token(claims):
        return False
    if policy is Policy.AUTHENTICATED:
        return True
    if policy is Policy.ADMIN_ONLY:
        return claims.get(ADMIN_CLAIM) is True
    return False


class PolicyEvaluator:
    """Verifies bearer tokens and checks them against named policies."""

    def __init__(self, signing: SigningConfig):
        self.signing = signing

    def verify(self, token: str) -> dict[str, Any]:
        """
        Check signature, structure and expiry; return the claims.

        Raises:
            PolicyDenied(401): for any malformed, tampered or expired token.
        """
        try:
            claims = jwt.decode(
                token,
                self.signing.secret,
                algorithms=[self.signing.algorithm],
                options={"verify_aud": False},
            )
        except JWTError:
            raise PolicyDenied(
                "Invalid or expired token",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        subject = claims.get(SUBJECT_CLAIM)
        if not isinstance(subject, str) or not subject:
            raise PolicyDenied(
                "Invalid or expired token",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        return claims

    def evaluate(self, token: str, policy: Policy) -> dict[str, Any]:
        """
        Verify the token, then apply the policy predicate.

        Returns:
            The verified claims.

        Raises:
            PolicyDenied: 401 for an unusable token, 403 for insufficient claims.
        """
        claims = self.verify(token)
        if not satisfies(claims, policy):
            logger.warning(
                "Policy %s denied for subject %s", policy.value, claims[SUBJECT_CLAIM]
            )
            raise PolicyDenied(f"Token does not satisfy the {policy.value} policy")
        return claims
