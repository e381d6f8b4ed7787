# socialride/routers/auth.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from socialride.core.auth import bearer_token, require_federation_key
from socialride.database import get_session
from socialride.routers.deps import get_session_service
from socialride.schemas.auth import AccessToken, ExternalIdentity, TokenPair
from socialride.services.session_service import SessionService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/federated",
    response_model=TokenPair,
    dependencies=[Depends(require_federation_key)],
)
def federated_login(
    identity: ExternalIdentity,
    session: Session = Depends(get_session),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Social login with an identity the provider already verified.

    Creates the user on first login, merges non-empty fields afterwards,
    and returns an access token (1 hour by default) plus a refresh token.
    """
    return sessions.login_federated(session, identity)


@router.post("/refresh", response_model=AccessToken)
def refresh(
    token: str = Depends(bearer_token),
    session: Session = Depends(get_session),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Exchange the refresh token (sent as the bearer credential) for a new
    access token. The refresh token itself stays valid.
    """
    return sessions.refresh(session, token)
