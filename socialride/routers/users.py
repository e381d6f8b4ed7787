# socialride/routers/users.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from socialride.core.auth import require_admin, require_auth
from socialride.core.errors import InvalidUsername, UsernameTaken
from socialride.core.security import normalize_username
from socialride.database import get_session
from socialride.routers.deps import credential_service, get_session_service, user_service
from socialride.schemas.auth import AuthenticatedUser, LoginRequest, Principal
from socialride.schemas.envelope import ResultData
from socialride.schemas.user import (
    UserDetail,
    UserRead,
    UserRegistrant,
    UserReplace,
    VehicleCreate,
    VehicleRead,
)
from socialride.services.session_service import SessionService

router = APIRouter(prefix="/users", tags=["Users"])


# -------- Anonymous endpoints --------


@router.post("/authenticate", response_model=ResultData[AuthenticatedUser])
def authenticate(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Local username/password login.

    Returns basic profile info and an access token valid for the
    local-flow TTL. Unknown usernames and wrong passwords produce the
    same error.
    """
    return ResultData.ok(
        sessions.authenticate(session, payload.username, payload.password)
    )


@router.get("/availability", response_model=ResultData[dict])
def is_available(
    username: str = Query(min_length=1, max_length=64),
    session: Session = Depends(get_session),
):
    """
    Pre-flight username check.

    Success envelope if the username is free; 409 with
    USERNAME_AVAILABILITY otherwise. A name that is blank once trimmed
    is never available (422).
    """
    name = normalize_username(username)
    if not name:
        raise InvalidUsername()
    if not credential_service.is_available(session, name):
        raise UsernameTaken(name)
    return ResultData.ok({})


@router.post("/register", response_model=ResultData[UserRead])
def register(
    payload: UserRegistrant,
    session: Session = Depends(get_session),
):
    """Register a local user. Fails with 409 if the username is taken."""
    user = credential_service.register(session, payload)
    return ResultData.ok(UserRead.model_validate(user))


# -------- Self profile --------


@router.get("/me", response_model=ResultData[UserRead])
def read_me(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_auth),
):
    """Return the caller's profile."""
    return ResultData.ok(user_service.get_me(session, principal.subject))


@router.post("/me/vehicles", response_model=ResultData[VehicleRead])
def add_my_vehicle(
    payload: VehicleCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_auth),
):
    """Add a vehicle to the caller's profile."""
    return ResultData.ok(
        user_service.add_vehicle(session, principal.subject, payload)
    )


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=ResultData[list[UserRead]],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
):
    """
    List all users (admin only).

    Pagination via skip/limit.
    """
    return ResultData.ok(user_service.list_users(session, skip, limit))


@router.get(
    "/{user_id}",
    response_model=ResultData[UserDetail],
    dependencies=[Depends(require_auth)],
)
def get_user(
    user_id: str,
    session: Session = Depends(get_session),
):
    """Get a specific user, with vehicles."""
    return ResultData.ok(user_service.get_user(session, user_id))


@router.put(
    "/{user_id}",
    response_model=ResultData[UserRead],
    dependencies=[Depends(require_admin)],
)
def replace_user(
    user_id: str,
    payload: UserReplace,
    session: Session = Depends(get_session),
):
    """Overwrite a user's profile, optionally resetting the password (admin only)."""
    return ResultData.ok(user_service.replace_user(session, user_id, payload))


@router.delete(
    "/{user_id}",
    response_model=ResultData[dict],
    dependencies=[Depends(require_admin)],
)
def delete_user(
    user_id: str,
    session: Session = Depends(get_session),
):
    """Delete a user (admin only)."""
    user_service.delete_user(session, user_id)
    return ResultData.ok({"message": "User deleted successfully"})
