"""
Test fixtures.

Every test gets a fresh in-memory SQLite database (StaticPool keeps one
shared connection so the TestClient's worker threads see the same data)
and an issuer/evaluator pair built from a fixed test secret.
"""

import os

# Settings are read at import time by socialride.database / socialride.main.
os.environ["JWT_SECRET"] = "socialride-test-secret-0123456789abcdef"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_USERNAMES"] = '["kabamaru"]'
os.environ["ADMIN_SUBJECTS"] = '["google-admin-1"]'

from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from socialride.core import security  # noqa: E402
from socialride.core.auth import get_policy_evaluator, get_token_issuer  # noqa: E402
from socialride.core.policies import PolicyEvaluator  # noqa: E402
from socialride.core.tokens import LoginFlow, SigningConfig, TokenIssuer  # noqa: E402
from socialride.database import get_session  # noqa: E402
from socialride.main import app  # noqa: E402
from socialride.models import user as _user_models  # noqa: E402,F401
from socialride.models import vehicle as _vehicle_models  # noqa: E402,F401
from socialride.repositories.credential_repo import CredentialRepository  # noqa: E402
from socialride.repositories.user_repo import UserRepository  # noqa: E402
from socialride.services.credential_service import CredentialService  # noqa: E402
from socialride.services.identity_service import IdentityService  # noqa: E402
from socialride.services.session_service import SessionService  # noqa: E402

TEST_SECRET = os.environ["JWT_SECRET"]
ADMIN_SUBJECT = "google-admin-1"

ACCESS_TTLS = {
    LoginFlow.FEDERATED: timedelta(hours=1),
    LoginFlow.LOCAL: timedelta(days=1),
}


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Minimum bcrypt cost; the algorithm is unchanged."""
    monkeypatch.setattr(security, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def signing() -> SigningConfig:
    return SigningConfig(secret=TEST_SECRET)


@pytest.fixture
def issuer(signing) -> TokenIssuer:
    return TokenIssuer(
        signing,
        ACCESS_TTLS,
        admin_usernames=["Kabamaru"],
        admin_subjects=[ADMIN_SUBJECT],
    )


@pytest.fixture
def evaluator(signing) -> PolicyEvaluator:
    return PolicyEvaluator(signing)


@pytest.fixture
def user_repo() -> UserRepository:
    return UserRepository()


@pytest.fixture
def credential_service() -> CredentialService:
    return CredentialService(CredentialRepository())


@pytest.fixture
def identity_service(user_repo) -> IdentityService:
    return IdentityService(user_repo)


@pytest.fixture
def session_service(
    issuer, evaluator, user_repo, credential_service, identity_service
) -> SessionService:
    return SessionService(
        issuer, evaluator, user_repo, credential_service, identity_service
    )


@pytest.fixture
def client(engine, issuer, evaluator):
    """HTTP client with the store and the signing config overridden."""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    app.dependency_overrides[get_policy_evaluator] = lambda: evaluator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
