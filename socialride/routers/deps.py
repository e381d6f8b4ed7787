# socialride/routers/deps.py
from fastapi import Depends

from socialride.core.auth import get_policy_evaluator, get_token_issuer
from socialride.core.policies import PolicyEvaluator
from socialride.core.tokens import TokenIssuer
from socialride.repositories.credential_repo import CredentialRepository
from socialride.repositories.user_repo import UserRepository
from socialride.services.credential_service import CredentialService
from socialride.services.identity_service import IdentityService
from socialride.services.session_service import SessionService
from socialride.services.user_service import UserService

# Stateless repositories/services shared by all routers
user_repo = UserRepository()
credential_repo = CredentialRepository()

credential_service = CredentialService(credential_repo)
identity_service = IdentityService(user_repo)
user_service = UserService(user_repo, credential_service)


def get_session_service(
    issuer: TokenIssuer = Depends(get_token_issuer),
    evaluator: PolicyEvaluator = Depends(get_policy_evaluator),
) -> SessionService:
    return SessionService(
        issuer, evaluator, user_repo, credential_service, identity_service
    )
