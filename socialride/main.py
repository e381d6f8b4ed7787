# socialride/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from socialride.core.auth import get_policy_evaluator, get_token_issuer
from socialride.core.config import get_settings
from socialride.core.errors import AuthError, ErrorCode
from socialride.database import create_db_and_tables
from socialride.schemas.envelope import ResultData

# Import models so SQLModel metadata is populated before create_all()
from socialride.models import user as _user_models  # noqa: F401
from socialride.models import vehicle as _vehicle_models  # noqa: F401

# Routers
from socialride.routers.auth import router as auth_router
from socialride.routers.users import register as register_endpoint
from socialride.routers.users import router as users_router

settings = get_settings()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("socialride")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Build the token issuer/evaluator (a bad signing config aborts boot).
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    get_token_issuer()
    get_policy_evaluator()
    logger.info("Startup: token signing configured (%s).", settings.JWT_ALG)

    logger.info("Startup: connecting to user store...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception:
        logger.exception("Startup: DB connection FAILED")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render every identity-session failure as the result envelope."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=ResultData.failure(exc.error_code, exc.message).model_dump(),
        headers=headers,
    )


# Route endpoint -> envelope code for payload validation failures
VALIDATION_ERROR_CODES = {
    register_endpoint: ErrorCode.REGISTRATION_GENERIC,
}


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Render request validation failures as the result envelope.

    Registration payloads report REGISTRATION_GENERIC; every other route
    reports AUTHENTICATION_GENERIC.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'Invalid request')}" if location else "Invalid request"
    return JSONResponse(
        status_code=422,
        content=ResultData.failure(
            VALIDATION_ERROR_CODES.get(
                request.scope.get("endpoint"), ErrorCode.AUTHENTICATION_GENERIC
            ),
            message,
        ).model_dump(),
    )


# Versioned API prefix, e.g. /api/v1
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(auth_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "socialride-identity"}
