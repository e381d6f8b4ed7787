# socialride/database.py
import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine, Session

from socialride.core.config import get_settings
from socialride.core.errors import StoreFailure

settings = get_settings()
logger = logging.getLogger(__name__)


def _engine_kwargs(db_url: str) -> tuple[str, dict]:
    """
    Connection options per backend.

    Postgres:
      - sslmode=require   : enforce SSL when running in the cloud
      - pool_size=1       : keep a single pooled connection
      - max_overflow=0    : do not open extra connections beyond the pool
      - pool_pre_ping=True: validate connections before using them

    SQLite (local dev / tests):
      - check_same_thread=False: FastAPI runs sync routes in a threadpool
    """
    if db_url.startswith("sqlite"):
        return db_url, {"connect_args": {"check_same_thread": False}}

    # Append sslmode=require if it is not already present
    if "sslmode=" not in db_url:
        if "?" in db_url:
            db_url = db_url + "&sslmode=require"
        else:
            db_url = db_url + "?sslmode=require"

    return db_url, {"pool_pre_ping": True, "pool_size": 1, "max_overflow": 0}


db_url, engine_kwargs = _engine_kwargs(settings.DATABASE_URL)

engine = create_engine(
    db_url,
    echo=False,  # set to True if you want to debug SQL queries
    **engine_kwargs,
)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session


@contextmanager
def store_errors(session: Session) -> Iterator[None]:
    """
    Translate any database error raised inside the block into StoreFailure.

    The session is rolled back first so it stays usable by the caller.
    Repositories wrap every statement with this; nothing above the
    repository layer ever sees a SQLAlchemy exception.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("User store operation failed: %s", exc)
        raise StoreFailure() from exc
