"""SQLAlchemy engine, session factory and declarative base."""

from typing import Any, Dict, Iterator, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from core.env import env_bool, env_int, env_str

load_dotenv()

TEST_DATABASE_URL: Optional[str] = env_str("TEST_DATABASE_URL")
DATABASE_URL: Optional[str] = env_str("DATABASE_URL") or TEST_DATABASE_URL
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL or TEST_DATABASE_URL must be set.")

ALLOW_NON_POSTGRES = env_bool("DATABASE_ALLOW_NON_POSTGRES", False)
IS_POSTGRES = DATABASE_URL.lower().startswith("postgresql")
if not IS_POSTGRES and not ALLOW_NON_POSTGRES:
    raise RuntimeError(f"DATABASE_URL must be a PostgreSQL DSN. Got: {DATABASE_URL}")


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    if not IS_POSTGRES:
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": env_int("DATABASE_POOL_SIZE", 5, minimum=1),
        "max_overflow": env_int("DATABASE_MAX_OVERFLOW", 10, minimum=0),
        "pool_recycle": env_int("DATABASE_POOL_RECYCLE_SECONDS", 1800, minimum=0),
    }


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Declarative base for customers, live records and snapshots."""


def get_db() -> Iterator[Session]:
    """Request-scoped session for FastAPI routes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
