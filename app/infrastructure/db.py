"""Database infrastructure setup."""

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from app.infrastructure.config.settings import settings

# Engine creation is deferred until needed to avoid errors when using in-memory mode
_engine = None
_SessionLocal = None


def _engine_options(database_url: str) -> dict:
    """
    Build engine options for the configured backend.

    PostgreSQL runs every transaction SERIALIZABLE with a statement timeout;
    other backends keep their defaults.
    """
    options: dict = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.debug_mode,  # Log SQL queries in debug mode
    }
    if make_url(database_url).get_backend_name() == "postgresql":
        timeout_ms = int(settings.transaction_timeout_seconds * 1000)
        options["isolation_level"] = "SERIALIZABLE"
        options["connect_args"] = {"options": f"-c statement_timeout={timeout_ms}"}
    return options


def _get_engine():
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        if not settings.database_url:
            raise ValueError("DATABASE_URL is required for database operations")
        _engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
    return _engine


def get_db_session():
    """
    Get a database session.

    Returns:
        SQLAlchemy session instance
    """
    global _SessionLocal
    if _SessionLocal is None:
        engine = _get_engine()
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _SessionLocal()
