import os
import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_database_url() -> str:
    """Get database URL from environment."""
    url = os.getenv("DATABASE_URL", "sqlite:///./lifelog.db")
    # Ensure psycopg (v3) driver is used
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(url: str = None, **kwargs):
    """Get or create database engine."""
    url = url or get_database_url()
    if url.startswith("sqlite"):
        # FastAPI may hand the session to a different worker thread
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(
        url,
        echo=os.getenv("DEBUG", "false").lower() == "true",
        **kwargs,
    )
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


DATABASE_URL = get_database_url()
engine = get_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI routes to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables and seed the system tags.

    Safe to call on every startup; existing tables and tags are left alone.
    """
    # Import models so they are registered on Base.metadata
    import lifelog.models  # noqa: F401
    from lifelog.seed import seed_system_tags

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    session = sessionmaker(autocommit=False, autoflush=False, bind=bind)()
    try:
        created = seed_system_tags(session)
        if created:
            logger.info("Seeded %d system tags", created)
    finally:
        session.close()
