import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from campusconnect.config.settings import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url


def _engine_options(url: str) -> dict:
    # An in-memory SQLite database only lives as long as its single connection
    if url.startswith("sqlite") and (url in ("sqlite://", "sqlite:///:memory:")):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """FastAPI dependency to get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Initialize the database using the schema defined by SQLAlchemy models."""
    target = bind or engine
    try:
        # Models must be imported so they register with Base's metadata
        from campusconnect import models  # noqa: F401

        logger.info("Attempting to create database tables...")
        Base.metadata.create_all(bind=target)
        logger.info("Database tables created successfully (if they didn't exist)")
    except Exception as e:
        logger.error(f"Database initialization error: {e}")
        logger.error("Please ensure the database server is running and accessible.")
        raise
