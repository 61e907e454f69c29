from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from didledger.config import settings
from didledger.logging import get_logger

logger = get_logger(__name__)

SQLALCHEMY_DATABASE_URL = settings.database_url

connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Dependency to get a DB session for FastAPI routes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def create_tables(bind=None):
    """Creates all database tables defined by models inheriting from Base."""
    # Registers the world-state table on Base.metadata
    from didledger.vdr import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info(f"World state tables created (if they didn't exist) at {(bind or engine).url}")
