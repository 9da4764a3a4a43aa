"""
Database configuration and session management for the product catalog
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from lookbook.config import settings

DATABASE_URL = settings.DATABASE_URL

# Fix for hosted PostgreSQL URLs (postgres:// instead of postgresql://)
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
