"""
Database Configuration for Whispers.

Contains database engine setup, session management, and initialization functions.
"""

import os
import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from dotenv import load_dotenv

from .models import Base

# Load environment variables
load_dotenv()

# Configure logging
logger = logging.getLogger(__name__)

# Database configuration
DATABASE_URL = os.getenv('DATABASE_URL')
if not DATABASE_URL:
    # Default to PostgreSQL for production, SQLite for development
    if os.getenv('RENDER'):
        logger.error("DATABASE_URL not set in production environment!")
        raise ValueError("DATABASE_URL environment variable is required")
    else:
        DATABASE_URL = 'sqlite:///whispers.db'
        logger.info("Using SQLite for development")

# Handle Render's PostgreSQL URL format
if DATABASE_URL.startswith('postgres://'):
    DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

# Create database engine
if DATABASE_URL.startswith('sqlite'):
    engine = create_engine(
        DATABASE_URL,
        echo=os.getenv('SQL_DEBUG', 'false').lower() == 'true',
        connect_args={"check_same_thread": False},
        poolclass=NullPool
    )
else:
    # PostgreSQL configuration
    engine = create_engine(
        DATABASE_URL,
        echo=os.getenv('SQL_DEBUG', 'false').lower() == 'true',
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=30,
        pool_timeout=30,
        pool_recycle=3600,  # Recycle connections after 1 hour
    )

# Objects stay readable after commit so results can be serialized outside the session
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)

@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Everything done inside the block is one transaction: it commits when the
    block exits normally and rolls back entirely when it raises.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        session.close()

def init_database():
    """Initialize the database and create tables."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

def reset_database():
    """
    Drop and recreate every table.

    Removes all games and their cascading data (players, votes, narrations,
    missions, whispers, room state). Intended for local development and tests.
    """
    try:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        logger.info("Database reset complete")
    except Exception as e:
        logger.error(f"Failed to reset database: {e}")
        raise
