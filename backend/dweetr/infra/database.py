# dweetr/infra/database.py

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool, StaticPool

from dweetr.config import DATABASE_URL

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================


def create_db_engine(database_url: str = DATABASE_URL, echo: bool = False) -> Engine:
    """
    Build the engine shared by every request.

    PostgreSQL gets a pre-pinged connection pool. SQLite files get a fresh
    connection per session; in-memory SQLite shares one connection so the
    schema survives across sessions.
    """
    if database_url.startswith("sqlite"):
        in_memory = database_url in ("sqlite://", "sqlite:///:memory:")
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if in_memory else NullPool,
            echo=echo,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connections before using them
        pool_size=5,         # Maintain 5 connections in the pool
        max_overflow=10,     # Allow 10 extra connections if needed
        pool_recycle=3600,   # Recycle connections every hour
        echo=echo,
    )


def check_connection(engine: Engine) -> bool:
    """
    Test DB connection.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
