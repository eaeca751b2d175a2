"""
Database initialization and connection management.

This module provides functions for:
1. Creating the async engine and the schema
2. Handing out the session factory
3. Disposing of the engine on shutdown
"""

from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from englishtutor.common.logger import app_logger
from .base import metadata
from . import models  # noqa: F401  registers the tables on the metadata

# Setup module logger
logger = app_logger.getChild("database.init_db")

# Global engine instance
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine_kwargs(database_url: str, echo: bool = False, pool_size: int = 5) -> Dict[str, Any]:
    """
    Get engine keyword arguments based on database type.
    Different databases support different connection options.
    """
    kwargs: Dict[str, Any] = {"echo": echo}
    if database_url.startswith("postgresql"):
        kwargs.update({
            "pool_size": pool_size,
            "pool_pre_ping": True,
            "pool_recycle": 300,
        })
    return kwargs


def get_engine() -> AsyncEngine:
    """Get the global async engine instance."""
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call initialize_database() first.")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get the session factory bound to the global engine."""
    if _session_factory is None:
        raise RuntimeError("Database engine not initialized. Call initialize_database() first.")
    return _session_factory


async def initialize_database(database_url: str, echo: bool = False, pool_size: int = 5,
                              create_tables: bool = True) -> AsyncEngine:
    """
    Initialize the async database engine and create missing tables.

    Args:
        database_url: Database connection URL
        echo: Whether to echo SQL statements
        pool_size: Connection pool size (PostgreSQL)
        create_tables: Whether to create missing tables

    Returns:
        AsyncEngine instance
    """
    global _engine, _session_factory

    try:
        logger.info(f"Initializing database with URL: {database_url[:10]}...")
        _engine = create_async_engine(database_url, **get_engine_kwargs(database_url, echo, pool_size))
        _session_factory = sessionmaker(_engine, class_=AsyncSession, expire_on_commit=False)

        async with _engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                await conn.run_sync(metadata.create_all)

        logger.info("Database engine initialized successfully")
        return _engine

    except Exception as e:
        logger.error(f"Failed to initialize async database: {str(e)}")
        raise


async def close_database() -> None:
    """Close the database engine and all connections."""
    global _engine, _session_factory

    if _engine:
        try:
            await _engine.dispose()
            logger.info("Database engine closed successfully")
        except Exception as e:
            logger.error(f"Error closing database engine: {str(e)}")
            raise
        finally:
            _engine = None
            _session_factory = None
