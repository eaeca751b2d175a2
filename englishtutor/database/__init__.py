"""
Database Module

This module provides the SQLAlchemy tables, engine lifecycle and the SQL
implementation of the practice store.
"""

from englishtutor.database.base import Base, ModelBase, metadata
from englishtutor.database.init_db import (
    close_database,
    get_engine,
    get_session_factory,
    initialize_database,
)
from englishtutor.database.repository import SqlPracticeStore

__all__ = [
    'Base',
    'ModelBase',
    'metadata',
    'close_database',
    'get_engine',
    'get_session_factory',
    'initialize_database',
    'SqlPracticeStore',
]
