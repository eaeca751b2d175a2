"""
SQLAlchemy Base Configuration

This module provides the SQLAlchemy declarative base for the practice
store's tables.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

# Configure naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)

Base = declarative_base(metadata=metadata)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops timezone info; stored timestamps are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ModelBase(Base):
    """Base class for all SQLAlchemy models."""

    __abstract__ = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert model instance to dictionary."""
        return {
            attr.columns[0].name: getattr(self, attr.key)
            for attr in self.__mapper__.column_attrs
        }
