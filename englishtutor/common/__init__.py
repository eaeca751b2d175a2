"""
Common utilities shared across the practice engine: logging and the
error taxonomy.
"""

from englishtutor.common.exceptions import (
    BaseError,
    ConfigurationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
    OracleError,
    EvaluationUnavailable,
    AggregationFailure,
)
from englishtutor.common.logger import app_logger, log_execution_time, LoggerAdapter

__all__ = [
    "BaseError",
    "ConfigurationError",
    "DatabaseError",
    "NotFoundError",
    "ValidationError",
    "OracleError",
    "EvaluationUnavailable",
    "AggregationFailure",
    "app_logger",
    "log_execution_time",
    "LoggerAdapter",
]
