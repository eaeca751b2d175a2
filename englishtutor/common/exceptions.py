"""
Common Exception Classes

This module defines the error taxonomy shared by the practice engine,
the stores and the HTTP layer.
"""

from typing import Optional, Any


class BaseError(Exception):
    """Base class for all custom exceptions."""

    retryable = False

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class DatabaseError(BaseError):
    """Exception raised for store-related errors."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the database error.

        Args:
            message: Error message
            original_exception: Original database exception
        """
        super().__init__(f"Database error: {message}", original_exception)


class ValidationError(BaseError):
    """Exception raised when a submitted answer or request is malformed."""

    def __init__(self, message: str, errors: Optional[dict] = None):
        """
        Initialize the validation error.

        Args:
            message: Error message
            errors: Dictionary of validation errors
        """
        super().__init__(f"Validation error: {message}")
        self.errors = errors or {}


class ConfigurationError(BaseError):
    """
    Exception raised for configuration-related errors.

    Covers unknown exam codes, skills not registered for an exam and
    objective questions stored without a correct answer.
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: The configuration key that caused the error
        """
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key


class NotFoundError(BaseError):
    """Exception raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize the not found error.

        Args:
            resource_type: Type of resource that wasn't found
            resource_id: ID of the resource that wasn't found
        """
        super().__init__(f"{resource_type} with ID {resource_id} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class OracleError(BaseError):
    """Exception raised by a scoring or transcription backend."""

    def __init__(self, message: str, provider: str, status_code: Optional[int] = None,
                 original_exception: Optional[Exception] = None):
        """
        Initialize the oracle error.

        Args:
            message: Error message
            provider: Name of the backend that failed
            status_code: HTTP status returned by the backend, if any
            original_exception: Underlying exception
        """
        super().__init__(f"{provider} error: {message}", original_exception)
        self.provider = provider
        self.status_code = status_code


class EvaluationUnavailable(BaseError):
    """Raised when an answer could not be scored because the oracle timed out or failed."""

    retryable = True

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(f"Evaluation unavailable: {message}", original_exception)


class AggregationFailure(BaseError):
    """Raised (and logged) when a progress row could not be updated."""

    def __init__(self, user_id: str, exam_code: str, skill_code: str,
                 original_exception: Optional[Exception] = None):
        super().__init__(
            f"Could not update progress for user {user_id} on {exam_code}/{skill_code}",
            original_exception,
        )
        self.user_id = user_id
        self.exam_code = exam_code
        self.skill_code = skill_code
