"""Errors raised by relationship operations."""

from enum import Enum
from typing import Any


class RelationshipErrorType(str, Enum):
    """Kinds of relationship errors."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    STORE_ERROR = "store_error"
    UNKNOWN_ERROR = "unknown_error"


class RelationshipError(Exception):
    """Base class for errors raised by the relationship graph."""

    error_type = RelationshipErrorType.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(RelationshipError):
    """Missing fields, self-relationship or disallowed entity type pair."""

    error_type = RelationshipErrorType.VALIDATION_ERROR


class NotFoundError(RelationshipError):
    """The targeted relationship does not exist."""

    error_type = RelationshipErrorType.NOT_FOUND


class DuplicateError(RelationshipError):
    """An identical relationship already exists."""

    error_type = RelationshipErrorType.DUPLICATE


class StoreError(RelationshipError):
    """Wraps a failure of the underlying store."""

    error_type = RelationshipErrorType.STORE_ERROR

    def __init__(self, message: str, operation: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details)
        self.operation = operation


class UnknownError(RelationshipError):
    """Anything unexpected that is not one of the other kinds."""

    error_type = RelationshipErrorType.UNKNOWN_ERROR
