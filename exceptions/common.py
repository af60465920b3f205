"""
Cross-cutting exceptions: lookups, validation, authorization and storage.
"""

from .base import StorefrontException


class NotFoundException(StorefrontException):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, entity_id: int | str):
        super().__init__(
            f"{entity.capitalize()} {entity_id} not found",
            details={'entity': entity, 'entity_id': entity_id}
        )
        self.entity = entity
        self.entity_id = entity_id


class ValidationException(StorefrontException):
    """Raised when required fields are missing or malformed."""
    pass


class UnauthorizedException(StorefrontException):
    """Raised when an admin-only operation is called without a valid admin actor."""

    def __init__(self, actor_id: int | None):
        super().__init__(
            "Unauthorized - admin privileges required",
            details={'actor_id': actor_id}
        )
        self.actor_id = actor_id


class StorageException(StorefrontException):
    """
    Raised when the relational store fails.

    Wraps SQLAlchemy errors that do not map to a typed condition.
    integrity_violation is set when the failure was a unique/foreign key
    constraint, so callers can translate it (e.g. into a duplicate order).
    """

    def __init__(self, operation: str, reason: str, integrity_violation: bool = False):
        super().__init__(
            f"Storage failure during {operation}: {reason}",
            details={'operation': operation, 'integrity_violation': integrity_violation}
        )
        self.operation = operation
        self.reason = reason
        self.integrity_violation = integrity_violation
