"""
Exception hierarchy shared by the services and the API layer.

Services raise these; the app factory maps each one to an HTTP status once:

    ValidationError   -> 400
    NotFoundError     -> 404
    StorageError      -> 500
    AIGenerationError -> 502
"""


class ValidationError(Exception):
    """Raised when input is missing required fields or has the wrong shape.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown, keyed by field name.
    """

    def __init__(self, message: str, details: dict = None):
        self.details = details or {}
        super().__init__(message)


class NotFoundError(Exception):
    """Raised when a record id does not exist."""

    def __init__(self, resource: str, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource} not found"
        if resource_id is not None:
            msg = f"{resource} {resource_id} not found"
        super().__init__(msg)


class StorageError(Exception):
    """Raised when the persistence layer fails."""


class AIGenerationError(Exception):
    """Raised when the narrative generator fails.

    The original exception is kept on ``cause`` and its message is part of
    the error text returned to the client.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to generate {operation}: {cause}")
