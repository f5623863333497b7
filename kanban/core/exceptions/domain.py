from kanban.core.exceptions.base import AppException


class ResourceNotFoundError(AppException):
    """Raised when a requested board, column or card does not exist."""

    code = "not_found"

    def __init__(self, resource: str = "Resource", identifier: str = ""):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} '{identifier}' not found"
        self.resource = resource
        self.identifier = identifier
        super().__init__(message)


class ValidationError(AppException):
    """Raised when input validation fails."""

    code = "validation_error"

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class ConflictError(AppException):
    """Raised when a well-formed request needs explicit confirmation to proceed."""

    code = "conflict"

    def __init__(self, message: str = "The request conflicts with the current state"):
        super().__init__(message)


class MigrationError(AppException):
    """Raised when a schema migration fails to apply."""

    code = "migration_failed"

    def __init__(self, migration_id: str, message: str = ""):
        self.migration_id = migration_id
        text = f"Migration {migration_id} failed"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
