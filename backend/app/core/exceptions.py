class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class RecordDeletedError(AppError):
    """Raised when the record being edited was deleted by another user."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class ConcurrencyConflictError(AppError):
    """Raised when the submitted version token no longer matches the stored one."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class InvalidCourseIdentifierError(AppError):
    """Raised when a selected course identifier is not an integer."""
    def __init__(self, raw_value):
        self.raw_value = raw_value
        super().__init__(
            f"Invalid course identifier: {raw_value!r}",
            status_code=422,
            details={"value": raw_value},
        )

class PersistenceError(AppError):
    """Raised when the database rejects a write."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=503, details=details)
