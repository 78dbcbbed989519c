class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class FormatError(AppError):
    """Raised when a wall-clock value is not a valid HH:MM string."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

class NotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id

class InvalidRoleError(AppError):
    """Raised when an operation needs a teacher (or a full-time teacher) and gets someone else."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class DuplicateError(AppError):
    """Raised when a create would break a uniqueness rule."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class ScheduleValidationError(AppError):
    """Raised when a schedule write is rejected; details carry every conflict or violation."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)
