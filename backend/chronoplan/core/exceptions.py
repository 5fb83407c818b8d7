class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class InputInsufficiencyError(SchedulerError):
    """Raised before placement when the requested scope has no subjects, faculty or classrooms."""
    def __init__(self, missing: str, details: dict = None):
        self.missing = missing
        super().__init__(f"No {missing} found for the requested scope.", details=details)

class ConstraintValidationError(AppError):
    """Raised when hard/soft constraint declarations are malformed. Nothing is stored."""
    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(
            "Constraint declarations are invalid",
            status_code=400,
            details={"errors": self.errors},
        )

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
