from fastapi import status


class AppError(Exception):
    """Base error rendered as a failure envelope with ``status_code``."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Request failed"

    def __init__(self, error: str, message: str | None = None, status_code: int | None = None):
        super().__init__(error)
        self.error = error
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """A required identifier or field is missing."""
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class NotFoundError(AppError):
    """Target record is absent or nothing was changed."""
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class StoreFailure(AppError):
    """Any error raised by the underlying database."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Database operation failed"
