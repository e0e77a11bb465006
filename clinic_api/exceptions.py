# /clinic_api/exceptions.py


class AppError(Exception):
    """Base class for failures that map onto an HTTP status code."""
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def status(self) -> str:
        return 'fail' if 400 <= self.status_code < 500 else 'error'

    def to_dict(self):
        return {'status': self.status, 'message': self.message}


class ValidationError(AppError):
    status_code = 400


class Unauthenticated(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class Conflict(AppError):
    status_code = 409


class ConfigurationError(AppError):
    """Raised when the server is missing required settings such as the JWT secret."""
    status_code = 500
