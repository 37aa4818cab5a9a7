"""Domain errors raised by the services and rendered by the API layer."""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 422


class NotFoundError(AppError):
    status_code = 404


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    status_code = 403


class InvalidTransitionError(AppError):
    status_code = 409


class ConcurrencyViolation(AppError):
    """A second ACTIVE alert for one sensor was rejected by the store."""

    status_code = 409


class PersistenceError(AppError):
    status_code = 500
