"""Domain errors raised by the review service and the auth gate.

Each error carries the HTTP status the API answers with; ``app.py`` turns
them into ``{"error": message}`` bodies.
"""


class ReviewApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReviewApiError):
    status_code = 400


class AuthenticationError(ReviewApiError):
    status_code = 401


class AuthorizationError(ReviewApiError):
    status_code = 403


class NotFoundError(ReviewApiError):
    status_code = 404


class ConflictError(ReviewApiError):
    status_code = 409


class StorageCorruptionError(Exception):
    """Unreadable data file. Never leaves the file store."""
