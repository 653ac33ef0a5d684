"""Domain error taxonomy.

Services raise these; the API layer maps ``status_code`` onto the response.
"""


class DeskError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DeskError):
    """Missing or malformed required input."""

    status_code = 400


class AuthError(DeskError):
    """Authentication failed."""

    status_code = 401


class InvalidCredentialsError(AuthError):
    """Wrong admin email or password at login."""

    def __init__(self, message: str = "Invalid login") -> None:
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Missing, garbled, forged or expired bearer token."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class UploadError(DeskError):
    """Uploaded file was refused."""

    status_code = 400


class UnsupportedTypeError(UploadError):
    """Declared type is not an allowed image type, or the file is empty."""


class TooLargeError(UploadError):
    """Upload exceeds the configured byte limit."""


class InvalidImageError(UploadError):
    """Image bytes could not be decoded safely."""


class NotFoundError(DeskError):
    """Unknown record id."""

    status_code = 404


class StoreError(DeskError):
    """Persistence failure."""

    status_code = 500


class WriteFailedError(StoreError):
    """Writing a collection or asset to disk failed."""
