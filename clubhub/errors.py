"""
Error taxonomy for the club backend.

Route handlers raise these; ``app.create_app`` maps each one to its HTTP
status with a ``{"message": ...}`` body.
"""

from __future__ import annotations


class ClubError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConflictError(ClubError):
    status_code = 400
    default_message = "Username or email already exists"


class InvalidCredentials(ClubError):
    status_code = 400
    default_message = "Invalid credentials"


class NotFound(ClubError):
    status_code = 404
    default_message = "Not found"


class BadRequest(ClubError):
    status_code = 400
    default_message = "Bad request"


class UploadError(ClubError):
    status_code = 500
    default_message = "Upload failed"


class ServerError(ClubError):
    status_code = 500
    default_message = "Server error"
