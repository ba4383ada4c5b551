"""Application error types rendered as the standard JSON envelope."""
from __future__ import annotations
from typing import Optional


class ApiError(Exception):
    """Error with an HTTP status and a client-facing message."""

    status = 500

    def __init__(self, message: str, status: Optional[int] = None):
        if status is not None:
            self.status = status
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to the response envelope."""
        return {
            "success": False,
            "message": self.message,
            "data": None,
        }


class ValidationError(ApiError):
    """Bad or missing query/body parameters."""
    status = 400


class AuthenticationError(ApiError):
    """Credentials (admin key, acting identity) are missing."""
    status = 401


class ForbiddenError(ApiError):
    """Credentials present but not sufficient."""
    status = 403


class NotFoundError(ApiError):
    status = 404


class UnsupportedMediaError(ApiError):
    status = 415


class UpstreamError(ApiError):
    """A collaborator (profile store, remote image host) failed."""
    status = 500
