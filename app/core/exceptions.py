"""
Custom exceptions for Animal Share API.
Every error response carries an error code and a human-readable message.
"""

from typing import Any


class AnimalShareException(Exception):
    """Base exception for all Animal Share API errors."""

    def __init__(
        self,
        error: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to response dictionary."""
        response = {
            "error": self.error,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class ValidationException(AnimalShareException):
    """400 - Malformed request (missing fields, invalid category, unknown ids)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="validation_failed",
            message=message,
            status_code=400,
            details=details,
        )


class PolicyViolationException(AnimalShareException):
    """400 - Well-formed request that breaks a content rule."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            error="policy_violation",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedException(AnimalShareException):
    """401 - Missing or invalid identity token."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            error="unauthorized",
            message=message,
            status_code=401,
        )


class NotFoundException(AnimalShareException):
    """
    404 - Resource not found.

    Also used when the resource exists but belongs to someone else,
    so ownership is never revealed.
    """

    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            error="not_found",
            message=message,
            status_code=404,
        )


class PostNotFoundException(NotFoundException):
    """404 - Post not found (or not owned by the caller)."""

    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__(f"Post with ID '{post_id}' not found")


class TagNotFoundException(NotFoundException):
    """404 - Tag not found."""

    def __init__(self, tag_id: str):
        self.tag_id = tag_id
        super().__init__(f"Tag with ID '{tag_id}' not found")
