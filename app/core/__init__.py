"""Core utilities and exceptions for Animal Share API."""

from app.core.exceptions import (
    AnimalShareException,
    NotFoundException,
    PolicyViolationException,
    PostNotFoundException,
    TagNotFoundException,
    UnauthorizedException,
    ValidationException,
)

__all__ = [
    "AnimalShareException",
    "NotFoundException",
    "PolicyViolationException",
    "PostNotFoundException",
    "TagNotFoundException",
    "UnauthorizedException",
    "ValidationException",
]
