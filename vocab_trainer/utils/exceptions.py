"""Custom exception classes and error handling utilities."""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from loguru import logger


class VocabTrainerException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(VocabTrainerException):
    """Missing or invalid request fields."""
    pass


class UpstreamUnavailable(VocabTrainerException):
    """The word source or the store could not be reached."""
    pass


class NotConfigured(VocabTrainerException):
    """A required secret or credential is missing."""
    pass


class Unauthorized(VocabTrainerException):
    """Bad or missing bearer token."""
    pass


def handle_validation_error(error: ValidationError) -> HTTPException:
    """Handle validation errors."""
    logger.warning(f"Validation error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={
            "message": error.message,
            "details": error.details
        }
    )


def handle_upstream_error(error: UpstreamUnavailable, public_message: str) -> HTTPException:
    """Handle upstream failures without leaking internal error text."""
    logger.error(f"Upstream unavailable: {error.message}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=public_message
    )


def handle_not_configured(error: NotConfigured) -> HTTPException:
    """Handle missing operator configuration."""
    logger.error(f"Not configured: {error.message}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Service is not configured."
    )


def handle_unauthorized(error: Unauthorized) -> HTTPException:
    """Handle authentication errors."""
    logger.warning(f"Unauthorized: {error.message}")
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
