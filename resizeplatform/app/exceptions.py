"""Custom exception hierarchy for the resize platform."""

from __future__ import annotations


class ResizePlatformError(Exception):
    """Base exception for all resize platform errors."""


class ValidationError(ResizePlatformError):
    """Raised when an input violates a precondition."""


class ResizeError(ResizePlatformError):
    """Raised when a design cannot be resized."""


class BatchError(ResizePlatformError):
    """Raised for batch orchestration failures."""


class BatchNotFoundError(BatchError):
    """Raised when a batch id is unknown."""


class JobNotFoundError(BatchError):
    """Raised when a job id is unknown."""


class JobStateError(BatchError):
    """Raised when a job cannot make the requested state transition."""


class StoreError(ResizePlatformError):
    """Raised when the design store fails."""


class DesignNotFoundError(StoreError):
    """Raised when a design id is not in the store."""
