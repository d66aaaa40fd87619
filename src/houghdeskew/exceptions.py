"""
Exceptions raised by the deskew tool.

Estimation outcomes such as "no lines detected" or "low confidence" are
not errors; they are reported through ``EstimateStatus``. The classes
below cover the cases where a file pair cannot be processed at all.
"""

from typing import Any, Dict, Optional


class DeskewError(Exception):
    """Base exception for all deskew errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(DeskewError):
    """Raised when a configuration file cannot be read or holds bad values."""


class InvalidImageError(DeskewError):
    """Raised when an empty or malformed array reaches the processing core."""


class ImageIOError(DeskewError):
    """Raised when an image file cannot be read or written."""

    def __init__(self, message: str, path: Any, **kwargs: Any) -> None:
        details = dict(kwargs)
        details["path"] = str(path)
        super().__init__(message, details)
        self.path = path


class ImageLoadError(ImageIOError):
    """Raised when a source file is missing, unreadable or not an image."""


class ImageWriteError(ImageIOError):
    """Raised when a destination file cannot be written."""
