# annotator_core/exceptions.py
"""
Exception classes for annotator_core.

Degenerate geometry and malformed import lines are not errors: they are
skipped and the calling operation returns None or an empty result. The
classes below cover the conditions a caller has to act on.
"""

from typing import Any, Optional


class AnnotatorError(Exception):
    """Base exception for annotator_core."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MissingNameError(AnnotatorError):
    """Raised when a skeleton template is saved without a name."""

    def __init__(self, message: str = "Skeleton name is required",
                 template_id: Optional[str] = None):
        details = {"template_id": template_id} if template_id else None
        super().__init__(message, details)
        self.template_id = template_id


class NoImageError(AnnotatorError):
    """Raised when an editing operation needs an image and none is loaded."""


class EntityNotFoundError(AnnotatorError):
    """Raised when an operation references an unknown keypoint, shape or box."""

    def __init__(self, message: str, entity_id: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        details = details or {}
        if entity_id:
            details["entity_id"] = entity_id
        super().__init__(message, details)
        self.entity_id = entity_id


class ImageLoadError(AnnotatorError):
    """Raised when an image file cannot be opened or decoded."""

    def __init__(self, message: str, path: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(message, details)
        self.path = path
