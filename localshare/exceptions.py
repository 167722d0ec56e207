"""
LocalShare exception hierarchy.

All exceptions inherit from LocalShareError for easy catching.
"""

from typing import Any


class LocalShareError(Exception):
    """Base exception for all localshare errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class InvalidRequestError(LocalShareError):
    """Request rejected before any state was touched (no targets, no files)."""


class UnsupportedArtifactTypeError(LocalShareError):
    """Declared content type is neither a document nor an image."""

    def __init__(self, message: str, *, content_type: str) -> None:
        super().__init__(message, content_type=content_type)
        self.content_type = content_type


class NotFoundError(LocalShareError):
    """Referenced id is unknown."""


class ArtifactNotFoundError(NotFoundError):
    """Artifact is not in the catalog."""

    def __init__(self, message: str, *, artifact_id: str) -> None:
        super().__init__(message, artifact_id=artifact_id)
        self.artifact_id = artifact_id


class RecipientNotFoundError(NotFoundError):
    """Recipient is not provisioned in the registry."""

    def __init__(self, message: str, *, recipient_id: str) -> None:
        super().__init__(message, recipient_id=recipient_id)
        self.recipient_id = recipient_id


class AllocationError(LocalShareError):
    """A resource handle could not be allocated."""

    def __init__(self, message: str, *, limit: int | None = None) -> None:
        super().__init__(message, limit=limit)
        self.limit = limit
