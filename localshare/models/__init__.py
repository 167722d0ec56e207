"""
Domain models for LocalShare.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from localshare.models.artifact import (
    Artifact,
    ArtifactKey,
    ArtifactKind,
    IncomingFile,
    KeyFunction,
    content_digest_key,
    display_name_key,
)
from localshare.models.handle import Handle
from localshare.models.recipient import Availability, Recipient
from localshare.models.share import SharedArtifact, ShareResult
from localshare.models.viewer import ViewerFocus

__all__ = [
    # Artifacts
    "Artifact",
    "ArtifactKey",
    "ArtifactKind",
    "IncomingFile",
    "KeyFunction",
    "content_digest_key",
    "display_name_key",
    "Handle",
    # Recipients
    "Availability",
    "Recipient",
    # Outcomes
    "ShareResult",
    "SharedArtifact",
    "ViewerFocus",
]
