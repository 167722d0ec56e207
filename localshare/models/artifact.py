"""
Artifact-related domain models.
"""

import hashlib
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from localshare.models.handle import Handle

ArtifactKey = str
"""Identity under which two submissions count as the same artifact."""


class ArtifactKind(StrEnum):
    """Kind of shared artifact, derived from its declared content type."""

    DOCUMENT = "document"
    IMAGE = "image"


@dataclass(frozen=True, kw_only=True)
class IncomingFile:
    """
    A raw file as supplied by the upload surface.

    Nothing about it is trusted beyond the declared content type.
    """

    display_name: str
    content_type: str
    payload: bytes = b""

    @property
    def size(self) -> int:
        return len(self.payload)


@dataclass(frozen=True, kw_only=True)
class Artifact:
    """
    A distinct shared file tracked by the catalog.

    Owns exactly one handle, released when the artifact is forgotten.
    """

    artifact_id: str
    display_name: str
    kind: ArtifactKind
    handle: Handle
    key: ArtifactKey
    content_type: str = ""
    size: int = 0
    digest: str = ""  # SHA-256 of the payload, informational

    @property
    def is_image(self) -> bool:
        return self.kind == ArtifactKind.IMAGE

    @property
    def is_document(self) -> bool:
        return self.kind == ArtifactKind.DOCUMENT

    @property
    def url(self) -> str:
        """Address of the payload while the artifact is live."""
        return self.handle.url

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary representation."""
        return {
            "artifact_id": self.artifact_id,
            "name": self.display_name,
            "kind": str(self.kind),
            "size": self.size,
            "size_label": _format_size(self.size),
            "content_type": self.content_type,
        }


KeyFunction = Callable[[IncomingFile], ArtifactKey]


def display_name_key(file: IncomingFile) -> ArtifactKey:
    """
    Identify a file by its display name.

    Two different files with the same name are the same artifact. This is
    the default and matches how uploads have always been deduplicated.
    """
    return file.display_name


def content_digest_key(file: IncomingFile) -> ArtifactKey:
    """Identify a file by the SHA-256 of its payload."""
    return hashlib.sha256(file.payload).hexdigest()


def _format_size(size_bytes: int) -> str:
    """Format byte size in human-readable form."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
