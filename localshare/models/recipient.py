"""
Recipient-related domain models.
"""

from dataclasses import dataclass
from enum import StrEnum

from localshare.models.artifact import Artifact, ArtifactKey


class Availability(StrEnum):
    """Presence of a recipient, supplied from outside the library."""

    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True, kw_only=True)
class Recipient:
    """
    An addressable destination for shared artifacts.

    `visible_artifacts` is in share order and never holds two artifacts
    with the same key. Entries are non-owning references into the catalog.
    """

    recipient_id: str
    display_name: str
    availability: Availability = Availability.ONLINE
    visible_artifacts: tuple[Artifact, ...] = ()

    @property
    def is_online(self) -> bool:
        """Check if this recipient can be targeted by a share."""
        return self.availability == Availability.ONLINE

    def has_artifact(self, artifact_id: str) -> bool:
        return any(a.artifact_id == artifact_id for a in self.visible_artifacts)

    def has_key(self, key: ArtifactKey) -> bool:
        return any(a.key == key for a in self.visible_artifacts)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary representation."""
        return {
            "recipient_id": self.recipient_id,
            "name": self.display_name,
            "status": str(self.availability),
            "artifacts": [a.to_dict() for a in self.visible_artifacts],
        }
