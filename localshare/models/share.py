"""
Outcome models for distribution operations.
"""

from dataclasses import dataclass

from localshare.models.artifact import Artifact
from localshare.models.recipient import Recipient


@dataclass(frozen=True, kw_only=True)
class ShareResult:
    """
    Outcome of a share request.

    A request may be partially admitted: files with an unsupported type are
    counted in `rejected_count` instead of aborting the batch.
    """

    shared: tuple[Artifact, ...] = ()
    rejected_count: int = 0
    recipients_reached: tuple[str, ...] = ()

    @property
    def shared_count(self) -> int:
        """Number of distinct artifacts shared."""
        return len(self.shared)

    @property
    def reached_count(self) -> int:
        return len(self.recipients_reached)

    @property
    def is_partial(self) -> bool:
        """Check if some files were skipped."""
        return self.rejected_count > 0

    def summary(self) -> str:
        """One-line feedback suitable for display to the distributing party."""
        line = f"Shared {self.shared_count} file(s) with {self.reached_count} recipient(s)."
        if self.rejected_count:
            line += f" Skipped {self.rejected_count} file(s) of an unsupported type."
        return line


@dataclass(frozen=True, kw_only=True)
class SharedArtifact:
    """An artifact together with every recipient it is currently visible to."""

    artifact: Artifact
    recipients: tuple[Recipient, ...] = ()

    @property
    def reference_count(self) -> int:
        return len(self.recipients)
