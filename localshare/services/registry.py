"""
Recipient registry.

Tracks every recipient and the artifacts currently visible to each.
"""

import dataclasses
from collections.abc import Iterable, Iterator

import structlog

from localshare.exceptions import RecipientNotFoundError
from localshare.models.artifact import Artifact
from localshare.models.recipient import Availability, Recipient

logger = structlog.get_logger(__name__)


class RecipientRegistry:
    """
    Ordered set of recipients and their visible artifacts.

    Recipients are immutable snapshots; every mutation swaps in a new one.
    References held here never own the artifact.
    """

    def __init__(self, recipients: Iterable[Recipient] = ()) -> None:
        """
        Args:
            recipients: Recipients to provision up front, in registry order.
        """
        self._recipients: dict[str, Recipient] = {}
        for recipient in recipients:
            self._insert(recipient)

    def _insert(self, recipient: Recipient) -> None:
        if recipient.recipient_id in self._recipients:
            msg = f"Recipient already provisioned: {recipient.recipient_id}"
            raise ValueError(msg)
        self._recipients[recipient.recipient_id] = recipient

    def provision(
        self,
        recipient_id: str,
        display_name: str,
        availability: Availability = Availability.ONLINE,
    ) -> Recipient:
        """
        Add a recipient with an empty visible set.

        Raises:
            ValueError: If the id is already provisioned.
        """
        recipient = Recipient(
            recipient_id=recipient_id, display_name=display_name, availability=availability
        )
        self._insert(recipient)
        logger.debug("Recipient provisioned", recipient_id=recipient_id)
        return recipient

    def set_availability(self, recipient_id: str, availability: Availability) -> Recipient:
        """
        Record presence reported from outside.

        Going offline keeps whatever was already shared.
        """
        recipient = dataclasses.replace(self.require(recipient_id), availability=availability)
        self._recipients[recipient_id] = recipient
        logger.debug("Availability changed", recipient_id=recipient_id, status=str(availability))
        return recipient

    def get(self, recipient_id: str) -> Recipient | None:
        return self._recipients.get(recipient_id)

    def require(self, recipient_id: str) -> Recipient:
        """
        Get a recipient by id.

        Raises:
            RecipientNotFoundError: If the id is unknown.
        """
        recipient = self._recipients.get(recipient_id)
        if recipient is None:
            msg = "Recipient not provisioned"
            raise RecipientNotFoundError(msg, recipient_id=recipient_id)
        return recipient

    def list_all(self) -> list[Recipient]:
        return list(self._recipients.values())

    def list_eligible(self) -> list[Recipient]:
        """Online recipients, in registry order."""
        return [r for r in self._recipients.values() if r.is_online]

    def add_reference(self, recipient_id: str, artifact: Artifact) -> bool:
        """
        Make an artifact visible to a recipient.

        Silent no-op if an artifact with the same key is already visible.

        Returns:
            True if a reference was added.

        Raises:
            RecipientNotFoundError: If the recipient is unknown.
        """
        recipient = self.require(recipient_id)
        if recipient.has_key(artifact.key):
            return False

        self._recipients[recipient_id] = dataclasses.replace(
            recipient, visible_artifacts=(*recipient.visible_artifacts, artifact)
        )
        return True

    def remove_reference(self, recipient_id: str, artifact_id: str) -> bool:
        """
        Hide an artifact from one recipient.

        No-op if the recipient is unknown or does not see the artifact.

        Returns:
            True if a reference was removed.
        """
        recipient = self._recipients.get(recipient_id)
        if recipient is None or not recipient.has_artifact(artifact_id):
            return False

        self._recipients[recipient_id] = dataclasses.replace(
            recipient,
            visible_artifacts=tuple(
                a for a in recipient.visible_artifacts if a.artifact_id != artifact_id
            ),
        )
        return True

    def remove_reference_from_all(self, artifact_id: str) -> int:
        """
        Hide an artifact from every recipient.

        Returns:
            Number of recipients that had it.
        """
        affected = 0
        for recipient_id in list(self._recipients):
            if self.remove_reference(recipient_id, artifact_id):
                affected += 1
        return affected

    def reference_count(self, artifact_id: str) -> int:
        """Number of recipients the artifact is visible to."""
        return sum(1 for r in self._recipients.values() if r.has_artifact(artifact_id))

    def holders(self, artifact_id: str) -> list[Recipient]:
        """Recipients the artifact is visible to, in registry order."""
        return [r for r in self._recipients.values() if r.has_artifact(artifact_id)]

    def __iter__(self) -> Iterator[Recipient]:
        return iter(self.list_all())

    def __len__(self) -> int:
        return len(self._recipients)

    def __contains__(self, recipient_id: object) -> bool:
        return recipient_id in self._recipients
