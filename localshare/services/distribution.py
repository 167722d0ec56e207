"""
Distribution engine.

Orchestrates share and revoke across the recipient registry and the
artifact catalog, and decides when an artifact's handle may be released.
"""

from collections.abc import Iterable, Sequence
from typing import Self

import structlog

from localshare.config import LocalShareConfig
from localshare.core.holds import HoldCounter
from localshare.exceptions import ArtifactNotFoundError, InvalidRequestError
from localshare.handles.manager import ResourceHandleManager
from localshare.models.artifact import Artifact, IncomingFile, KeyFunction, display_name_key
from localshare.models.share import SharedArtifact, ShareResult
from localshare.services.catalog import ArtifactCatalog
from localshare.services.registry import RecipientRegistry
from localshare.services.viewer import ViewerSession

logger = structlog.get_logger(__name__)


class DistributionEngine:
    """
    Single owner of the registry, catalog and viewer state.

    An artifact lives while it has at least one referent: a recipient that
    sees it, or an open viewer. Once the last referent goes away the
    artifact is forgotten and its handle released, exactly once.

    Example:
        ```python
        registry = RecipientRegistry()
        registry.provision("user-1", "Alice")

        with DistributionEngine(registry) as engine:
            result = engine.share(
                {"user-1"},
                [IncomingFile(display_name="a.pdf", content_type="application/pdf", payload=data)],
            )
            print(result.summary())
        ```
    """

    def __init__(
        self,
        registry: RecipientRegistry | None = None,
        catalog: ArtifactCatalog | None = None,
        handles: ResourceHandleManager | None = None,
        config: LocalShareConfig | None = None,
        *,
        key_func: KeyFunction = display_name_key,
    ) -> None:
        """
        Args:
            registry: Recipient registry. An empty one is created if not provided.
            catalog: Artifact catalog. Built from `handles` and `config` if not provided.
            handles: Handle manager. Built from `config` if not provided.
            config: Configuration. Uses defaults if not provided.
            key_func: Artifact identity used when building the catalog.
        """
        self._config = config or LocalShareConfig()
        if handles is None:
            handles = ResourceHandleManager(
                self._config.max_handles, lock_memory=self._config.lock_handle_memory
            )
        if catalog is None:
            catalog = ArtifactCatalog(
                handles,
                key_func=key_func,
                document_content_types=self._config.document_content_types,
                image_content_type_prefix=self._config.image_content_type_prefix,
            )
        self._handles = handles
        self._catalog = catalog
        self._registry = registry if registry is not None else RecipientRegistry()
        self._holds = HoldCounter()
        self._viewer = ViewerSession(
            self._catalog,
            self._handles,
            self._holds,
            self._settle,
            default_zoom=self._config.default_zoom,
            zoom_min=self._config.zoom_min,
            zoom_max=self._config.zoom_max,
            zoom_step=self._config.zoom_step,
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def registry(self) -> RecipientRegistry:
        return self._registry

    @property
    def catalog(self) -> ArtifactCatalog:
        return self._catalog

    @property
    def handles(self) -> ResourceHandleManager:
        return self._handles

    @property
    def viewer(self) -> ViewerSession:
        return self._viewer

    def share(
        self, target_recipient_ids: Iterable[str], files: Sequence[IncomingFile]
    ) -> ShareResult:
        """
        Share files with a set of recipients.

        Unsupported files are skipped and counted. Offline or unknown
        recipient ids are skipped. Files are admitted one at a time, so a
        failure on one file never undoes references created for earlier ones.

        Args:
            target_recipient_ids: Recipients to share with.
            files: Files to share.

        Returns:
            What was shared, with whom, and how many files were skipped.

        Raises:
            InvalidRequestError: If there are no targets or no files. Nothing
                is changed.
            AllocationError: If a handle cannot be allocated for a file.
        """
        targets = set(target_recipient_ids)
        files = list(files)
        if not targets:
            msg = "Select at least one recipient"
            raise InvalidRequestError(msg)
        if not files:
            msg = "Select at least one file"
            raise InvalidRequestError(msg)

        accepted: list[IncomingFile] = []
        rejected = 0
        for file in files:
            if self._catalog.classify(file) is None:
                rejected += 1
                logger.warning(
                    "Skipping unsupported file",
                    name=file.display_name,
                    content_type=file.content_type,
                )
            else:
                accepted.append(file)

        if not accepted:
            logger.info("Nothing to share", rejected=rejected)
            return ShareResult(rejected_count=rejected)

        reachable = tuple(
            r.recipient_id for r in self._registry.list_eligible() if r.recipient_id in targets
        )
        skipped = targets.difference(reachable)
        if skipped:
            logger.warning("Skipping unreachable recipients", recipient_ids=sorted(skipped))
        if not reachable:
            return ShareResult(rejected_count=rejected)

        shared: dict[str, Artifact] = {}
        for file in accepted:
            artifact = self._catalog.admit(file)
            for recipient_id in reachable:
                self._registry.add_reference(recipient_id, artifact)
            shared.setdefault(artifact.artifact_id, artifact)

        result = ShareResult(
            shared=tuple(shared.values()),
            rejected_count=rejected,
            recipients_reached=reachable,
        )
        logger.info(
            "Share complete",
            shared=result.shared_count,
            rejected=result.rejected_count,
            reached=result.reached_count,
        )
        return result

    def revoke(self, recipient_id: str, artifact_id: str) -> bool:
        """
        Hide an artifact from one recipient.

        The artifact is released if nobody references it anymore. Unknown
        ids are a no-op.

        Returns:
            True if a reference was removed.
        """
        removed = self._registry.remove_reference(recipient_id, artifact_id)
        if not removed:
            logger.debug("Nothing to revoke", recipient_id=recipient_id, artifact_id=artifact_id)
            return False

        logger.info("Reference revoked", recipient_id=recipient_id, artifact_id=artifact_id)
        self._settle(artifact_id)
        return True

    def revoke_from_all(self, artifact_id: str) -> int:
        """
        Hide an artifact from every recipient and release it.

        Release waits for the viewer if the artifact is open.

        Returns:
            Number of recipients that had the artifact.

        Raises:
            ArtifactNotFoundError: If the artifact is not in the catalog.
        """
        if artifact_id not in self._catalog:
            msg = "Artifact not in catalog"
            raise ArtifactNotFoundError(msg, artifact_id=artifact_id)

        affected = self._registry.remove_reference_from_all(artifact_id)
        logger.info("Artifact revoked from all", artifact_id=artifact_id, affected=affected)
        self._settle(artifact_id)
        return affected

    def reference_count(self, artifact_id: str) -> int:
        """Recipients that see the artifact plus viewer holds on it."""
        return self._registry.reference_count(artifact_id) + self._holds.count(artifact_id)

    def open_viewer(self, artifact_id: str) -> ViewerSession:
        """
        Open a cataloged artifact in the viewer.

        Raises:
            ArtifactNotFoundError: If the artifact is not in the catalog.
        """
        self._viewer.open(self._catalog.require(artifact_id))
        return self._viewer

    def shared_artifacts(self) -> list[SharedArtifact]:
        """Every cataloged artifact with the recipients it is visible to."""
        return [
            SharedArtifact(
                artifact=artifact,
                recipients=tuple(self._registry.holders(artifact.artifact_id)),
            )
            for artifact in self._catalog
        ]

    def close(self) -> None:
        """Close the viewer, drop every reference and release every handle."""
        self._viewer.close()
        self._holds.clear()
        for artifact in self._catalog:
            self._registry.remove_reference_from_all(artifact.artifact_id)
        released = self._catalog.clear()
        logger.debug("Engine closed", released=released)

    def _settle(self, artifact_id: str) -> bool:
        """Forget the artifact if it is cataloged and has no referents left."""
        if artifact_id not in self._catalog:
            return False
        if self._holds.count(artifact_id):
            if not self._registry.reference_count(artifact_id):
                logger.warning("Release deferred, artifact open in viewer", artifact_id=artifact_id)
            return False
        if self._registry.reference_count(artifact_id):
            return False

        self._catalog.forget(artifact_id)
        logger.info("Artifact released", artifact_id=artifact_id)
        return True
