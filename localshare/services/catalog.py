"""
Artifact catalog.

Holds the distinct artifacts known to the system, keyed by identity, each
owning exactly one resource handle.
"""

import hashlib
import uuid
from collections import OrderedDict
from collections.abc import Iterable, Iterator

import structlog

from localshare.exceptions import ArtifactNotFoundError, UnsupportedArtifactTypeError
from localshare.handles.manager import ResourceHandleManager
from localshare.models.artifact import (
    Artifact,
    ArtifactKey,
    ArtifactKind,
    IncomingFile,
    KeyFunction,
    display_name_key,
)

logger = structlog.get_logger(__name__)


def _normalize_content_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


class ArtifactCatalog:
    """
    Owner of every live artifact and its handle.

    The catalog does not count references; callers decide when an artifact
    may be forgotten.
    """

    def __init__(
        self,
        handles: ResourceHandleManager,
        *,
        key_func: KeyFunction = display_name_key,
        document_content_types: Iterable[str] = ("application/pdf",),
        image_content_type_prefix: str = "image/",
    ) -> None:
        """
        Args:
            handles: Manager that allocates and releases payload handles.
            key_func: Identity of an incoming file. Defaults to its display name.
            document_content_types: Content types classified as documents.
            image_content_type_prefix: Content type prefix classified as images.
        """
        self._handles = handles
        self._key_func = key_func
        self._document_types = frozenset(
            _normalize_content_type(t) for t in document_content_types
        )
        self._image_prefix = image_content_type_prefix.lower()
        self._by_key: OrderedDict[ArtifactKey, Artifact] = OrderedDict()
        self._key_by_id: dict[str, ArtifactKey] = {}

    def classify(self, file: IncomingFile) -> ArtifactKind | None:
        """
        Classify a file from its declared content type alone.

        Returns:
            The artifact kind, or None if the type is not accepted.
        """
        content_type = _normalize_content_type(file.content_type)
        if content_type.startswith(self._image_prefix):
            return ArtifactKind.IMAGE
        if content_type in self._document_types:
            return ArtifactKind.DOCUMENT
        return None

    def key_of(self, file: IncomingFile) -> ArtifactKey:
        return self._key_func(file)

    def admit(self, file: IncomingFile) -> Artifact:
        """
        Return the artifact for a file, creating it on first sight.

        An existing artifact with the same key is returned as is, without
        allocating a handle or copying the payload again.

        Args:
            file: Incoming file.

        Returns:
            The existing or newly created artifact.

        Raises:
            UnsupportedArtifactTypeError: If the content type is not accepted.
            AllocationError: If a handle cannot be allocated. The catalog is
                left unchanged.
        """
        kind = self.classify(file)
        if kind is None:
            msg = f"Unsupported content type for {file.display_name}"
            raise UnsupportedArtifactTypeError(msg, content_type=file.content_type)

        key = self._key_func(file)
        existing = self._by_key.get(key)
        if existing is not None:
            logger.debug("Artifact already cataloged", artifact_id=existing.artifact_id)
            return existing

        handle = self._handles.acquire(file.payload)
        artifact = Artifact(
            artifact_id=f"art_{uuid.uuid4().hex[:16]}",
            display_name=file.display_name,
            kind=kind,
            handle=handle,
            key=key,
            content_type=file.content_type,
            size=file.size,
            digest=hashlib.sha256(file.payload).hexdigest(),
        )
        self._by_key[key] = artifact
        self._key_by_id[artifact.artifact_id] = key
        logger.debug("Artifact admitted", artifact_id=artifact.artifact_id, kind=str(kind))
        return artifact

    def forget(self, artifact_id: str) -> Artifact:
        """
        Remove an artifact and release its handle.

        Args:
            artifact_id: Artifact to remove.

        Returns:
            The removed artifact.

        Raises:
            ArtifactNotFoundError: If the artifact is not in the catalog.
        """
        key = self._key_by_id.pop(artifact_id, None)
        if key is None:
            msg = "Artifact not in catalog"
            raise ArtifactNotFoundError(msg, artifact_id=artifact_id)

        artifact = self._by_key.pop(key)
        self._handles.release(artifact.handle)
        logger.debug("Artifact forgotten", artifact_id=artifact_id)
        return artifact

    def get(self, artifact_id: str) -> Artifact | None:
        key = self._key_by_id.get(artifact_id)
        if key is None:
            return None
        return self._by_key[key]

    def require(self, artifact_id: str) -> Artifact:
        """Like `get`, but raises ArtifactNotFoundError for unknown ids."""
        artifact = self.get(artifact_id)
        if artifact is None:
            msg = "Artifact not in catalog"
            raise ArtifactNotFoundError(msg, artifact_id=artifact_id)
        return artifact

    def find_by_key(self, key: ArtifactKey) -> Artifact | None:
        return self._by_key.get(key)

    def clear(self) -> int:
        """
        Forget every artifact, releasing all handles.

        Returns:
            Number of artifacts removed.
        """
        count = 0
        for artifact_id in list(self._key_by_id):
            self.forget(artifact_id)
            count += 1
        return count

    def __contains__(self, artifact_id: object) -> bool:
        return artifact_id in self._key_by_id

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[Artifact]:
        """Iterate artifacts in admission order."""
        return iter(list(self._by_key.values()))
