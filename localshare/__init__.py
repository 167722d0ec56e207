"""
LocalShare.

In-process distribution of documents and images from one distributing party
to a set of recipients, with per-recipient visibility, deduplication and
exactly-once release of the handles backing each artifact.

Example:
    ```python
    from localshare import DistributionEngine, IncomingFile, RecipientRegistry

    registry = RecipientRegistry()
    registry.provision("user-1", "Alice (Desktop-A)")
    registry.provision("user-2", "Bob (Laptop-B)")

    with DistributionEngine(registry) as engine:
        report = IncomingFile(
            display_name="report.pdf",
            content_type="application/pdf",
            payload=Path("report.pdf").read_bytes(),
        )
        result = engine.share({"user-1", "user-2"}, [report])
        print(result.summary())

        viewer = engine.open_viewer(result.shared[0].artifact_id)
        data = viewer.read()
        viewer.close()
    ```
"""

from localshare.config import LocalShareConfig
from localshare.exceptions import (
    AllocationError,
    ArtifactNotFoundError,
    InvalidRequestError,
    LocalShareError,
    NotFoundError,
    RecipientNotFoundError,
    UnsupportedArtifactTypeError,
)
from localshare.handles.manager import ResourceHandleManager
from localshare.models.artifact import (
    Artifact,
    ArtifactKind,
    IncomingFile,
    content_digest_key,
    display_name_key,
)
from localshare.models.recipient import Availability, Recipient
from localshare.models.share import SharedArtifact, ShareResult
from localshare.services.catalog import ArtifactCatalog
from localshare.services.distribution import DistributionEngine
from localshare.services.registry import RecipientRegistry
from localshare.services.viewer import ViewerSession

__version__ = "0.1.0"

__all__ = [
    # Main engine
    "DistributionEngine",
    "LocalShareConfig",
    # Services
    "ArtifactCatalog",
    "RecipientRegistry",
    "ResourceHandleManager",
    "ViewerSession",
    # Models
    "Artifact",
    "ArtifactKind",
    "Availability",
    "IncomingFile",
    "Recipient",
    "ShareResult",
    "SharedArtifact",
    "content_digest_key",
    "display_name_key",
    # Exceptions
    "LocalShareError",
    "InvalidRequestError",
    "UnsupportedArtifactTypeError",
    "NotFoundError",
    "ArtifactNotFoundError",
    "RecipientNotFoundError",
    "AllocationError",
]
