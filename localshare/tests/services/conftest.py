from collections.abc import Callable

import pytest

from localshare.handles.manager import ResourceHandleManager
from localshare.models.artifact import IncomingFile
from localshare.models.recipient import Availability
from localshare.services.catalog import ArtifactCatalog
from localshare.services.distribution import DistributionEngine
from localshare.services.registry import RecipientRegistry
from localshare.tests.services.constants import ALICE, BOB, CHARLIE


@pytest.fixture
def make_file() -> Callable[..., IncomingFile]:
    def _make(
        name: str = "report.pdf",
        content_type: str = "application/pdf",
        payload: bytes | None = None,
    ) -> IncomingFile:
        return IncomingFile(
            display_name=name,
            content_type=content_type,
            payload=payload if payload is not None else f"content of {name}".encode(),
        )

    return _make


@pytest.fixture
def handles() -> ResourceHandleManager:
    return ResourceHandleManager()


@pytest.fixture
def catalog(handles: ResourceHandleManager) -> ArtifactCatalog:
    return ArtifactCatalog(handles)


@pytest.fixture
def registry() -> RecipientRegistry:
    registry = RecipientRegistry()
    registry.provision(ALICE, "Alice (Desktop-A)")
    registry.provision(BOB, "Bob (Laptop-B)")
    registry.provision(CHARLIE, "Charlie (Tablet-C)", Availability.OFFLINE)
    return registry


@pytest.fixture
def engine(
    registry: RecipientRegistry, catalog: ArtifactCatalog, handles: ResourceHandleManager
) -> DistributionEngine:
    return DistributionEngine(registry, catalog, handles)
