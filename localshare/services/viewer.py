"""
Viewer session.

Single-item focus state for displaying an artifact. Opening an artifact
takes a viewer hold so its handle outlives any revoke issued while it is
on screen.
"""

import dataclasses
from collections.abc import Callable

import structlog

from localshare.core.holds import HoldCounter
from localshare.handles.manager import ResourceHandleManager
from localshare.models.artifact import Artifact
from localshare.models.viewer import ViewerFocus
from localshare.services.catalog import ArtifactCatalog

logger = structlog.get_logger(__name__)


class ViewerSession:
    """
    Holds at most one open artifact and its zoom factor.

    Never mutates the catalog itself: closing hands the artifact id to
    `on_close`, which decides whether the artifact can now be released.
    """

    def __init__(
        self,
        catalog: ArtifactCatalog,
        handles: ResourceHandleManager,
        holds: HoldCounter,
        on_close: Callable[[str], object],
        *,
        default_zoom: float = 1.0,
        zoom_min: float = 0.2,
        zoom_max: float = 3.0,
        zoom_step: float = 0.2,
    ) -> None:
        self._catalog = catalog
        self._handles = handles
        self._holds = holds
        self._on_close = on_close
        self._default_zoom = default_zoom
        self._zoom_min = zoom_min
        self._zoom_max = zoom_max
        self._zoom_step = zoom_step
        self._focus: ViewerFocus | None = None

    @property
    def focus(self) -> ViewerFocus | None:
        return self._focus

    @property
    def is_open(self) -> bool:
        return self._focus is not None

    @property
    def zoom_factor(self) -> float:
        if self._focus is None:
            return self._default_zoom
        return self._focus.zoom_factor

    def open(self, artifact: Artifact) -> ViewerFocus:
        """
        Open an artifact, closing whatever was open before.

        Raises:
            ArtifactNotFoundError: If the artifact is no longer in the catalog.
        """
        artifact = self._catalog.require(artifact.artifact_id)
        previous = self._focus

        # New hold first: reopening the same artifact must not release it.
        self._holds.add(artifact.artifact_id)
        self._focus = ViewerFocus(artifact=artifact, zoom_factor=self._default_zoom)
        logger.debug("Viewer opened", artifact_id=artifact.artifact_id)
        if previous is not None:
            self._drop_hold(previous.artifact.artifact_id)
        return self._focus

    def close(self) -> None:
        """Close the viewer. Always succeeds; no-op if nothing is open."""
        if self._focus is None:
            return

        artifact_id = self._focus.artifact.artifact_id
        self._focus = None
        self._drop_hold(artifact_id)

    def _drop_hold(self, artifact_id: str) -> None:
        self._holds.done(artifact_id)
        logger.debug("Viewer hold dropped", artifact_id=artifact_id)
        self._on_close(artifact_id)

    def zoom_in(self) -> float:
        return self._zoom_by(self._zoom_step)

    def zoom_out(self) -> float:
        return self._zoom_by(-self._zoom_step)

    def _zoom_by(self, delta: float) -> float:
        if self._focus is None or not self._focus.artifact.is_image:
            return self.zoom_factor

        # Rounded so repeated steps land exactly on the 0.2 grid.
        zoom = round(self._focus.zoom_factor + delta, 2)
        zoom = min(max(zoom, self._zoom_min), self._zoom_max)
        self._focus = dataclasses.replace(self._focus, zoom_factor=zoom)
        return zoom

    @property
    def url(self) -> str | None:
        """Address of the open artifact's payload."""
        if self._focus is None:
            return None
        return self._focus.artifact.handle.url

    def read(self) -> bytes:
        """
        Payload of the open artifact.

        Raises:
            RuntimeError: If nothing is open.
        """
        if self._focus is None:
            raise RuntimeError("No artifact is open")
        return self._handles.read(self._focus.artifact.handle)
