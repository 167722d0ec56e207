from dataclasses import dataclass

from localshare.models.artifact import Artifact


@dataclass(frozen=True, kw_only=True)
class ViewerFocus:
    """
    The artifact currently open for display.

    `zoom_factor` only means something for images.
    """

    artifact: Artifact
    zoom_factor: float = 1.0
