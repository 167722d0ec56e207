"""
LocalShare configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class LocalShareConfig:
    """
    Attributes:
        max_handles: Maximum number of live resource handles. None means unbounded.
        lock_handle_memory: Try to mlock payload buffers so they are never swapped.
        document_content_types: Declared content types classified as documents.
        image_content_type_prefix: Content type prefix classified as images.
        default_zoom: Zoom factor a viewer starts at.
        zoom_min: Lowest zoom factor a viewer allows.
        zoom_max: Highest zoom factor a viewer allows.
        zoom_step: Amount a single zoom in/out changes the factor by.
    """

    max_handles: int | None = None
    lock_handle_memory: bool = False
    document_content_types: tuple[str, ...] = ("application/pdf",)
    image_content_type_prefix: str = "image/"
    default_zoom: float = 1.0
    zoom_min: float = 0.2
    zoom_max: float = 3.0
    zoom_step: float = 0.2

    def __post_init__(self) -> None:
        if self.max_handles is not None and self.max_handles <= 0:
            msg = "max_handles must be positive"
            raise ValueError(msg)
        if not self.image_content_type_prefix:
            msg = "image_content_type_prefix must not be empty"
            raise ValueError(msg)
        if self.zoom_step <= 0:
            msg = "zoom_step must be positive"
            raise ValueError(msg)
        if not 0 < self.zoom_min <= self.zoom_max:
            msg = "zoom_min must be positive and not above zoom_max"
            raise ValueError(msg)
        if not self.zoom_min <= self.default_zoom <= self.zoom_max:
            msg = "default_zoom must lie within [zoom_min, zoom_max]"
            raise ValueError(msg)
