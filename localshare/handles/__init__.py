"""
Transient payload handles.

This module provides:
- Allocation and idempotent release of payload handles
- Payload buffers zeroed on release
"""

from localshare.handles.buffer import PayloadBuffer
from localshare.handles.manager import ResourceHandleManager

__all__ = [
    "PayloadBuffer",
    "ResourceHandleManager",
]
