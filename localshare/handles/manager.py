"""
Resource handle manager.

Hands out revocable handles addressing artifact payloads, the in-process
equivalent of object URLs. The manager never interprets payload content.
"""

import uuid

import structlog

from localshare.exceptions import AllocationError
from localshare.handles.buffer import PayloadBuffer
from localshare.models.handle import Handle

logger = structlog.get_logger(__name__)
URL_SCHEME = "blob:localshare"


class ResourceHandleManager:
    """
    Allocates and releases payload handles.

    Release is idempotent: releasing a handle twice, or releasing a handle
    this manager never issued, is a no-op.
    """

    def __init__(self, max_handles: int | None = None, *, lock_memory: bool = False) -> None:
        """
        Args:
            max_handles: Maximum number of live handles. None means unbounded.
            lock_memory: Try to pin payload buffers in RAM.
        """
        self._max_handles = max_handles
        self._lock_memory = lock_memory
        self._buffers: dict[str, PayloadBuffer] = {}

    def acquire(self, payload: bytes | bytearray | memoryview) -> Handle:
        """
        Allocate a handle addressing a private copy of the payload.

        Args:
            payload: Raw artifact bytes.

        Returns:
            A new live handle.

        Raises:
            AllocationError: If the handle limit is reached or memory is refused.
        """
        if self._max_handles is not None and len(self._buffers) >= self._max_handles:
            msg = "Handle limit reached"
            raise AllocationError(msg, limit=self._max_handles)

        try:
            buffer = PayloadBuffer(payload, pin=self._lock_memory)
        except MemoryError as e:
            msg = "Could not allocate payload buffer"
            raise AllocationError(msg, limit=self._max_handles) from e

        handle_id = uuid.uuid4().hex
        self._buffers[handle_id] = buffer
        handle = Handle(handle_id=handle_id, url=f"{URL_SCHEME}/{handle_id}", size=len(buffer))
        logger.debug("Handle acquired", handle_id=handle_id, size=handle.size, live=len(self))
        return handle

    def release(self, handle: Handle) -> bool:
        """
        Invalidate a handle and wipe its payload.

        Args:
            handle: Handle to release.

        Returns:
            True if the handle was live, False if this call was a no-op.
        """
        buffer = self._buffers.pop(handle.handle_id, None)
        if buffer is None:
            logger.debug("Handle already released", handle_id=handle.handle_id)
            return False

        buffer.wipe()
        logger.debug("Handle released", handle_id=handle.handle_id, live=len(self))
        return True

    def read(self, handle: Handle) -> bytes:
        """
        Dereference a handle.

        Raises:
            RuntimeError: If the handle has been released. Reading a released
                handle is a programming error.
        """
        buffer = self._buffers.get(handle.handle_id)
        if buffer is None:
            msg = f"Handle has been released: {handle.url}"
            raise RuntimeError(msg)
        return bytes(buffer)

    def is_live(self, handle: Handle) -> bool:
        return handle.handle_id in self._buffers

    def release_all(self) -> int:
        """Release every live handle. Returns how many were released."""
        count = len(self._buffers)
        for buffer in self._buffers.values():
            buffer.wipe()
        self._buffers.clear()
        if count:
            logger.debug("Released all handles", count=count)
        return count

    def __len__(self) -> int:
        return len(self._buffers)

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, Handle) and self.is_live(handle)
