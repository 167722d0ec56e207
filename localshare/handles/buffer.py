"""Payload buffers that are wiped when their handle is released."""

import ctypes
import ctypes.util
import platform
import warnings
from collections.abc import Callable

_PLATFORM = platform.system()
_pin: Callable[[int, int], bool] | None = None
_unpin: Callable[[int, int], bool] | None = None

if _PLATFORM == "Windows":
    try:
        _kernel32 = ctypes.windll.kernel32
        _kernel32.VirtualLock.argtypes = [ctypes.c_void_p, ctypes.c_size_t]
        _kernel32.VirtualLock.restype = ctypes.c_bool
        _kernel32.VirtualUnlock.argtypes = [ctypes.c_void_p, ctypes.c_size_t]
        _kernel32.VirtualUnlock.restype = ctypes.c_bool

        def _pin(addr: int, size: int) -> bool:
            return bool(_kernel32.VirtualLock(addr, size))

        def _unpin(addr: int, size: int) -> bool:
            return bool(_kernel32.VirtualUnlock(addr, size))

    except (OSError, AttributeError):
        pass

elif _PLATFORM in ("Linux", "Darwin"):
    try:
        _libc = ctypes.CDLL(
            ctypes.util.find_library("c") or ("libc.so.6" if _PLATFORM == "Linux" else "libc.dylib"),
            use_errno=True,
        )
        _libc.mlock.argtypes = [ctypes.c_void_p, ctypes.c_size_t]
        _libc.mlock.restype = ctypes.c_int
        _libc.munlock.argtypes = [ctypes.c_void_p, ctypes.c_size_t]
        _libc.munlock.restype = ctypes.c_int

        def _pin(addr: int, size: int) -> bool:
            return _libc.mlock(addr, size) == 0

        def _unpin(addr: int, size: int) -> bool:
            return _libc.munlock(addr, size) == 0

    except (OSError, AttributeError):
        pass


def _address_of(data: bytearray) -> int:
    return ctypes.addressof((ctypes.c_char * len(data)).from_buffer(data))


def _wipe(data: bytearray) -> None:
    if not data:
        return
    try:
        ctypes.memset(_address_of(data), 0, len(data))
    except (TypeError, ValueError, BufferError) as exc:
        warnings.warn(f"ctypes.memset failed, wiping bytewise: {exc}", RuntimeWarning)
        data[:] = bytes(len(data))


class PayloadBuffer:
    """
    Private copy of an artifact payload.

    The copy is zeroed on `wipe()` (or garbage collection) so released
    artifacts leave no bytes behind. Optionally pinned in RAM.
    """

    __slots__ = ("_data", "_wiped", "_pinned")

    def __init__(self, payload: bytes | bytearray | memoryview, *, pin: bool = False) -> None:
        self._data = bytearray(payload)
        self._wiped = False
        self._pinned = False
        if pin and _pin is not None and self._data:
            try:
                self._pinned = _pin(_address_of(self._data), len(self._data))
            except (OSError, TypeError, ValueError):
                self._pinned = False

    def __del__(self) -> None:
        self.wipe()

    def wipe(self) -> None:
        """Zero the buffer and unpin it. Idempotent."""
        if self._wiped:
            return
        _wipe(self._data)
        if self._pinned and _unpin is not None:
            try:
                _unpin(_address_of(self._data), len(self._data))
            except (OSError, TypeError, ValueError):
                pass
        self._pinned = False
        self._wiped = True

    def view(self) -> memoryview:
        """Read-only view over the payload."""
        if self._wiped:
            raise RuntimeError("PayloadBuffer has been wiped")
        return memoryview(self._data).toreadonly()

    def __bytes__(self) -> bytes:
        return bytes(self.view())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        if self._wiped:
            return "PayloadBuffer(<wiped>)"
        pin_info = ", pinned" if self._pinned else ""
        return f"PayloadBuffer(<{len(self._data)} bytes{pin_info}>)"

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    @property
    def is_pinned(self) -> bool:
        return self._pinned
