"""
Memory Zeroization Utilities
============================

Explicit wiping of derived keys once an operation is done with them.

Security Properties:
- Explicit zeroization (no GC reliance)
- Exception-safe cleanup

Limitations:
- Python may hold internal copies of buffers passed to C libraries
- Immutable ``bytes`` and ``str`` objects cannot be wiped
"""

from __future__ import annotations

import ctypes
from contextlib import contextmanager
from typing import Iterator


def secure_zero(data: bytearray | memoryview) -> None:
    """
    Securely zero a byte buffer.

    Uses ctypes for direct memory access on ``bytearray`` and falls
    back to element-wise zeroing for ``memoryview``.

    Args:
        data: Mutable byte buffer to zero

    Security Notes:
        - This is best-effort; Python may have copies
        - Buffer must be mutable (bytearray, not bytes)
    """
    if len(data) == 0:
        return

    if isinstance(data, memoryview):
        for i in range(len(data)):
            data[i] = 0
        return

    addr = ctypes.addressof((ctypes.c_char * len(data)).from_buffer(data))
    ctypes.memset(addr, 0, len(data))


def is_zeroed(data: bytearray | memoryview) -> bool:
    """Return True if every byte of the buffer is zero."""
    return not any(data)


@contextmanager
def zeroize(*buffers: bytearray) -> Iterator[None]:
    """
    Context manager that zeroizes buffers on exit.

    Always zeroizes, whether exit is normal or exceptional.

    Usage:
        key = derive_key(password, salt, params)
        with zeroize(key):
            encrypt(data, key)
        # key is now zeroed
    """
    try:
        yield
    finally:
        for buf in buffers:
            secure_zero(buf)
