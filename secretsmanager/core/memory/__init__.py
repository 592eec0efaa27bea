"""
Memory Security Module
======================

Best-effort wiping of key material held in mutable buffers.

WARNING:
- Python's memory model doesn't guarantee secure erasure
- These are best-effort mitigations
"""

from secretsmanager.core.memory.zeroization import (
    secure_zero,
    is_zeroed,
    zeroize,
)

__all__ = [
    "secure_zero",
    "is_zeroed",
    "zeroize",
]
