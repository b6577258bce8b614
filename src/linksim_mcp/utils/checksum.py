"""16-bit additive checksum.

Each byte's unsigned value is added into a 16-bit register that wraps
around at 0x10000. The sum is order-independent, so it detects changed
byte values but not reordering or compensating changes.
"""

from __future__ import annotations


def checksum16(data: bytes | bytearray | memoryview) -> int:
    """Return the wraparound sum of ``data`` in the range 0-0xFFFF."""
    total = 0
    for byte in bytes(data):
        total = (total + byte) & 0xFFFF
    return total
