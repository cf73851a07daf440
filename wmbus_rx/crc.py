"""CRC-16 used by wireless M-Bus frames (polynomial 0x3D65, no reflection)."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = ["CRC_POLYNOM", "crc_update", "crc16"]

CRC_POLYNOM = 0x3D65


def crc_update(crc: int, byte: int) -> int:
    """Feed one byte into the CRC register and return the new register value."""
    for _ in range(8):
        if ((crc & 0x8000) >> 8) ^ (byte & 0x80):
            crc = ((crc << 1) ^ CRC_POLYNOM) & 0xFFFF
        else:
            crc = (crc << 1) & 0xFFFF
        byte = (byte << 1) & 0xFF
    return crc


def crc16(data: Iterable[int], crc: int = 0) -> int:
    """Run ``data`` through the CRC register starting at ``crc``.

    The raw register is returned; frames carry its bitwise complement.
    """
    for byte in data:
        crc = crc_update(crc, byte)
    return crc