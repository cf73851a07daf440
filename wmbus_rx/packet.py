"""Wireless M-Bus T-mode frame sizing and decoding."""

from __future__ import annotations

from .crc import crc_update
from .three_of_six import DecodingError, decode_block

__all__ = [
    "PacketError",
    "PacketCodingError",
    "PacketCrcError",
    "RX_FIFO_THRESHOLD",
    "RX_FIFO_START_THRESHOLD",
    "RX_FIFO_SIZE",
    "RX_OCCUPIED_FIFO",
    "RX_AVAILABLE_FIFO",
    "FIXED_PACKET_LENGTH",
    "INFINITE_PACKET_LENGTH",
    "MAX_FIXED_LENGTH",
    "packet_size",
    "byte_size",
    "decode_tmode",
]

RX_FIFO_THRESHOLD = 0x07
RX_FIFO_START_THRESHOLD = 0x00
RX_FIFO_SIZE = 64
RX_OCCUPIED_FIFO = 32
RX_AVAILABLE_FIFO = 32

FIXED_PACKET_LENGTH = 0x00
INFINITE_PACKET_LENGTH = 0x02
MAX_FIXED_LENGTH = 256


class PacketError(Exception):
    """Base class for frame decoding failures."""


class PacketCodingError(PacketError):
    """The frame holds an invalid "3 out of 6" code word or is truncated."""


class PacketCrcError(PacketError):
    """A block CRC does not match its data."""


def packet_size(l_field: int) -> int:
    """Total decoded frame length, CRC fields included, for an L-field value."""
    if not 0 <= l_field <= 0xFF:
        raise ValueError(f"L-field out of range: {l_field}")
    blocks = 2 if l_field < 26 else (l_field - 26) // 16 + 3
    return l_field + 1 + 2 * blocks


def byte_size(packet_size: int) -> int:
    """Number of encoded bytes on air for a decoded frame of ``packet_size`` bytes."""
    if packet_size < 0:
        raise ValueError(f"negative packet size: {packet_size}")
    return (3 * packet_size) // 2 + packet_size % 2


def _crc_bytes(crc: int) -> tuple[int, int]:
    inverted = ~crc & 0xFFFF
    return inverted >> 8, inverted & 0xFF


def decode_tmode(encoded: bytes, packet_size: int) -> bytes:
    """Decode a T-mode frame and verify every block CRC.

    Returns the decoded frame of ``packet_size`` bytes, CRC fields included.
    Raises PacketCodingError or PacketCrcError.
    """
    packet = bytearray()
    remaining = packet_size
    decoded_count = 0
    crc = 0
    pos = 0

    try:
        while remaining:
            if remaining == 1:
                (byte,) = decode_block(encoded[pos:pos + 2], last_byte=True)
                packet.append(byte)
                remaining -= 1
                if _crc_bytes(crc)[1] != byte:
                    raise PacketCrcError("CRC low byte mismatch at end of frame")
                continue

            first, second = decode_block(encoded[pos:pos + 3])
            packet += bytes((first, second))
            remaining -= 2
            decoded_count += 2

            if remaining == 0:
                crc_field = True
            elif decoded_count > 10:
                crc_field = (decoded_count - 12) % 18 == 0
            else:
                crc_field = False

            if crc_field:
                if (first, second) != _crc_bytes(crc):
                    raise PacketCrcError(f"block CRC mismatch ending at byte {decoded_count}")
                crc = 0
            elif remaining == 1:
                crc = crc_update(crc, first)
                if _crc_bytes(crc)[0] != second:
                    raise PacketCrcError("CRC high byte mismatch at end of frame")
            else:
                crc = crc_update(crc_update(crc, first), second)

            pos += 3
    except DecodingError as exc:
        raise PacketCodingError(str(exc)) from exc

    return bytes(packet)