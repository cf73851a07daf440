""""3 out of 6" line coding used by wireless M-Bus T-mode.

Every 4-bit nibble is sent as a 6-bit code word with exactly three bits set.
Two data bytes therefore become three bytes on air. A trailing odd byte becomes
two bytes: its two code words followed by a 4-bit postamble.
"""

from __future__ import annotations

__all__ = [
    "DecodingError",
    "ENCODE_TABLE",
    "POSTAMBLE",
    "encode_block",
    "decode_block",
    "encode",
]

ENCODE_TABLE: tuple[int, ...] = (
    0x16, 0x0D, 0x0E, 0x0B, 0x1C, 0x19, 0x1A, 0x13,
    0x2C, 0x25, 0x26, 0x23, 0x34, 0x31, 0x32, 0x29,
)

_DECODE_TABLE: dict[int, int] = {code: nibble for nibble, code in enumerate(ENCODE_TABLE)}

POSTAMBLE = 0x14


class DecodingError(ValueError):
    """Raised when a 6-bit group is not a valid "3 out of 6" code word."""


def _decode_symbol(symbol: int) -> int:
    try:
        return _DECODE_TABLE[symbol]
    except KeyError:
        raise DecodingError(f"invalid 3-out-of-6 code word 0x{symbol:02X}") from None


def encode_block(data: bytes, last_byte: bool = False) -> bytes:
    """Encode two bytes into three, or with ``last_byte`` one byte into two."""
    needed = 1 if last_byte else 2
    if len(data) < needed:
        raise ValueError(f"need {needed} byte(s) to encode, got {len(data)}")

    first = data[0]
    high = ENCODE_TABLE[first >> 4]
    low = ENCODE_TABLE[first & 0x0F]
    if last_byte:
        next_high = POSTAMBLE
        next_low = 0
    else:
        second = data[1]
        next_high = ENCODE_TABLE[second >> 4]
        next_low = ENCODE_TABLE[second & 0x0F]

    out = [
        ((high << 2) | (low >> 4)) & 0xFF,
        ((low << 4) | (next_high >> 2)) & 0xFF,
    ]
    if not last_byte:
        out.append(((next_high << 6) | next_low) & 0xFF)
    return bytes(out)


def decode_block(encoded: bytes, last_byte: bool = False) -> bytes:
    """Decode three bytes into two, or with ``last_byte`` two bytes into one.

    With ``last_byte`` the postamble bits are ignored.
    """
    needed = 2 if last_byte else 3
    if len(encoded) < needed:
        raise DecodingError(f"need {needed} encoded bytes, got {len(encoded)}")

    b0, b1 = encoded[0], encoded[1]
    high = _decode_symbol((b0 & 0xFC) >> 2)
    low = _decode_symbol(((b1 & 0xF0) >> 4) | ((b0 & 0x03) << 4))

    if last_byte:
        return bytes([(high << 4) | low])

    b2 = encoded[2]
    next_high = _decode_symbol(((b2 & 0xC0) >> 6) | ((b1 & 0x0F) << 2))
    next_low = _decode_symbol(b2 & 0x3F)
    return bytes([(high << 4) | low, (next_high << 4) | next_low])


def encode(data: bytes) -> bytes:
    """Encode a whole byte string, adding the postamble after an odd final byte."""
    out = bytearray()
    for start in range(0, len(data) - 1, 2):
        out += encode_block(data[start:start + 2])
    if len(data) % 2:
        out += encode_block(data[-1:], last_byte=True)
    return bytes(out)