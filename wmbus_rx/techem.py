"""Decoding of Techem water meter telegrams carried in wireless M-Bus frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .packet import packet_size

__all__ = [
    "MeterType",
    "TechemReading",
    "TECHEM_L_FIELD",
    "TECHEM_MANUFACTURER",
    "COLD_METER_ID",
    "WARM_METER_ID",
    "decode_techem",
    "format_packet",
]

TECHEM_L_FIELD = 0x2F
TECHEM_MANUFACTURER = (0x68, 0x50)

COLD_METER_ID = "00112233"
WARM_METER_ID = "22334455"

_MIN_LENGTH = 22


class MeterType(Enum):
    """Kind of water meter, taken from the device type byte."""

    COLD = "Cold"
    WARM = "Warm"
    UNKNOWN = "Unknown"

    @classmethod
    def from_code(cls, code: int) -> MeterType:
        return {0x72: cls.COLD, 0x62: cls.WARM}.get(code, cls.UNKNOWN)


@dataclass(frozen=True)
class TechemReading:
    """Consumption values reported by one Techem water meter telegram."""

    device_id: str
    meter_type: MeterType
    previous: float
    current: float

    @property
    def total(self) -> float:
        """Total consumption in cubic metres."""
        return self.previous + self.current

    @property
    def target(self) -> float:
        """Consumption up to the last billing date in cubic metres."""
        return self.previous


def _tenths(low: int, high: int) -> float:
    return (256.0 * high + low) / 10.0


def decode_techem(packet: bytes) -> TechemReading | None:
    """Decode a Techem water meter telegram.

    Returns None if the frame is not from a Techem meter of the expected size.
    Raises ValueError if it claims to be one but is too short.
    """
    if len(packet) < 4 or packet[0] != TECHEM_L_FIELD:
        return None
    if (packet[2], packet[3]) != TECHEM_MANUFACTURER:
        return None
    if len(packet) < _MIN_LENGTH:
        raise ValueError(f"Techem telegram truncated to {len(packet)} bytes")

    device_id = bytes(reversed(packet[4:8])).hex()
    return TechemReading(
        device_id=device_id,
        meter_type=MeterType.from_code(packet[9]),
        previous=_tenths(packet[16], packet[17]),
        current=_tenths(packet[20], packet[21]),
    )


def format_packet(packet: bytes) -> str:
    """Render the frame, as long as its L-field says, in upper-case hex."""
    if not packet:
        raise ValueError("empty packet")
    size = packet_size(packet[0])
    if len(packet) < size:
        raise ValueError(f"packet holds {len(packet)} bytes, L-field needs {size}")
    return packet[:size].hex().upper()