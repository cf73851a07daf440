"""Interrupt-driven reception of wireless M-Bus T-mode frames with a CC1101."""

from __future__ import annotations

from enum import Enum

from .cc1101 import CC1101, RXFIFO, AccessMode, Register, Strobe
from .packet import (
    FIXED_PACKET_LENGTH,
    INFINITE_PACKET_LENGTH,
    MAX_FIXED_LENGTH,
    RX_AVAILABLE_FIFO,
    RX_FIFO_START_THRESHOLD,
    RX_FIFO_THRESHOLD,
    PacketCodingError,
    byte_size,
    decode_tmode,
    packet_size,
)
from .three_of_six import DecodingError, decode_block

__all__ = ["RxStateError", "PacketFormat", "Receiver"]

_STATE_MASK = 0x70
_HEADER_BYTES = 3


class RxStateError(RuntimeError):
    """The transceiver was not idle when reception started or finished."""


class PacketFormat(Enum):
    """Packet length mode the transceiver is running in."""

    INFINITE = 0
    FIXED = 1


class Receiver:
    """Collects one encoded frame from the RX FIFO and decodes it.

    Wire the GDO0 rising edge (FIFO threshold) to ``on_fifo_threshold`` and
    the GDO2 falling edge (end of packet) to ``on_packet_received``. The
    handlers do nothing unless reception has been started.
    """

    def __init__(self, radio: CC1101) -> None:
        self.radio = radio
        self.active = False
        self._reset_state()

    def _reset_state(self) -> None:
        self.length_field = 0
        self.length = 0
        self.bytes_left = 0
        self.format = PacketFormat.INFINITE
        self.complete = False
        self._awaiting_header = True
        self._buffer = bytearray()

    @property
    def received(self) -> bytes:
        """Encoded bytes read from the FIFO so far."""
        return bytes(self._buffer)

    def _ensure_idle(self) -> None:
        status = self.radio.read_reg(Strobe.SNOP, AccessMode.READ_SINGLE)
        if status & _STATE_MASK:
            self.radio.cmd_strobe(Strobe.SIDLE)
            raise RxStateError(f"transceiver not idle (status 0x{status:02X})")

    def start(self) -> None:
        """Arm the transceiver for a new frame and enter RX."""
        self._reset_state()
        self.radio.write_reg(Register.FIFOTHR, RX_FIFO_START_THRESHOLD)
        self.radio.write_reg(Register.PKTCTRL0, INFINITE_PACKET_LENGTH)
        self._ensure_idle()
        self.radio.cmd_strobe(Strobe.SFRX)
        self.active = True
        self.radio.cmd_strobe(Strobe.SRX)

    def on_fifo_threshold(self) -> None:
        """Handle the RX FIFO threshold interrupt."""
        if not self.active:
            return
        if self._awaiting_header:
            self._read_header()
            return

        if self.bytes_left < MAX_FIXED_LENGTH and self.format is PacketFormat.INFINITE:
            self.radio.write_reg(Register.PKTCTRL0, FIXED_PACKET_LENGTH)
            self.format = PacketFormat.FIXED

        # Leave one byte in the FIFO (CC1101 errata).
        chunk = RX_AVAILABLE_FIFO - 1
        self._buffer += self.radio.read_burst(RXFIFO, chunk)
        self.bytes_left -= chunk

    def _read_header(self) -> None:
        header = self.radio.read_burst(RXFIFO, _HEADER_BYTES)
        self._buffer += header
        try:
            self.length_field = decode_block(header)[0]
        except DecodingError as exc:
            self.active = False
            self.radio.cmd_strobe(Strobe.SIDLE)
            raise PacketCodingError(f"invalid frame header: {exc}") from exc

        self.length = byte_size(packet_size(self.length_field))
        if self.length < MAX_FIXED_LENGTH:
            self.radio.write_reg(Register.PKTLEN, self.length)
            self.radio.write_reg(Register.PKTCTRL0, FIXED_PACKET_LENGTH)
            self.format = PacketFormat.FIXED
        else:
            self.radio.write_reg(Register.PKTLEN, self.length % MAX_FIXED_LENGTH)

        self.bytes_left = self.length - _HEADER_BYTES
        self._awaiting_header = False
        self.radio.write_reg(Register.FIFOTHR, RX_FIFO_THRESHOLD)

    def on_packet_received(self) -> None:
        """Handle the end-of-packet interrupt: drain the FIFO."""
        if not self.active:
            return
        remaining = max(self.bytes_left, 0) & 0xFF
        self._buffer += self.radio.read_burst(RXFIFO, remaining)
        self.complete = True

    def stop(self) -> bytes:
        """Stop listening and return the decoded frame.

        Raises RxStateError, PacketCodingError or PacketCrcError.
        """
        self.active = False
        self._ensure_idle()
        return decode_tmode(bytes(self._buffer), packet_size(self.length_field))