"""Register-level access to a CC1101 sub-GHz transceiver over SPI."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from enum import IntEnum

__all__ = [
    "SpiBus",
    "Register",
    "StatusRegister",
    "Strobe",
    "AccessMode",
    "CC1101",
    "PATABLE",
    "TXFIFO",
    "RXFIFO",
]

PATABLE = 0x3E
TXFIFO = 0x3F
RXFIFO = 0x3F


class SpiBus(ABC):
    """The SPI lines a CC1101 is wired to."""

    @abstractmethod
    def select(self) -> None:
        """Assert chip select (drive CSn low)."""

    @abstractmethod
    def deselect(self) -> None:
        """Release chip select (drive CSn high)."""

    @abstractmethod
    def miso_high(self) -> bool:
        """Return True while the MISO line reads high."""

    @abstractmethod
    def transfer(self, byte: int) -> int:
        """Clock one byte out and return the byte clocked in."""

    def delay_us(self, microseconds: int) -> None:
        """Wait for the given number of microseconds."""
        time.sleep(microseconds / 1_000_000)

    @abstractmethod
    def prepare_reset(self) -> None:
        """Drive MOSI low and SCK high ahead of the manual power-on reset."""


class AccessMode(IntEnum):
    """Bits OR-ed into the header byte to select the kind of access."""

    WRITE_BURST = 0x40
    READ_SINGLE = 0x80
    READ_BURST = 0xC0
    CONFIG_REGISTER = 0x80
    STATUS_REGISTER = 0xC0


class Strobe(IntEnum):
    """Command strobes."""

    SRES = 0x30
    SFSTXON = 0x31
    SXOFF = 0x32
    SCAL = 0x33
    SRX = 0x34
    STX = 0x35
    SIDLE = 0x36
    SWOR = 0x38
    SPWD = 0x39
    SFRX = 0x3A
    SFTX = 0x3B
    SWORRST = 0x3C
    SNOP = 0x3D


class Register(IntEnum):
    """Configuration registers."""

    IOCFG2 = 0x00
    IOCFG1 = 0x01
    IOCFG0 = 0x02
    FIFOTHR = 0x03
    SYNC1 = 0x04
    SYNC0 = 0x05
    PKTLEN = 0x06
    PKTCTRL1 = 0x07
    PKTCTRL0 = 0x08
    ADDR = 0x09
    CHANNR = 0x0A
    FSCTRL1 = 0x0B
    FSCTRL0 = 0x0C
    FREQ2 = 0x0D
    FREQ1 = 0x0E
    FREQ0 = 0x0F
    MDMCFG4 = 0x10
    MDMCFG3 = 0x11
    MDMCFG2 = 0x12
    MDMCFG1 = 0x13
    MDMCFG0 = 0x14
    DEVIATN = 0x15
    MCSM2 = 0x16
    MCSM1 = 0x17
    MCSM0 = 0x18
    FOCCFG = 0x19
    BSCFG = 0x1A
    AGCCTRL2 = 0x1B
    AGCCTRL1 = 0x1C
    AGCCTRL0 = 0x1D
    WOREVT1 = 0x1E
    WOREVT0 = 0x1F
    WORCTRL = 0x20
    FREND1 = 0x21
    FREND0 = 0x22
    FSCAL3 = 0x23
    FSCAL2 = 0x24
    FSCAL1 = 0x25
    FSCAL0 = 0x26
    RCCTRL1 = 0x27
    RCCTRL0 = 0x28
    FSTEST = 0x29
    PTEST = 0x2A
    AGCTEST = 0x2B
    TEST2 = 0x2C
    TEST1 = 0x2D
    TEST0 = 0x2E


class StatusRegister(IntEnum):
    """Read-only status registers (read with the burst bit set)."""

    PARTNUM = 0x30
    VERSION = 0x31
    FREQEST = 0x32
    LQI = 0x33
    RSSI = 0x34
    MARCSTATE = 0x35
    WORTIME1 = 0x36
    WORTIME0 = 0x37
    PKTSTATUS = 0x38
    VCO_VC_DAC = 0x39
    TXBYTES = 0x3A
    RXBYTES = 0x3B
    RCCTRL1_STATUS = 0x3C
    RCCTRL0_STATUS = 0x3D


# Wireless M-Bus T-mode reception at 868.95 MHz.
_TMODE_SETTINGS: tuple[tuple[Register, int], ...] = (
    (Register.IOCFG2, 0x06),
    (Register.IOCFG1, 0x2E),
    (Register.IOCFG0, 0x00),
    (Register.FIFOTHR, 0x07),
    (Register.SYNC1, 0x54),
    (Register.SYNC0, 0x3D),
    (Register.PKTLEN, 0xFF),
    (Register.PKTCTRL1, 0x00),
    (Register.PKTCTRL0, 0x00),
    (Register.ADDR, 0x00),
    (Register.CHANNR, 0x00),
    (Register.FSCTRL1, 0x08),
    (Register.FSCTRL0, 0x00),
    (Register.FREQ2, 0x21),
    (Register.FREQ1, 0x6B),
    (Register.FREQ0, 0xD0),
    (Register.MDMCFG4, 0x5C),
    (Register.MDMCFG3, 0x04),
    (Register.MDMCFG2, 0x05),
    (Register.MDMCFG1, 0x22),
    (Register.MDMCFG0, 0xF8),
    (Register.DEVIATN, 0x44),
    (Register.MCSM2, 0x07),
    (Register.MCSM1, 0x00),
    (Register.MCSM0, 0x18),
    (Register.FOCCFG, 0x2E),
    (Register.BSCFG, 0xBF),
    (Register.AGCCTRL2, 0x43),
    (Register.AGCCTRL1, 0x09),
    (Register.AGCCTRL0, 0xB5),
    (Register.WOREVT1, 0x87),
    (Register.WOREVT0, 0x6B),
    (Register.WORCTRL, 0xFB),
    (Register.FREND1, 0xB6),
    (Register.FREND0, 0x10),
    (Register.FSCAL3, 0xEA),
    (Register.FSCAL2, 0x2A),
    (Register.FSCAL1, 0x00),
    (Register.FSCAL0, 0x1F),
    (Register.RCCTRL1, 0x41),
    (Register.RCCTRL0, 0x00),
    (Register.FSTEST, 0x59),
    (Register.PTEST, 0x7F),
    (Register.AGCTEST, 0x3F),
    (Register.TEST2, 0x81),
    (Register.TEST1, 0x35),
    (Register.TEST0, 0x09),
)


class CC1101:
    """A CC1101 transceiver reached through an SpiBus."""

    def __init__(self, bus: SpiBus) -> None:
        self.bus = bus

    def _wait_miso(self) -> None:
        while self.bus.miso_high():
            pass

    @contextmanager
    def _selected(self) -> Iterator[None]:
        self.bus.select()
        try:
            yield
        finally:
            self.bus.deselect()

    def write_reg(self, address: int, value: int) -> None:
        """Write one configuration register."""
        with self._selected():
            self._wait_miso()
            self.bus.transfer(address & 0xFF)
            self.bus.transfer(value & 0xFF)

    def cmd_strobe(self, command: int) -> None:
        """Send a command strobe."""
        with self._selected():
            self.bus.delay_us(5)
            self._wait_miso()
            self.bus.transfer(command & 0xFF)
            self.bus.delay_us(5)

    def read_reg(self, address: int, reg_type: int) -> int:
        """Read one register; ``reg_type`` is an AccessMode read bit pattern."""
        with self._selected():
            self._wait_miso()
            self.bus.transfer((address | reg_type) & 0xFF)
            return self.bus.transfer(0x00) & 0xFF

    def read_burst(self, address: int, length: int) -> bytes:
        """Read ``length`` consecutive bytes starting at ``address``."""
        if not 0 <= length <= 0xFF:
            raise ValueError(f"burst length out of range: {length}")
        with self._selected():
            self.bus.delay_us(5)
            self._wait_miso()
            self.bus.transfer((address | AccessMode.READ_BURST) & 0xFF)
            data = bytes(self.bus.transfer(0x00) & 0xFF for _ in range(length))
            self.bus.delay_us(2)
        return data

    def init_registers(self) -> None:
        """Load the wireless M-Bus T-mode receive configuration."""
        for register, value in _TMODE_SETTINGS:
            self.write_reg(register, value)

    def reset(self) -> None:
        """Perform the manual power-on reset sequence followed by SRES."""
        self.bus.deselect()
        self.bus.delay_us(3)
        self.bus.prepare_reset()

        self.bus.select()
        self.bus.delay_us(3)
        self.bus.deselect()
        self.bus.delay_us(45)

        self.bus.select()
        self._wait_miso()
        self.bus.transfer(Strobe.SRES)
        self._wait_miso()
        self.bus.deselect()