import pytest

from wmbus_rx.cc1101 import CC1101, RXFIFO, AccessMode, Register, SpiBus, Strobe
from wmbus_rx.crc import crc16
from wmbus_rx.packet import (
    FIXED_PACKET_LENGTH,
    INFINITE_PACKET_LENGTH,
    MAX_FIXED_LENGTH,
    RX_AVAILABLE_FIFO,
    RX_FIFO_START_THRESHOLD,
    RX_FIFO_THRESHOLD,
    PacketCodingError,
    PacketCrcError,
    byte_size,
    packet_size,
)
from wmbus_rx.receiver import PacketFormat, Receiver, RxStateError
from wmbus_rx.three_of_six import encode

FIFO_READ = RXFIFO | AccessMode.READ_BURST


class RadioBus(SpiBus):
    """Answers SPI traffic like a transceiver holding ``fifo`` in its RX FIFO."""

    def __init__(self, fifo=b"", status=0x00):
        self.fifo = bytearray(fifo)
        self.status = status
        self.transactions = []
        self._current = []

    def select(self):
        self._current = []

    def deselect(self):
        self.transactions.append(tuple(self._current))

    def miso_high(self):
        return False

    def transfer(self, byte):
        self._current.append(byte)
        if len(self._current) > 1 and self._current[0] == FIFO_READ:
            return self.fifo.pop(0)
        return self.status

    def delay_us(self, microseconds):
        pass

    def prepare_reset(self):
        pass

    def writes(self):
        return [t for t in self.transactions if len(t) == 2 and t[0] < 0x30]

    def strobes(self):
        return [t[0] for t in self.transactions if len(t) == 1 and t[0] < 0x40]


def make_payload(l_field):
    return bytes([l_field]) + bytes((i * 7 + 3) & 0xFF for i in range(l_field))


def build_frame(payload):
    blocks = [payload[:10]] + [payload[i:i + 16] for i in range(10, len(payload), 16)]
    out = bytearray()
    for block in blocks:
        out += block
        out += (~crc16(block) & 0xFFFF).to_bytes(2, "big")
    return bytes(out)


def make_receiver(fifo, status=0x00):
    bus = RadioBus(fifo, status)
    return bus, Receiver(CC1101(bus))


def receive(receiver):
    receiver.start()
    receiver.on_fifo_threshold()
    while receiver.bytes_left > RX_AVAILABLE_FIFO - 1:
        receiver.on_fifo_threshold()
    receiver.on_packet_received()
    return receiver.stop()


@pytest.mark.parametrize("l_field", [10, 25, 60, 150, 255])
def test_receives_and_decodes_frame(l_field):
    frame = build_frame(make_payload(l_field))
    assert len(frame) == packet_size(l_field)
    encoded = encode(frame)
    bus, receiver = make_receiver(encoded)

    assert receive(receiver) == frame
    assert receiver.complete
    assert receiver.received == encoded
    assert receiver.length == len(encoded)
    assert len(bus.fifo) == 0


def test_start_configures_and_enters_rx():
    bus, receiver = make_receiver(b"")
    receiver.start()
    assert bus.writes() == [
        (Register.FIFOTHR, RX_FIFO_START_THRESHOLD),
        (Register.PKTCTRL0, INFINITE_PACKET_LENGTH),
    ]
    assert bus.strobes() == [Strobe.SFRX, Strobe.SRX]
    assert receiver.active
    assert receiver.format is PacketFormat.INFINITE


def test_start_fails_when_not_idle():
    bus, receiver = make_receiver(b"", status=0x10)
    with pytest.raises(RxStateError):
        receiver.start()
    assert bus.strobes() == [Strobe.SIDLE]
    assert not receiver.active


def test_short_frame_switches_to_fixed_length_at_header():
    frame = build_frame(make_payload(10))
    bus, receiver = make_receiver(encode(frame))
    receiver.start()
    receiver.on_fifo_threshold()

    expected_length = byte_size(packet_size(10))
    assert receiver.length_field == 10
    assert receiver.format is PacketFormat.FIXED
    assert receiver.bytes_left == expected_length - 3
    assert bus.writes()[2:] == [
        (Register.PKTLEN, expected_length),
        (Register.PKTCTRL0, FIXED_PACKET_LENGTH),
        (Register.FIFOTHR, RX_FIFO_THRESHOLD),
    ]


def test_long_frame_stays_infinite_until_fewer_than_256_left():
    frame = build_frame(make_payload(255))
    bus, receiver = make_receiver(encode(frame))
    receiver.start()
    receiver.on_fifo_threshold()

    assert receiver.length >= MAX_FIXED_LENGTH
    assert receiver.format is PacketFormat.INFINITE
    assert (Register.PKTLEN, receiver.length % MAX_FIXED_LENGTH) in bus.writes()
    assert (Register.PKTCTRL0, FIXED_PACKET_LENGTH) not in bus.writes()

    while receiver.bytes_left >= MAX_FIXED_LENGTH:
        receiver.on_fifo_threshold()
        assert receiver.format is PacketFormat.INFINITE
    receiver.on_fifo_threshold()
    assert receiver.format is PacketFormat.FIXED
    assert bus.writes()[-1] == (Register.PKTCTRL0, FIXED_PACKET_LENGTH)


def test_threshold_reads_leave_one_byte_in_fifo():
    frame = build_frame(make_payload(60))
    bus, receiver = make_receiver(encode(frame))
    receiver.start()
    receiver.on_fifo_threshold()
    before = receiver.bytes_left
    receiver.on_fifo_threshold()
    assert before - receiver.bytes_left == RX_AVAILABLE_FIFO - 1
    assert len(receiver.received) == 3 + RX_AVAILABLE_FIFO - 1


def test_crc_error_is_reported():
    frame = bytearray(build_frame(make_payload(10)))
    frame[4] ^= 0x01
    encoded = encode(bytes(frame))
    bus, receiver = make_receiver(encoded)
    with pytest.raises(PacketCrcError) as excinfo:
        receive(receiver)
    assert not isinstance(excinfo.value, PacketCodingError)
    assert receiver.received == encoded
    assert len(bus.fifo) == 0


def test_coding_error_in_body_is_reported():
    encoded = bytearray(encode(build_frame(make_payload(10))))
    encoded[5] = 0x00
    bus, receiver = make_receiver(bytes(encoded))
    with pytest.raises(PacketCodingError) as excinfo:
        receive(receiver)
    assert not isinstance(excinfo.value, PacketCrcError)
    assert receiver.received == bytes(encoded)
    assert len(bus.fifo) == 0


def test_invalid_header_aborts_reception():
    bus, receiver = make_receiver(b"\x00\x00\x00" + bytes(40))
    receiver.start()
    with pytest.raises(PacketCodingError):
        receiver.on_fifo_threshold()
    assert not receiver.active
    assert bus.strobes()[-1] == Strobe.SIDLE


def test_stop_fails_when_not_idle():
    frame = build_frame(make_payload(10))
    bus, receiver = make_receiver(encode(frame))
    receiver.start()
    receiver.on_fifo_threshold()
    receiver.on_packet_received()
    bus.status = 0x20
    with pytest.raises(RxStateError):
        receiver.stop()
    assert bus.strobes()[-1] == Strobe.SIDLE


def test_handlers_ignored_before_start():
    bus, receiver = make_receiver(bytes(10))
    receiver.on_fifo_threshold()
    receiver.on_packet_received()
    assert bus.transactions == []
    assert len(bus.fifo) == 10
    assert not receiver.complete


def test_handlers_ignored_after_stop():
    frame = build_frame(make_payload(10))
    bus, receiver = make_receiver(encode(frame) + bytes(5))
    assert receive(receiver) == frame
    count = len(bus.transactions)
    receiver.on_packet_received()
    receiver.on_fifo_threshold()
    assert len(bus.transactions) == count
    assert len(bus.fifo) == 5


def test_restart_clears_previous_frame():
    first = build_frame(make_payload(10))
    second = build_frame(make_payload(25))
    bus, receiver = make_receiver(encode(first) + encode(second))
    assert receive(receiver) == first
    assert receive(receiver) == second
    assert receiver.length_field == 25