import pytest

from wmbus_rx.packet import packet_size
from wmbus_rx.techem import (
    COLD_METER_ID,
    MeterType,
    TechemReading,
    decode_techem,
    format_packet,
)


def _packet(type_code=0x72, prev=(0, 0), curr=(0, 0)):
    data = bytearray(packet_size(0x2F))
    data[0] = 0x2F
    data[1] = 0x44
    data[2] = 0x68
    data[3] = 0x50
    data[4:8] = bytes([0x33, 0x22, 0x11, 0x00])
    data[9] = type_code
    data[16], data[17] = prev
    data[20], data[21] = curr
    return bytes(data)


def test_device_id_is_little_endian():
    reading = decode_techem(_packet())
    assert reading.device_id == COLD_METER_ID


@pytest.mark.parametrize(
    "code, expected",
    [(0x72, MeterType.COLD), (0x62, MeterType.WARM), (0x00, MeterType.UNKNOWN)],
)
def test_meter_type(code, expected):
    assert decode_techem(_packet(type_code=code)).meter_type is expected


def test_zero_consumption():
    reading = decode_techem(_packet())
    assert reading.previous == 0.0
    assert reading.current == 0.0
    assert reading.total == 0.0


def test_values_in_tenths():
    reading = decode_techem(_packet(prev=(10, 0), curr=(0, 1)))
    assert reading.previous == pytest.approx(1.0)
    assert reading.current == pytest.approx(25.6)


def test_total_and_target_invariants():
    reading = decode_techem(_packet(prev=(0x12, 0x34), curr=(0x56, 0x07)))
    assert reading.total == pytest.approx(reading.previous + reading.current)
    assert reading.target == reading.previous


def test_high_byte_weighs_more_than_low():
    low = decode_techem(_packet(prev=(1, 0))).previous
    high = decode_techem(_packet(prev=(0, 1))).previous
    assert high > low


def test_wrong_l_field_is_ignored():
    data = bytearray(_packet())
    data[0] = 0x2E
    assert decode_techem(bytes(data)) is None


def test_other_manufacturer_is_ignored():
    data = bytearray(_packet())
    data[3] = 0x51
    assert decode_techem(bytes(data)) is None


def test_truncated_techem_raises():
    with pytest.raises(ValueError):
        decode_techem(_packet()[:10])


def test_reading_is_frozen():
    reading = TechemReading("00112233", MeterType.WARM, 1.0, 2.0)
    with pytest.raises(AttributeError):
        reading.previous = 3.0
    assert reading.previous == 1.0
    assert reading.total == pytest.approx(3.0)
    assert reading.target == 1.0


def test_format_packet_uses_l_field_length():
    data = _packet() + b"\xAA\xBB"
    text = format_packet(data)
    assert len(text) == 2 * packet_size(0x2F)
    assert bytes.fromhex(text) == _packet()
    assert text == text.upper()


def test_format_packet_pads_small_bytes():
    data = bytes([0x00] + [0x05] * (packet_size(0) - 1))
    assert format_packet(data).startswith("0005")


def test_format_packet_short_raises():
    with pytest.raises(ValueError):
        format_packet(_packet()[:20])


def test_format_packet_empty_raises():
    with pytest.raises(ValueError):
        format_packet(b"")