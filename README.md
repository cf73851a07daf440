# wmbus-rx

Receive and decode Wireless M-Bus T-mode telegrams.

The package turns the encoded bytes read from a CC1101 transceiver's RX FIFO
into CRC-checked M-Bus frames, and reads the consumption values sent by
Techem water meters.

## What is inside

| Module | Purpose |
| --- | --- |
| `wmbus_rx.three_of_six` | T-mode "3 out of 6" line coding: `encode`, `encode_block`, `decode_block`. An invalid code word raises `DecodingError` (a `ValueError`). |
| `wmbus_rx.crc` | The M-Bus CRC-16 (polynomial `0x3D65`): `crc_update` feeds one byte, `crc16` a sequence of bytes. Both return the raw register; frames carry its complement. |
| `wmbus_rx.packet` | Frame geometry and decoding: `packet_size` (decoded length from the L-field, CRC fields included), `byte_size` (encoded length on air) and `decode_tmode`, which raises `PacketCodingError` or `PacketCrcError` (both `PacketError`). |
| `wmbus_rx.cc1101` | Register-level control of a CC1101 (`CC1101`) over any object implementing the `SpiBus` interface; register, strobe and access-mode names in `Register`, `StatusRegister`, `Strobe` and `AccessMode`. |
| `wmbus_rx.receiver` | `Receiver`, the interrupt-driven reception state machine. A radio not in IDLE raises `RxStateError`. |
| `wmbus_rx.techem` | `decode_techem` turns a decoded frame into a `TechemReading` (device id, `MeterType`, previous and current consumption, `total` and `target`); `format_packet` renders a frame as upper-case hex. |
| `wmbus_rx.cli` | The `wmbus-rx` command. |

## Installation

```
pip install .
```

No third-party libraries are required.

## Decoding a frame

```python
from wmbus_rx.packet import PacketError, decode_tmode, packet_size
from wmbus_rx.techem import decode_techem, format_packet
from wmbus_rx.three_of_six import decode_block

encoded = ...                          # bytes as read from the RX FIFO
l_field = decode_block(encoded[:3])[0] # first decoded byte is the L-field
size = packet_size(l_field)            # decoded bytes, CRC fields included

try:
    packet = decode_tmode(encoded, size)
except PacketError as exc:
    print("bad frame:", exc)
else:
    print(format_packet(packet))
    reading = decode_techem(packet)    # None unless it is a Techem telegram
    if reading is not None:
        print(reading.device_id, reading.meter_type.value, reading.total)
```

`byte_size(size)` gives how many encoded bytes make up such a frame.
`encode` produces the on-air form of a byte string, adding the postamble
after an odd final byte.

`decode_techem` accepts frames whose L-field is `0x2F` and whose
manufacturer bytes are `0x68 0x50`; it returns `None` for other frames and
raises `ValueError` if such a frame is shorter than 22 bytes. Consumption
values are in cubic metres.

## Talking to a CC1101

`CC1101` does not touch hardware itself. Give it an object that subclasses
`SpiBus` and implements `select`, `deselect`, `miso_high`, `transfer` and
`prepare_reset` (`delay_us` defaults to `time.sleep`):

```python
from wmbus_rx.cc1101 import CC1101, AccessMode, StatusRegister

radio = CC1101(bus)
radio.reset()
part = radio.read_reg(StatusRegister.PARTNUM, AccessMode.STATUS_REGISTER)
radio.init_registers()   # T-mode receive settings, 868.95 MHz
```

`write_reg`, `cmd_strobe`, `read_reg` and `read_burst` give direct access to
registers, strobes and the FIFO.

## Receiving

```python
from wmbus_rx.receiver import Receiver

receiver = Receiver(radio)
receiver.start()
# call receiver.on_fifo_threshold() on each GDO0 rising edge
# call receiver.on_packet_received() on the GDO2 falling edge
if receiver.complete:
    packet = receiver.stop()
```

`start` raises `RxStateError` if the radio is not idle. `stop` raises
`RxStateError`, `PacketCodingError` or `PacketCrcError`. A header that is not
valid "3 out of 6" coding makes `on_fifo_threshold` raise `PacketCodingError`.
The encoded bytes collected so far are available as `receiver.received`.

## Command line

```
wmbus-rx 2A4B...      # one or more encoded frames in hex
wmbus-rx < frames.txt # or one frame per line on standard input
```

For each encoded frame the command prints the decoded frame in hex, and for
Techem water meter telegrams a line with the device id, meter type, total and
target consumption. Errors go to standard error; the exit status is 1 if any
frame could not be decoded, otherwise 0.

## What the package does not do

- It contains no SPI or GPIO driver: attaching interrupts and talking to a
  real transceiver is left to the `SpiBus` implementation and the code that
  calls `Receiver`.
- The command decodes frames already captured as hex; it does not listen to
  a radio.
- Meter readings are returned or printed only; nothing is logged or stored.

## Running the tests

```
pip install .[test]
pytest
```