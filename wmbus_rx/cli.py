"""Command line decoder for captured wireless M-Bus T-mode frames."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable, Sequence

from .packet import PacketCodingError, PacketError, decode_tmode, packet_size
from .techem import TechemReading, decode_techem, format_packet
from .three_of_six import DecodingError, decode_block

__all__ = ["main"]


def _decode_frame(encoded: bytes) -> bytes:
    if len(encoded) < 3:
        raise PacketCodingError("frame shorter than its header")
    try:
        l_field = decode_block(encoded[:3])[0]
    except DecodingError as exc:
        raise PacketCodingError(f"invalid frame header: {exc}") from exc
    return decode_tmode(encoded, packet_size(l_field))


def _describe(reading: TechemReading) -> str:
    return (
        f"Techem ID: {reading.device_id} Type: {reading.meter_type.value} "
        f"Calc Total: {reading.total:.2f} Target: {reading.target:.2f}"
    )


def _frames(args: Sequence[str]) -> Iterable[str]:
    if args:
        yield from args
        return
    for line in sys.stdin:
        line = line.strip()
        if line:
            yield line


def main(argv: Sequence[str] | None = None) -> int:
    """Decode encoded T-mode frames given as hex, print them and any meter reading."""
    parser = argparse.ArgumentParser(
        prog="wmbus-rx",
        description="Decode wireless M-Bus T-mode frames read from the RX FIFO.",
    )
    parser.add_argument(
        "frames",
        nargs="*",
        help="encoded frames in hex; read one per line from stdin if none given",
    )
    args = parser.parse_args(argv)

    failures = 0
    for text in _frames(args.frames):
        try:
            encoded = bytes.fromhex(text)
        except ValueError:
            print(f"error: not a hex string: {text!r}", file=sys.stderr)
            failures += 1
            continue
        try:
            packet = _decode_frame(encoded)
        except PacketError as exc:
            print(f"error: {exc}", file=sys.stderr)
            failures += 1
            continue

        print(format_packet(packet))
        try:
            reading = decode_techem(packet)
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            failures += 1
            continue
        if reading is not None:
            print(_describe(reading))

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())