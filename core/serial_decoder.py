"""
Serial number decoding for Mifare card UIDs.

Readers return the UID as raw bytes; downstream systems expect the first
four bytes as an 8 character upper-case hex string, or its decimal value
for organizations that only accept numeric card numbers.
"""

from typing import Sequence, Union

from config.settings import Organization
from .transport import ReaderError


SERIAL_BYTES = 4

# Largest value accepted by the numeric conversion (signed 64-bit)
INT64_MAX = 2 ** 63 - 1


class DecodeError(ReaderError):
    """Raised when UID bytes cannot be turned into a serial number."""
    pass


def to_hex(data: Union[bytes, bytearray, Sequence[int]]) -> str:
    """Upper-case two digit hex per byte, no separators."""
    return "".join(f"{b:02X}" for b in data)


def decode_serial(raw_uid: Union[bytes, bytearray, Sequence[int]],
                  organization: Organization = Organization.OTHER) -> str:
    """
    Convert raw UID bytes into the serial number reported for a tap.

    Args:
        raw_uid: UID buffer from the reader (only the first 4 bytes are used)
        organization: Configured organization

    Returns:
        "ABCDEF01"-style hex, or its decimal value for numeric-only organizations

    Raises:
        DecodeError: If fewer than 4 bytes are given or conversion fails
    """
    try:
        data = bytes(raw_uid[:SERIAL_BYTES]) if raw_uid is not None else b""
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Invalid UID bytes: {e}")
    if len(data) < SERIAL_BYTES:
        raise DecodeError(f"UID too short: {len(data)} bytes, need {SERIAL_BYTES}")

    serial = to_hex(data)

    if Organization.parse(organization).numeric_only:
        try:
            value = int(serial, 16)
        except ValueError as e:
            raise DecodeError(f"Serial {serial!r} is not a hex number: {e}")
        if value > INT64_MAX:
            raise DecodeError(f"Serial {serial!r} does not fit a 64-bit integer")
        serial = str(value)

    return serial
