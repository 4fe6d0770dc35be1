"""UPS variable-length integer codec.

Numbers are stored as 7-bit groups, least significant group first. The last
group has its top bit set. Every continuation group is stored minus one,
which keeps the encoding canonical: ``128`` is ``00 81`` and nothing else.
"""

from __future__ import annotations

from typing import Optional, Tuple

from ..exceptions import MalformedVarIntError


def encode_varint(value: int) -> bytes:
    """Encode a non-negative integer as a UPS pointer.

    Args:
        value: Integer to encode

    Returns:
        Encoded bytes
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative value: {value}")

    encoded = bytearray()
    while True:
        group = value & 0x7F
        value >>= 7
        if value == 0:
            encoded.append(0x80 | group)
            break
        encoded.append(group)
        value -= 1
    return bytes(encoded)


def decode_varint(data: bytes, offset: int = 0, end: Optional[int] = None) -> Tuple[int, int]:
    """Decode a UPS pointer starting at ``offset``.

    Args:
        data: Buffer holding the encoded number
        offset: Position of the first group
        end: Exclusive bound for reading (default: end of data)

    Returns:
        Tuple of (value, bytes consumed)
    """
    if end is None:
        end = len(data)

    result = 0
    shift = 1
    pos = offset
    while True:
        if pos >= end:
            raise MalformedVarIntError(
                f"Variable-length integer at offset {offset} is not terminated",
                offset=offset,
            )
        byte = data[pos]
        pos += 1
        result += (byte & 0x7F) * shift
        if byte & 0x80:
            break
        shift <<= 7
        result += shift
    return result, pos - offset
