"""CRC32 helpers for the three UPS integrity fields."""

from __future__ import annotations

import struct
import zlib

CRC32_SIZE = 4

_CRC32_STRUCT = struct.Struct("<I")


def crc32(data: bytes, value: int = 0) -> int:
    """CRC-32/ISO-HDLC of ``data``, continuing from ``value``."""
    return zlib.crc32(data, value) & 0xFFFFFFFF


def pack_crc32(value: int) -> bytes:
    return _CRC32_STRUCT.pack(value & 0xFFFFFFFF)


def unpack_crc32(data: bytes, offset: int = 0) -> int:
    return _CRC32_STRUCT.unpack_from(data, offset)[0]


def format_crc32(value: int) -> str:
    return "%08X" % (value & 0xFFFFFFFF)
