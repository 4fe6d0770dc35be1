"""UPS patch model and wire serialization.

Layout of a patch file::

    "UPS1"
    VarInt input size
    VarInt output size
    { VarInt gap, XOR bytes..., 0x00 } repeated
    CRC32 of the original file     (4 bytes, little-endian)
    CRC32 of the modified file     (4 bytes, little-endian)
    CRC32 of all preceding bytes   (4 bytes, little-endian)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

from .checksum import CRC32_SIZE, crc32, format_crc32, pack_crc32, unpack_crc32
from .varint import decode_varint, encode_varint
from ..exceptions import (
    BadSignatureError,
    MalformedBlockError,
    MalformedVarIntError,
    PatchChecksumError,
    TruncatedPatchError,
)

logger = logging.getLogger(__name__)

UPS_MAGIC = b"UPS1"
FOOTER_SIZE = 3 * CRC32_SIZE
# signature + two one-byte sizes + footer
MIN_PATCH_SIZE = len(UPS_MAGIC) + 2 + FOOTER_SIZE
# a 64-bit value never needs more than 10 groups
_MAX_HEADER_READ = len(UPS_MAGIC) + 2 * 10


class Direction(Enum):
    """Which way a patch is applied."""

    FORWARD = "forward"  # original -> modified
    REVERSE = "reverse"  # modified -> original


@dataclass(frozen=True)
class DiffBlock:
    """One run of differing bytes, preceded by ``gap`` unchanged bytes."""

    gap: int
    xor_data: bytes

    def __post_init__(self) -> None:
        if self.gap < 0:
            raise ValueError(f"Block gap must not be negative: {self.gap}")
        if not self.xor_data:
            raise ValueError("Block XOR run must not be empty")
        if 0 in self.xor_data:
            raise ValueError("Block XOR run must not contain a zero byte")

    @property
    def span(self) -> int:
        """Byte positions covered, including the terminator position."""
        return self.gap + len(self.xor_data) + 1

    def to_bytes(self) -> bytes:
        return encode_varint(self.gap) + bytes(self.xor_data) + b"\x00"


@dataclass(frozen=True)
class UpsPatch:
    """A complete UPS patch."""

    input_size: int
    output_size: int
    blocks: Tuple[DiffBlock, ...] = field(default_factory=tuple)
    input_crc: int = 0
    output_crc: int = 0
    patch_crc: int = 0

    @classmethod
    def create(
        cls,
        input_size: int,
        output_size: int,
        blocks: Iterable[DiffBlock],
        input_crc: int,
        output_crc: int,
    ) -> "UpsPatch":
        """Build a patch and compute its own checksum."""
        patch = cls(input_size, output_size, tuple(blocks), input_crc, output_crc)
        return cls(
            input_size,
            output_size,
            patch.blocks,
            input_crc,
            output_crc,
            crc32(patch._body_bytes()),
        )

    @classmethod
    def from_bytes(cls, data: bytes, verify_checksum: bool = True) -> "UpsPatch":
        return parse_patch(data, verify_checksum=verify_checksum)

    def to_bytes(self) -> bytes:
        return serialize_patch(self)

    def target_size(self, direction: Direction) -> int:
        """Length of the file produced when applying in ``direction``."""
        return self.output_size if direction is Direction.FORWARD else self.input_size

    def expected_crc(self, direction: Direction) -> int:
        """CRC32 the produced file must have when applying in ``direction``."""
        return self.output_crc if direction is Direction.FORWARD else self.input_crc

    @property
    def changed_bytes(self) -> int:
        return sum(len(block.xor_data) for block in self.blocks)

    def summary(self) -> Dict[str, Any]:
        return {
            "format": "UPS",
            "input_size": self.input_size,
            "output_size": self.output_size,
            "blocks": len(self.blocks),
            "changed_bytes": self.changed_bytes,
            "input_crc": format_crc32(self.input_crc),
            "output_crc": format_crc32(self.output_crc),
            "patch_crc": format_crc32(self.patch_crc),
        }

    def _body_bytes(self) -> bytes:
        out = bytearray(UPS_MAGIC)
        out += encode_varint(self.input_size)
        out += encode_varint(self.output_size)
        for block in self.blocks:
            out += block.to_bytes()
        out += pack_crc32(self.input_crc)
        out += pack_crc32(self.output_crc)
        return bytes(out)


@dataclass(frozen=True)
class PatchHeader:
    """Sizes and checksums of a patch file, read without decoding blocks."""

    path: Path
    input_size: int
    output_size: int
    input_crc: int
    output_crc: int
    patch_crc: int


def serialize_patch(patch: UpsPatch) -> bytes:
    """Serialize ``patch``; the trailing patch CRC is computed here."""
    body = patch._body_bytes()
    return body + pack_crc32(crc32(body))


def _decode_size(data: bytes, pos: int, body_end: int, name: str) -> Tuple[int, int]:
    try:
        value, consumed = decode_varint(data, pos, body_end)
    except MalformedVarIntError as e:
        raise TruncatedPatchError(
            f"Patch ends inside the {name} field at offset {pos}", offset=pos
        ) from e
    return value, pos + consumed


def parse_patch(data: Union[bytes, bytearray, memoryview], verify_checksum: bool = True) -> UpsPatch:
    """Parse serialized UPS patch bytes.

    Args:
        data: Complete patch file contents
        verify_checksum: Check the trailing patch CRC32

    Returns:
        Parsed UpsPatch
    """
    data = bytes(data)

    if len(data) < len(UPS_MAGIC):
        raise TruncatedPatchError(
            f"Patch is only {len(data)} bytes long", offset=len(data)
        )
    if data[:4] != UPS_MAGIC:
        raise BadSignatureError("Invalid UPS header", signature=data[:4])
    if len(data) < MIN_PATCH_SIZE:
        raise TruncatedPatchError(
            f"Patch is only {len(data)} bytes long, need at least {MIN_PATCH_SIZE}",
            offset=len(data),
        )

    body_end = len(data) - FOOTER_SIZE
    pos = len(UPS_MAGIC)
    input_size, pos = _decode_size(data, pos, body_end, "input size")
    output_size, pos = _decode_size(data, pos, body_end, "output size")

    blocks: List[DiffBlock] = []
    while pos < body_end:
        block_offset = pos
        gap, consumed = decode_varint(data, pos, body_end)
        pos += consumed

        terminator = data.find(b"\x00", pos, body_end)
        if terminator == -1:
            raise MalformedBlockError(
                f"XOR run at offset {pos} runs into the checksum region",
                offset=pos,
            )
        if terminator == pos:
            raise MalformedBlockError(
                f"Empty XOR run at offset {block_offset}",
                offset=block_offset,
            )
        blocks.append(DiffBlock(gap, data[pos:terminator]))
        pos = terminator + 1

    input_crc = unpack_crc32(data, body_end)
    output_crc = unpack_crc32(data, body_end + 4)
    patch_crc = unpack_crc32(data, body_end + 8)

    if verify_checksum:
        actual = crc32(data[:-CRC32_SIZE])
        if actual != patch_crc:
            raise PatchChecksumError(
                f"Patch checksum mismatch: stored {format_crc32(patch_crc)}, "
                f"computed {format_crc32(actual)}",
                expected=patch_crc,
                actual=actual,
            )

    logger.debug(
        "Parsed UPS patch: %d -> %d bytes, %d blocks",
        input_size, output_size, len(blocks),
    )
    return UpsPatch(input_size, output_size, tuple(blocks), input_crc, output_crc, patch_crc)


def read_patch_header(patch_path: Union[str, Path]) -> PatchHeader:
    """Read sizes and checksums from a patch file without decoding its blocks."""
    path = Path(patch_path)
    with open(path, "rb") as f:
        f.seek(0, 2)
        file_size = f.tell()
        f.seek(0)
        head = f.read(_MAX_HEADER_READ)

        if len(head) < len(UPS_MAGIC):
            raise TruncatedPatchError(
                f"Patch is only {len(head)} bytes long", offset=len(head)
            )
        if head[:4] != UPS_MAGIC:
            raise BadSignatureError("Invalid UPS header", signature=head[:4])
        if file_size < MIN_PATCH_SIZE:
            raise TruncatedPatchError(
                f"Patch is only {file_size} bytes long, need at least {MIN_PATCH_SIZE}",
                offset=file_size,
            )

        body_end = min(len(head), file_size - FOOTER_SIZE)
        pos = len(UPS_MAGIC)
        input_size, pos = _decode_size(head, pos, body_end, "input size")
        output_size, pos = _decode_size(head, pos, body_end, "output size")

        f.seek(file_size - FOOTER_SIZE)
        footer = f.read(FOOTER_SIZE)

    return PatchHeader(
        path=path,
        input_size=input_size,
        output_size=output_size,
        input_crc=unpack_crc32(footer, 0),
        output_crc=unpack_crc32(footer, 4),
        patch_crc=unpack_crc32(footer, 8),
    )
