"""UPS patch application.

The same patch works both ways. The checksum of the supplied file decides
the direction: the original file is patched forward, the modified file is
patched back to the original.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Union

from .checksum import crc32, format_crc32
from .model import Direction, UpsPatch, parse_patch
from ..exceptions import ChecksumMismatchError, OutputVerificationError

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class ApplyResult:
    """Result of applying a patch to one file."""

    output: bytes
    direction: Direction
    verified: bool = True
    expected_crc: int = 0
    actual_crc: int = 0

    def __iter__(self) -> Iterator:
        # allows ``output, direction = apply(...)``
        yield self.output
        yield self.direction

    def raise_for_verification(self) -> None:
        """Raise OutputVerificationError if the output failed its checksum."""
        if not self.verified:
            raise _verification_error(self)


def _verification_error(result: ApplyResult) -> OutputVerificationError:
    return OutputVerificationError(
        f"Output checksum mismatch ({result.direction.value}): expected "
        f"{format_crc32(result.expected_crc)}, got {format_crc32(result.actual_crc)}",
        output=result.output,
        direction=result.direction,
        details={
            "direction": result.direction.value,
            "expected_crc": format_crc32(result.expected_crc),
            "actual_crc": format_crc32(result.actual_crc),
        },
    )


def determine_direction(patch: UpsPatch, data: BytesLike) -> Direction:
    """Pick the direction in which ``patch`` applies to ``data``.

    Raises:
        ChecksumMismatchError: data is neither the original nor the modified file
    """
    actual = crc32(data)
    size = len(data)
    if actual == patch.input_crc and size == patch.input_size:
        return Direction.FORWARD
    if actual == patch.output_crc and size == patch.output_size:
        return Direction.REVERSE
    raise ChecksumMismatchError(
        f"File (CRC32 {format_crc32(actual)}, {size} bytes) matches neither side of the patch",
        details={
            "actual_crc": format_crc32(actual),
            "actual_size": size,
            "input_crc": format_crc32(patch.input_crc),
            "input_size": patch.input_size,
            "output_crc": format_crc32(patch.output_crc),
            "output_size": patch.output_size,
        },
    )


def _xor_into(output: bytearray, pos: int, xor_data: bytes) -> None:
    length = min(len(xor_data), len(output) - pos)
    if length <= 0:
        return
    current = int.from_bytes(output[pos:pos + length], "little")
    delta = int.from_bytes(xor_data[:length], "little")
    output[pos:pos + length] = (current ^ delta).to_bytes(length, "little")


def apply_patch(patch: UpsPatch, data: BytesLike, strict: bool = False) -> ApplyResult:
    """Apply a parsed patch to ``data`` in whichever direction fits.

    Args:
        patch: Parsed UPS patch
        data: Original or modified file contents
        strict: Raise OutputVerificationError instead of flagging the result

    Returns:
        ApplyResult with the reconstructed file
    """
    data = bytes(data)
    direction = determine_direction(patch, data)
    target_size = patch.target_size(direction)

    # unchanged bytes come straight from the source, past its end they are 0x00
    output = bytearray(target_size)
    copy_size = min(len(data), target_size)
    output[:copy_size] = data[:copy_size]

    pos = 0
    for block in patch.blocks:
        pos += block.gap
        if pos >= target_size:
            break
        _xor_into(output, pos, block.xor_data)
        pos += len(block.xor_data) + 1

    expected = patch.expected_crc(direction)
    actual = crc32(output)
    result = ApplyResult(
        output=bytes(output),
        direction=direction,
        verified=actual == expected,
        expected_crc=expected,
        actual_crc=actual,
    )

    if not result.verified:
        error = _verification_error(result)
        if strict:
            raise error
        logger.warning("%s", error, extra={"error": error.to_dict()})
    else:
        logger.debug(
            "Applied UPS patch %s: %d -> %d bytes",
            direction.value, len(data), target_size,
        )
    return result


def apply(
    patch_data: BytesLike,
    data: BytesLike,
    strict: bool = False,
    verify_patch_checksum: bool = True,
) -> ApplyResult:
    """Parse serialized patch bytes and apply them to ``data``."""
    patch = parse_patch(patch_data, verify_checksum=verify_patch_checksum)
    return apply_patch(patch, data, strict=strict)
