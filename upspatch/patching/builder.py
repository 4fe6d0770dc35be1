"""UPS patch creation.

Both files are walked up to the length of the longer one. Positions past the
end of a file read as 0x00. Each maximal run of differing positions becomes a
block; the position right after a run is unchanged (or past both ends) and is
covered by the run's 0x00 terminator.
"""

from __future__ import annotations

import logging
from typing import List, Union

from .checksum import crc32, format_crc32
from .model import DiffBlock, UpsPatch
from ..exceptions import BuildError

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

# equal regions are skipped this many bytes at a time
SKIP_CHUNK_SIZE = 4096


def _byte_at(data: bytes, index: int) -> int:
    """Byte at ``index``, or 0 past the end of ``data``."""
    return data[index] if index < len(data) else 0


def _ensure_bytes(value: BytesLike, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise BuildError(
            f"{name} must be bytes-like, got {type(value).__name__}",
            details={"argument": name},
        )
    return bytes(value)


def build_patch(source: BytesLike, target: BytesLike) -> UpsPatch:
    """Create a patch that turns ``source`` into ``target``.

    Args:
        source: Original file contents
        target: Modified file contents

    Returns:
        UpsPatch relating the two buffers
    """
    source = _ensure_bytes(source, "source")
    target = _ensure_bytes(target, "target")

    length = max(len(source), len(target))
    common = min(len(source), len(target))
    blocks: List[DiffBlock] = []
    relative = 0
    i = 0

    while i < length:
        end = i + SKIP_CHUNK_SIZE
        if end <= common and source[i:end] == target[i:end]:
            i = end
            continue

        if _byte_at(source, i) == _byte_at(target, i):
            i += 1
            continue

        start = i
        run = bytearray()
        while i < length:
            x = _byte_at(source, i)
            y = _byte_at(target, i)
            if x == y:
                break
            run.append(x ^ y)
            i += 1

        blocks.append(DiffBlock(start - relative, bytes(run)))
        # skip the position the terminator stands for
        i += 1
        relative = i

    patch = UpsPatch.create(
        input_size=len(source),
        output_size=len(target),
        blocks=blocks,
        input_crc=crc32(source),
        output_crc=crc32(target),
    )
    logger.debug(
        "Built UPS patch: %d -> %d bytes, %d blocks, %d changed bytes, crc %s -> %s",
        patch.input_size,
        patch.output_size,
        len(patch.blocks),
        patch.changed_bytes,
        format_crc32(patch.input_crc),
        format_crc32(patch.output_crc),
    )
    return patch


def build(source: BytesLike, target: BytesLike) -> bytes:
    """Create serialized UPS patch bytes turning ``source`` into ``target``."""
    return build_patch(source, target).to_bytes()
