"""UPS patch codec.

Features:
- Variable-length pointer codec and CRC32 fields
- Patch creation (diff) and bidirectional application
- File-level patcher
- Patch/ROM pairing by checksum
"""

from .applier import ApplyResult, apply, apply_patch, determine_direction
from .builder import build, build_patch
from .checksum import crc32, format_crc32
from .matcher import MatchReport, PatchMatch, PatchMatcher
from .model import (
    DiffBlock,
    Direction,
    PatchHeader,
    UpsPatch,
    parse_patch,
    read_patch_header,
    serialize_patch,
)
from .patcher import (
    Patcher,
    PatchFormat,
    PatchResult,
    apply_ups_patch,
    create_ups_patch,
)
from .varint import decode_varint, encode_varint

__all__ = [
    # codec
    "encode_varint",
    "decode_varint",
    "crc32",
    "format_crc32",
    "DiffBlock",
    "Direction",
    "PatchHeader",
    "UpsPatch",
    "parse_patch",
    "serialize_patch",
    "read_patch_header",
    "build",
    "build_patch",
    "apply",
    "apply_patch",
    "determine_direction",
    "ApplyResult",
    # files
    "Patcher",
    "PatchFormat",
    "PatchResult",
    "create_ups_patch",
    "apply_ups_patch",
    # pairing
    "PatchMatcher",
    "PatchMatch",
    "MatchReport",
]
