"""UPS Patch Toolkit - create and apply UPS patches."""

from .exceptions import (
    BadSignatureError,
    BuildError,
    ChecksumMismatchError,
    MalformedBlockError,
    MalformedVarIntError,
    OutputVerificationError,
    PatchChecksumError,
    PatchError,
    PatchFormatError,
    TruncatedPatchError,
)
from .patching import ApplyResult, Direction, UpsPatch, apply, build
from .version import __version__

__all__ = [
    "__version__",
    "build",
    "apply",
    "ApplyResult",
    "Direction",
    "UpsPatch",
    "PatchError",
    "PatchFormatError",
    "BadSignatureError",
    "TruncatedPatchError",
    "MalformedBlockError",
    "MalformedVarIntError",
    "PatchChecksumError",
    "ChecksumMismatchError",
    "OutputVerificationError",
    "BuildError",
]
