"""UPS Patcher - file-level patch creation and application.

Reads whole files into memory, runs the builder or applier and writes the
result back to disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, Optional

from .applier import apply_patch
from .builder import build_patch
from .model import UPS_MAGIC, Direction, parse_patch
from ..config.models import PatcherConfig
from ..exceptions import BaseError, FileOperationError, PatchError

logger = logging.getLogger(__name__)


class PatchFormat(Enum):
    """Recognized patch formats."""

    UPS = auto()  # Universal Patching System
    UNKNOWN = auto()


@dataclass
class PatchResult:
    """Result of a patch operation."""

    success: bool
    output_path: Optional[str] = None
    original_size: int = 0
    patched_size: int = 0
    format_used: PatchFormat = PatchFormat.UNKNOWN
    direction: Optional[Direction] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    checksum_valid: bool = True


def _read_file(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise FileOperationError(f"Cannot read {path}: {e}", file_path=path, operation="read") from e


def _write_file(path: str, data: bytes, overwrite: bool) -> None:
    if not overwrite and Path(path).exists():
        raise FileOperationError(
            f"Output file already exists: {path}", file_path=path, operation="write"
        )
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise FileOperationError(f"Cannot write {path}: {e}", file_path=path, operation="write") from e


def _failure(error: BaseError, **kwargs: Any) -> PatchResult:
    logger.error("%s", error, extra={"error": error.to_dict()})
    return PatchResult(success=False, error=str(error), error_code=error.error_code, **kwargs)


class Patcher:
    """Creates and applies UPS patches on files."""

    def __init__(self, config: Optional[PatcherConfig] = None):
        """Initialize patcher.

        Args:
            config: Patcher settings (defaults apply when omitted)
        """
        self.config = config or PatcherConfig()

    def detect_format(self, patch_path: str) -> PatchFormat:
        """Detect patch format from file.

        Args:
            patch_path: Path to patch file

        Returns:
            Detected PatchFormat
        """
        try:
            with open(patch_path, "rb") as f:
                header = f.read(len(UPS_MAGIC))
        except OSError as e:
            logger.debug("Cannot read %s: %s", patch_path, e)
            return PatchFormat.UNKNOWN

        if header == UPS_MAGIC:
            return PatchFormat.UPS
        return PatchFormat.UNKNOWN

    def default_output_path(self, rom_path: str) -> str:
        rom_p = Path(rom_path)
        return str(rom_p.parent / f"{rom_p.stem}{self.config.output_suffix}{rom_p.suffix}")

    def create(self, original_path: str, modified_path: str, patch_path: str) -> PatchResult:
        """Create a UPS patch from two files.

        Args:
            original_path: Path to original file
            modified_path: Path to modified file
            patch_path: Path for output patch file

        Returns:
            PatchResult with status and details
        """
        try:
            original = _read_file(original_path)
            modified = _read_file(modified_path)
            patch = build_patch(original, modified)
            _write_file(patch_path, patch.to_bytes(), self.config.overwrite)
        except (PatchError, FileOperationError) as e:
            return _failure(e, format_used=PatchFormat.UPS)

        logger.info(
            "Created %s (%d blocks, %d changed bytes)",
            patch_path, len(patch.blocks), patch.changed_bytes,
        )
        return PatchResult(
            success=True,
            output_path=patch_path,
            original_size=len(original),
            patched_size=len(modified),
            format_used=PatchFormat.UPS,
            direction=Direction.FORWARD,
        )

    def apply(
        self,
        rom_path: str,
        patch_path: str,
        output_path: Optional[str] = None,
    ) -> PatchResult:
        """Apply a patch to a file, forward or in reverse.

        Args:
            rom_path: Path to original or modified file
            patch_path: Path to patch file
            output_path: Path for the result (default: rom_path with output_suffix)

        Returns:
            PatchResult with status and details
        """
        patch_format = self.detect_format(patch_path)
        if patch_format == PatchFormat.UNKNOWN:
            return PatchResult(
                success=False,
                error=f"Unknown patch format: {patch_path}",
                error_code="UNKNOWN_FORMAT",
            )

        if output_path is None:
            output_path = self.default_output_path(rom_path)

        try:
            rom_data = _read_file(rom_path)
            patch = parse_patch(
                _read_file(patch_path),
                verify_checksum=self.config.verify_patch_checksum,
            )
            result = apply_patch(
                patch, rom_data, strict=self.config.strict_output_verification
            )
            _write_file(output_path, result.output, self.config.overwrite)
        except (PatchError, FileOperationError) as e:
            return _failure(e, format_used=patch_format)

        logger.info("Patched %s -> %s (%s)", rom_path, output_path, result.direction.value)
        return PatchResult(
            success=True,
            output_path=output_path,
            original_size=len(rom_data),
            patched_size=len(result.output),
            format_used=patch_format,
            direction=result.direction,
            checksum_valid=result.verified,
        )

    def inspect(self, patch_path: str) -> Dict[str, Any]:
        """Parse a patch file and summarize it.

        Raises:
            FileOperationError: the patch cannot be read
            PatchFormatError: the patch is corrupt
        """
        patch = parse_patch(
            _read_file(patch_path),
            verify_checksum=self.config.verify_patch_checksum,
        )
        summary = patch.summary()
        summary["path"] = str(patch_path)
        return summary


# Convenience functions
def create_ups_patch(original_path: str, modified_path: str, patch_path: str) -> PatchResult:
    """Create a UPS patch from two files."""
    return Patcher().create(original_path, modified_path, patch_path)


def apply_ups_patch(rom_path: str, patch_path: str, output_path: Optional[str] = None) -> PatchResult:
    """Apply a UPS patch to a file."""
    return Patcher().apply(rom_path, patch_path, output_path)
