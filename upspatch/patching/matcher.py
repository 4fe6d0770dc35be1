"""Patch/ROM pairing.

Finds, for every UPS patch in a directory, the ROM it applies to. A patch
stores the CRC32 of both files it relates, so a ROM matching the input CRC is
patched forward and a ROM matching the output CRC is patched in reverse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .checksum import format_crc32
from .model import Direction, PatchHeader, read_patch_header
from ..exceptions import PatchFormatError
from ..hash_utils import calculate_crc32

logger = logging.getLogger(__name__)

ROM_EXTENSIONS = frozenset({
    # Generic
    "bin", "rom", "crt",
    # Nintendo
    "nes", "fds",
    "sfc", "smc",
    "vb",
    "n64", "v64", "z64",
    "gb", "gbc",
    "gba", "agb",
    "nds", "3ds",
    # Sega
    "sms", "gg", "md", "gen", "32x",
    # Other
    "pce", "ws", "wsc", "ngp", "ngc", "lnx",
})

PATCH_EXTENSIONS = frozenset({"ups"})


@dataclass
class PatchMatch:
    """A patch paired with the ROM it applies to."""

    patch_path: Path
    rom_path: Path
    direction: Direction
    target_path: Path


@dataclass
class MatchReport:
    """Outcome of scanning one directory."""

    matches: List[PatchMatch] = field(default_factory=list)
    unmatched: List[PatchHeader] = field(default_factory=list)
    invalid: List[Path] = field(default_factory=list)


def _extension(path: Path) -> str:
    return path.suffix.lstrip(".").lower()


class PatchMatcher:
    """Pairs UPS patches with ROMs by CRC32."""

    def __init__(self, rom_extensions=ROM_EXTENSIONS, chunk_size: int = 1048576):
        self.rom_extensions = frozenset(ext.lower() for ext in rom_extensions)
        self.chunk_size = chunk_size

    def index_roms(self, paths: List[Path]) -> Dict[int, Path]:
        """Map CRC32 -> ROM path. The first ROM wins on duplicate checksums."""
        roms: Dict[int, Path] = {}
        for path in paths:
            if _extension(path) not in self.rom_extensions:
                continue
            value = calculate_crc32(str(path), self.chunk_size)
            if value is None:
                continue
            roms.setdefault(value, path)
        return roms

    def match_patch(self, header: PatchHeader, roms: Dict[int, Path]) -> Optional[PatchMatch]:
        rom_path = roms.get(header.input_crc)
        direction = Direction.FORWARD
        if rom_path is None:
            rom_path = roms.get(header.output_crc)
            direction = Direction.REVERSE
        if rom_path is None:
            return None
        return PatchMatch(
            patch_path=header.path,
            rom_path=rom_path,
            direction=direction,
            target_path=header.path.with_suffix(rom_path.suffix),
        )

    def scan(self, directory) -> MatchReport:
        """Pair every patch in ``directory`` with a ROM from the same directory."""
        base = Path(directory)
        entries = sorted(p for p in base.iterdir() if p.is_file())
        roms = self.index_roms(entries)
        report = MatchReport()

        if not roms:
            logger.info("No source ROMs were found in %s", base)

        for path in entries:
            if _extension(path) not in PATCH_EXTENSIONS:
                continue
            try:
                header = read_patch_header(path)
            except (PatchFormatError, OSError) as e:
                logger.warning("Skipping unreadable patch %s: %s", path, e)
                report.invalid.append(path)
                continue

            match = self.match_patch(header, roms)
            if match is None:
                logger.info(
                    "No source ROM was found for %s (CRC32=%s)",
                    path.name, format_crc32(header.input_crc),
                )
                report.unmatched.append(header)
            else:
                logger.debug(
                    "Matched %s -> %s (%s)",
                    path.name, match.rom_path.name, match.direction.value,
                )
                report.matches.append(match)

        return report
