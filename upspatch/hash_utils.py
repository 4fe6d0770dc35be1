"""File hash utilities - CRC32 of files on disk, used to pair ROMs with patches."""

import logging
import os
from functools import lru_cache
from typing import Optional, Tuple

from .patching.checksum import crc32

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1048576


def _get_file_signature(file_path: str) -> Optional[Tuple[int, int]]:
    try:
        stat = os.stat(file_path)
    except OSError as e:
        logger.warning("Cannot stat %s: %s", file_path, e)
        return None
    mtime_ns = getattr(stat, "st_mtime_ns", int(stat.st_mtime * 1_000_000_000))
    return mtime_ns, int(stat.st_size)


@lru_cache(maxsize=1000)
def _calculate_crc32_cached(file_path: str, mtime_ns: int, size_bytes: int, chunk_size: int) -> Optional[int]:
    """Calculate the CRC32 of a file. Cached per path, modification time and size."""
    try:
        value = 0
        with open(file_path, 'rb') as f:
            while True:
                data = f.read(chunk_size)
                if not data:
                    break
                value = crc32(data, value)
        return value
    except OSError as e:
        logger.warning("CRC32 calculation failed for %s: %s", file_path, e)
        return None


def calculate_crc32(file_path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Optional[int]:
    """Calculate the CRC32 of a file.

    Args:
        file_path: Path to the file
        chunk_size: Size of the chunks when reading the file

    Returns:
        CRC32 value or None if the file cannot be read
    """
    signature = _get_file_signature(str(file_path))
    if signature is None:
        return None
    mtime_ns, size_bytes = signature
    return _calculate_crc32_cached(str(file_path), mtime_ns, size_bytes, chunk_size)
