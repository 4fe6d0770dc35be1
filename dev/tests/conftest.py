from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

# Ensure repo root on path
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep UPSPATCH_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("UPSPATCH_"):
            monkeypatch.delenv(name, raising=False)
    yield
    logger = logging.getLogger("upspatch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def rom_pair() -> tuple[bytes, bytes]:
    source = bytes(range(256)) * 4
    target = bytearray(source)
    target[10:14] = b"HACK"
    target[500] ^= 0xFF
    target.extend(b"extra data")
    return source, bytes(target)
