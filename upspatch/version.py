"""Version utilities for the UPS Patch Toolkit."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version


def load_version() -> str:
    try:
        return version("upspatch")
    except PackageNotFoundError:
        return "1.0.0"


__version__ = load_version()
