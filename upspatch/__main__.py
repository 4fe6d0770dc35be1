"""UPS Patch Toolkit - module entry point (``python -m upspatch``)."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
