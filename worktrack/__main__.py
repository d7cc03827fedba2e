"""Module entry point: python -m worktrack ..."""

from __future__ import annotations

from worktrack.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
