"""Module entrypoint for running devcard as ``python -m devcard``."""

from __future__ import annotations

from devcard.cli import main


if __name__ == "__main__":
    main()
