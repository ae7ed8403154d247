"""Module entrypoint for running Studyforge as ``python -m studyforge``."""

from __future__ import annotations

from studyforge.cli import main


if __name__ == "__main__":
    main()
