"""CLI argument parsers and validators."""

from __future__ import annotations

from pathlib import Path

import typer


def parse_source(value: str) -> Path:
    """Parse the source directory argument."""
    value = value.strip()
    if not value:
        raise typer.BadParameter("Source directory must not be empty")
    return Path(value).expanduser()


def parse_solution_name(value: str) -> str:
    """Parse the solution name; it becomes a single directory component."""
    name = value.strip()
    if not name:
        raise typer.BadParameter("Solution name must not be empty")
    if name in (".", "..") or "/" in name or "\\" in name:
        raise typer.BadParameter(
            f"Solution name must be a plain directory name, got: {value!r}"
        )
    return name
