"""Solution workspace layout: naming, validation, and directory creation."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..core.errors import WorkspaceError
from ..core.models import (
    EnvironmentFailure,
    EnvironmentTarget,
    PreparedWorkspace,
    WorkspacePlan,
)

logger = logging.getLogger(__name__)

ENVIRONMENT_PREFIXES: tuple[str, ...] = ("SANDBOX_", "DEV_", "STAGE_", "PREPROD_", "PROD_")

_DIR_MODE = 0o755


def default_solutions_root() -> Path:
    """Return the "Solutions" directory on the user's desktop."""
    return Path.home() / "Desktop" / "Solutions"


def environment_dir_name(prefix: str, source: Path | str) -> str:
    """Name an environment copy after the source directory's base name."""
    base = os.path.basename(os.path.normpath(str(source)))
    return f"{prefix}{base}"


def validate_source(source: Path) -> None:
    """Ensure the source directory exists before anything is created.

    Raises:
        WorkspaceError: If the source is missing or not a directory
    """
    if not source.exists():
        raise WorkspaceError(
            f"The specified directory does not exist: {source}. Did you use the absolute path?"
        )
    if not source.is_dir():
        raise WorkspaceError(f"The specified path is not a directory: {source}")


def plan_workspace(
    source: Path, solutions_root: Path, solution_name: str
) -> WorkspacePlan:
    """Resolve the solution path and one environment target per prefix.

    Args:
        source: Directory to replicate (absolute or relative to cwd)
        solutions_root: Parent directory holding all solutions
        solution_name: Outer shell directory name for this solution

    Returns:
        Workspace plan with environments in prefix order
    """
    source_path = source.expanduser().absolute()
    solution_path = solutions_root.expanduser().absolute() / solution_name

    environments = [
        EnvironmentTarget(
            prefix=prefix,
            name=environment_dir_name(prefix, source_path),
            path=solution_path / environment_dir_name(prefix, source_path),
        )
        for prefix in ENVIRONMENT_PREFIXES
    ]

    return WorkspacePlan(
        source=source_path,
        solution_path=solution_path,
        environments=environments,
    )


def prepare_workspace(plan: WorkspacePlan) -> PreparedWorkspace:
    """Create the solution directory and every environment directory.

    Existing directories are reused as-is. An environment directory that
    cannot be created is recorded as failed and does not stop the others.

    Raises:
        WorkspaceError: If the solution directory itself cannot be created
    """
    try:
        plan.solution_path.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(
            f"Failed to create solution directory {plan.solution_path}: {e}"
        ) from e

    prepared = PreparedWorkspace(plan=plan)
    for target in plan.environments:
        try:
            target.path.mkdir(mode=_DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create environment directory '{target.name}': {e}")
            prepared.failed.append(EnvironmentFailure(target=target, reason=str(e)))
            continue
        prepared.ready.append(target)

    logger.debug(
        f"Prepared {len(prepared.ready)} environment(s) under {plan.solution_path}"
    )
    return prepared
