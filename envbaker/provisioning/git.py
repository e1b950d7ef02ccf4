from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, Literal

logger = logging.getLogger(__name__)


class GitCommandError(RuntimeError):
    """Raised when a git step fails while setting up a repository."""

    def __init__(self, step: str, returncode: int | None, stderr: str = "") -> None:
        detail = stderr.strip()
        message = f"git {step} failed"
        if returncode is not None:
            message += f" (exit {returncode})"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.step = step
        self.returncode = returncode
        self.stderr = stderr


def run_logged(
    cmd: Iterable[str],
    *,
    capture_output: bool = False,
    text: bool = True,
    check: bool = True,
    echo: Literal["always", "on_error", "never"] = "always",
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """
    Run a subprocess, mirroring stdout/stderr to the caller even on failure.
    Returns the CompletedProcess; raises CalledProcessError when check=True.
    """
    cmd_list = list(cmd)
    logger.debug(f"Running: {' '.join(cmd_list)}")
    result = subprocess.run(
        cmd_list,
        capture_output=capture_output,
        text=text,
        **kwargs,
    )
    if capture_output and (
        echo == "always" or (echo == "on_error" and result.returncode != 0)
    ):
        if result.stdout:
            sys.stdout.write(result.stdout)
        if result.stderr:
            sys.stderr.write(result.stderr)
    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, result.args, output=result.stdout, stderr=result.stderr
        )
    return result


def ensure_git() -> None:
    if shutil.which("git") is None:
        raise GitCommandError("lookup", None, "missing dependency: git")


def setup_repository(
    env_dir: Path,
    remote_url: str,
    *,
    branch: str = "master",
    commit_message: str,
    runner: Callable[..., subprocess.CompletedProcess[str]] = run_logged,
) -> None:
    """Initialize, commit, and push an environment directory to its remote.

    Steps run in order and stop at the first failure.

    Raises:
        GitCommandError: Naming the step that failed
    """
    steps: list[tuple[str, list[str]]] = [
        ("init", ["git", "init"]),
        ("add", ["git", "add", "."]),
        ("commit", ["git", "commit", "--allow-empty", "-m", commit_message]),
        ("branch", ["git", "branch", "-M", branch]),
        ("remote add", ["git", "remote", "add", "origin", remote_url]),
        ("push", ["git", "push", "-u", "origin", branch]),
    ]

    for step, cmd in steps:
        try:
            runner(cmd, cwd=str(env_dir), capture_output=True, echo="on_error")
        except subprocess.CalledProcessError as exc:
            raise GitCommandError(step, exc.returncode, exc.stderr or "") from exc
        except OSError as exc:
            raise GitCommandError(step, None, str(exc)) from exc

    logger.info(f"Successfully pushed {env_dir} to {remote_url}")
