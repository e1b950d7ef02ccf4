"""Main CLI application."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ..copying import fanout
from ..core.errors import SettingsError, WorkspaceError
from ..core.models import CopyResult, EnvironmentTarget
from ..provisioning import git, provisioner
from ..provisioning.github import GitHubClient, GitHubError
from ..settings import EnvbakerSettings, load_settings
from ..workspace import layout
from .parsers import parse_solution_name, parse_source

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="envbaker",
    help="Bake SANDBOX/DEV/STAGE/PREPROD/PROD copies of a project skeleton.",
    no_args_is_help=True,
)


class RepoMode(str, Enum):
    ask = "ask"
    all = "all"
    none = "none"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def _report_copies(targets: list[EnvironmentTarget], results: list[CopyResult]) -> int:
    failures = 0
    for target, result in zip(targets, results):
        if result.ok:
            typer.echo(f"  [ok] {target.name} ({result.elapsed:.2f}s)")
        else:
            failures += 1
            typer.echo(
                f"  [failed] Failed to copy directory to '{result.destination}': {result.error}",
                err=True,
            )
    return failures


def _select_for_provisioning(
    targets: list[EnvironmentTarget], mode: RepoMode
) -> list[EnvironmentTarget]:
    if mode is RepoMode.none:
        return []
    if mode is RepoMode.all:
        return list(targets)
    return [
        target
        for target in targets
        if typer.confirm(
            f"Do you want to create a new GitHub repository for the '{target.name}' environment?",
            default=False,
        )
    ]


def _provision(targets: list[EnvironmentTarget], settings: EnvbakerSettings) -> int:
    """Provision each selected environment; returns the number of failures."""
    try:
        git.ensure_git()
        client = GitHubClient.from_settings(settings)
    except (GitHubError, git.GitCommandError) as e:
        typer.echo(f"Error preparing repository setup: {e}", err=True)
        return len(targets)

    failures = 0
    with client:
        for target in targets:
            result = provisioner.provision_environment(
                target, client=client, settings=settings
            )
            if result.ok and result.repository is not None:
                typer.echo(f"Successfully pushed {target.name} to {result.repository.html_url}")
            else:
                failures += 1
                typer.echo(f"Error setting up repository for {target.name}: {result.error}", err=True)
    return failures


@app.command()
def bake(
    source: Annotated[
        str,
        typer.Option(
            "--source",
            prompt="Enter the directory name you wish to copy. If it's not in the current directory, it will need the absolute path",
            help="Directory to copy into every environment.",
            metavar="DIR",
        ),
    ],
    solution: Annotated[
        str,
        typer.Option(
            "--solution",
            prompt="Enter the solution name for your outer shell directory",
            help="Outer shell directory name placed under the solutions root.",
            metavar="NAME",
        ),
    ],
    solutions_root: Annotated[
        Optional[Path],
        typer.Option(
            "--solutions-root",
            help="Parent directory for solutions (default: ~/Desktop/Solutions).",
            metavar="DIR",
        ),
    ] = None,
    repos: Annotated[
        RepoMode,
        typer.Option(
            "--repos",
            help="Create GitHub repositories: ask per environment, all, or none.",
            case_sensitive=False,
        ),
    ] = RepoMode.ask,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            help="YAML file with envbaker settings.",
            exists=True,
            dir_okay=False,
            metavar="FILE",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Copy a directory into every environment, then optionally create repositories."""
    _configure_logging(verbose)

    try:
        settings = load_settings(config, solutions_root=solutions_root)
    except SettingsError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e

    source_path = parse_source(source)
    solution_name = parse_solution_name(solution)

    try:
        layout.validate_source(source_path)
    except WorkspaceError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2) from e

    plan = layout.plan_workspace(source_path, settings.solutions_root, solution_name)
    try:
        prepared = layout.prepare_workspace(plan)
    except WorkspaceError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e

    typer.echo("Hang tight while your environment bakes in the oven for a bit...")
    for failure in prepared.failed:
        typer.echo(
            f"Failed to create environment directory '{failure.target.name}': {failure.reason}",
            err=True,
        )
    for target in prepared.ready:
        typer.echo(f"Still cooking... setting up {target.name}")

    results = fanout.copy_to_many(plan.source, [target.path for target in prepared.ready])
    failures = len(prepared.failed) + _report_copies(prepared.ready, results)

    if failures:
        typer.echo(f"Environment setup finished with {failures} failure(s).", err=True)
    else:
        typer.echo("Environment setup completed successfully!")

    copied = [target for target, result in zip(prepared.ready, results) if result.ok]
    selected = _select_for_provisioning(copied, repos)
    if selected:
        failures += _provision(selected, settings)

    if failures:
        raise typer.Exit(code=1)


@app.command("copy")
def copy_command(
    source: Annotated[Path, typer.Argument(help="Directory to copy.")],
    destinations: Annotated[
        list[Path], typer.Argument(help="Destination roots, copied concurrently.")
    ],
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Copy SOURCE into every DESTINATION concurrently."""
    _configure_logging(verbose)

    results = fanout.copy_to_many(source, destinations)
    failures = 0
    for result in results:
        if result.ok:
            typer.echo(f"{result.destination}: ok")
        else:
            failures += 1
            typer.echo(f"{result.destination}: {result.error}", err=True)

    if failures:
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
