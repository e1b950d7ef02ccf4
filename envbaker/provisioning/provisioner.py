"""Per-environment repository provisioning, run after all copies have finished."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from jinja2 import Environment, StrictUndefined, TemplateError

from ..core.models import EnvironmentTarget
from ..settings import EnvbakerSettings
from .git import GitCommandError, setup_repository
from .github import GitHubClient, GitHubError, GitHubRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisionResult:
    name: str
    repository: GitHubRepository | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def render_commit_message(template: str, target: EnvironmentTarget) -> str:
    """Render the initial commit message for an environment.

    Args:
        template: Jinja2 template source
        target: Environment being committed (``name`` and ``prefix`` are exposed)

    Returns:
        Rendered, stripped message
    """
    env = Environment(undefined=StrictUndefined, autoescape=False)
    return env.from_string(template).render(name=target.name, prefix=target.prefix).strip()


def provision_environment(
    target: EnvironmentTarget,
    *,
    client: GitHubClient,
    settings: EnvbakerSettings,
    runner: Callable[..., None] = setup_repository,
) -> ProvisionResult:
    """Create a GitHub repository for one environment and push its contents.

    Failures are returned in the result rather than raised, so one
    environment never prevents provisioning of the next.
    """
    try:
        message = render_commit_message(settings.commit_message_template, target)
    except TemplateError as e:
        logger.error(f"Invalid commit message template for {target.name}: {e}")
        return ProvisionResult(name=target.name, error=e)

    try:
        repository = client.create_repository(target.name, private=settings.repo_private)
    except GitHubError as e:
        logger.error(f"Error creating GitHub repository {target.name}: {e}")
        return ProvisionResult(name=target.name, error=e)

    try:
        runner(
            target.path,
            repository.clone_url,
            branch=settings.default_branch,
            commit_message=message,
        )
    except GitCommandError as e:
        logger.error(f"Error setting up git for {target.name}: {e}")
        return ProvisionResult(name=target.name, repository=repository, error=e)

    return ProvisionResult(name=target.name, repository=repository)
