from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..settings import EnvbakerSettings

logger = logging.getLogger(__name__)


class GitHubError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class TransientGitHubError(GitHubError):
    """Raised for transport failures and 5xx responses worth retrying."""


@dataclass(frozen=True)
class GitHubRepository:
    name: str
    full_name: str
    html_url: str
    clone_url: str


class GitHubClient:
    def __init__(
        self,
        *,
        api_url: str,
        token: str,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        attempts: int = 3,
        backoff: float = 1.0,
    ) -> None:
        self._base = api_url.rstrip("/")
        self._token = token
        self._owns_client = client is None
        self._http = client or httpx.Client()
        self._timeout = timeout
        self._attempts = attempts
        self._backoff = backoff

    @classmethod
    def from_settings(
        cls, settings: EnvbakerSettings, *, client: httpx.Client | None = None
    ) -> GitHubClient:
        token = settings.github_token.get_secret_value().strip() if settings.github_token else ""
        if not token:
            raise GitHubError("GitHub token is required, but GITHUB_TOKEN is not set")
        return cls(
            api_url=settings.github_api_url,
            token=token,
            client=client,
            timeout=settings.http_timeout,
            attempts=settings.retry_attempts,
        )

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
        }

    def _url(self, path: str) -> str:
        return f"{self._base}{path}"

    def _post(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        try:
            res = self._http.post(
                self._url(path),
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.TransportError as exc:
            raise TransientGitHubError(f"GitHub API request to {path} failed: {exc}") from exc
        if res.status_code >= 500:
            raise TransientGitHubError(
                f"GitHub API error {res.status_code} for POST {path}",
                status_code=res.status_code,
                payload=_payload(res),
            )
        return res

    def create_repository(self, name: str, *, private: bool = True) -> GitHubRepository:
        """Create a repository owned by the authenticated user.

        Transport errors and 5xx responses are retried with exponential
        backoff; any other non-201 response fails immediately.
        """
        retrying = Retrying(
            reraise=True,
            retry=retry_if_exception_type(TransientGitHubError),
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=self._backoff, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        res = retrying(self._post, "/user/repos", {"name": name, "private": private})
        if res.status_code != 201:
            raise GitHubError(
                f"Failed to create repository {name!r}, status code: {res.status_code}",
                status_code=res.status_code,
                payload=_payload(res),
            )
        repository = self._parse_repository(_payload(res))
        logger.info(f"Created GitHub repository: {repository.html_url}")
        return repository

    @staticmethod
    def _parse_repository(data: Any) -> GitHubRepository:
        if not isinstance(data, dict):
            raise GitHubError("Unexpected GitHub repository response", payload=data)
        try:
            return GitHubRepository(
                name=str(data["name"]),
                full_name=str(data.get("full_name") or ""),
                html_url=str(data.get("html_url") or ""),
                clone_url=str(data["clone_url"]),
            )
        except KeyError as exc:
            raise GitHubError(
                "Failed to parse GitHub repository payload",
                payload={"data": data, "error": str(exc)},
            ) from exc


def _payload(res: httpx.Response) -> Any:
    try:
        return res.json()
    except ValueError:
        return {"raw": res.text}
