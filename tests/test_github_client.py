import json

import httpx
import pytest

from envbaker.provisioning.github import GitHubClient, GitHubError, TransientGitHubError
from envbaker.settings import EnvbakerSettings

API = "https://api.github.example"

_CREATED = {
    "name": "DEV_x",
    "full_name": "octo/DEV_x",
    "html_url": "https://github.example/octo/DEV_x",
    "clone_url": "https://github.example/octo/DEV_x.git",
}


def _client(responses, calls, **kwargs) -> GitHubClient:
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item

    http = httpx.Client(transport=httpx.MockTransport(handler))
    return GitHubClient(api_url=API, token="t0k", client=http, backoff=0, **kwargs)


def test_create_repository_success():
    calls = []
    gh = _client([httpx.Response(201, json=_CREATED)], calls)

    repo = gh.create_repository("DEV_x")

    assert repo.full_name == "octo/DEV_x"
    assert repo.clone_url.endswith("DEV_x.git")
    (request,) = calls
    assert request.method == "POST"
    assert str(request.url) == f"{API}/user/repos"
    assert request.headers["Authorization"] == "Bearer t0k"
    assert json.loads(request.content) == {"name": "DEV_x", "private": True}


def test_create_public_repository():
    calls = []
    gh = _client([httpx.Response(201, json=_CREATED)], calls)
    gh.create_repository("DEV_x", private=False)
    assert json.loads(calls[0].content)["private"] is False


def test_client_error_is_not_retried():
    calls = []
    gh = _client([httpx.Response(422, json={"message": "name already exists"})], calls)

    with pytest.raises(GitHubError) as e:
        gh.create_repository("DEV_x")

    assert e.value.status_code == 422
    assert e.value.payload == {"message": "name already exists"}
    assert not isinstance(e.value, TransientGitHubError)
    assert len(calls) == 1


def test_non_created_success_status_is_an_error():
    calls = []
    gh = _client([httpx.Response(200, json=_CREATED)], calls)
    with pytest.raises(GitHubError, match="status code: 200"):
        gh.create_repository("DEV_x")


def test_server_error_is_retried_until_success():
    calls = []
    gh = _client(
        [httpx.Response(502, text="bad gateway"), httpx.Response(201, json=_CREATED)],
        calls,
    )

    repo = gh.create_repository("DEV_x")

    assert repo.name == "DEV_x"
    assert len(calls) == 2


def test_server_error_gives_up_after_attempts():
    calls = []
    gh = _client([httpx.Response(503, text="unavailable")], calls, attempts=3)

    with pytest.raises(TransientGitHubError) as e:
        gh.create_repository("DEV_x")

    assert e.value.status_code == 503
    assert e.value.payload == {"raw": "unavailable"}
    assert len(calls) == 3


def test_transport_errors_are_retried():
    calls = []
    gh = _client(
        [httpx.ConnectError("refused"), httpx.Response(201, json=_CREATED)],
        calls,
    )
    assert gh.create_repository("DEV_x").name == "DEV_x"
    assert len(calls) == 2


def test_malformed_payload():
    calls = []
    gh = _client([httpx.Response(201, json={"name": "DEV_x"})], calls)
    with pytest.raises(GitHubError, match="parse"):
        gh.create_repository("DEV_x")


def test_from_settings_requires_token():
    with pytest.raises(GitHubError, match="GITHUB_TOKEN"):
        GitHubClient.from_settings(EnvbakerSettings())


def test_from_settings_uses_configured_api(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "abc")
    monkeypatch.setenv("ENVBAKER_GITHUB_API_URL", API + "/")
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(201, json=_CREATED)

    http = httpx.Client(transport=httpx.MockTransport(handler))
    with GitHubClient.from_settings(EnvbakerSettings(), client=http) as gh:
        gh.create_repository("DEV_x")

    assert str(calls[0].url) == f"{API}/user/repos"
    assert calls[0].headers["Authorization"] == "Bearer abc"
