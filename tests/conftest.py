"""Test configuration and fixtures."""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from study_server.config import Settings
from study_server.github_client import GitHubClient
from study_server.main import build_registry
from study_server.zipcloud_client import ZipCloudClient


class FakeUpstream:
    """Routes outgoing httpx requests to canned responses and records them."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def on(self, path: str, status_code: int = 200, json_body: Any = None, text: str = "") -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if json_body is not None:
                return httpx.Response(status_code, json=json_body)
            return httpx.Response(status_code, text=text)

        self._responses[path] = respond

    def fail(self, path: str, exc: Exception) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            raise exc

        self._responses[path] = respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        respond = self._responses.get(request.url.path)
        if respond is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        github_token="test-token",
        github_owner="octo",
        github_api_url="https://api.github.test",
        zipcloud_api_url="https://zipcloud.test/api/search",
        ssr_delay_seconds=0,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def transport(upstream: FakeUpstream) -> httpx.MockTransport:
    return httpx.MockTransport(upstream)


@pytest.fixture
def github_client(settings: Settings, transport: httpx.MockTransport) -> GitHubClient:
    return GitHubClient(settings, transport=transport)


@pytest.fixture
def zipcloud_client(settings: Settings, transport: httpx.MockTransport) -> ZipCloudClient:
    return ZipCloudClient(settings, transport=transport)


@pytest.fixture
def registry(settings, github_client, zipcloud_client):
    return build_registry(settings, github_client=github_client, zipcloud_client=zipcloud_client)
