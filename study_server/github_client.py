from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/vnd.github.v3+json"
DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
PATCH_MEDIA_TYPE = "application/vnd.github.v3.patch"


class GitHubClient:
    """
    Minimal async wrapper around the GitHub REST API.

    Requests are scoped to the configured owner: callers pass only the
    repository name and the path below it. Every failure, whether transport
    level or a non-2xx status, is raised as `UpstreamError` carrying GitHub's
    own `message` when the response has one.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _headers(self, accept: str) -> Dict[str, str]:
        headers = {"Accept": accept}
        if self._settings.github_token:
            headers["Authorization"] = f"token {self._settings.github_token}"
        return headers

    def _repo_path(self, repo: str, path: str) -> str:
        return f"/repos/{self._settings.github_owner}/{repo}{path}"

    async def _request(
        self,
        method: str,
        url: str,
        accept: str = JSON_MEDIA_TYPE,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        logger.info("GitHub %s %s params=%s", method, url, params)
        try:
            async with httpx.AsyncClient(
                base_url=self._settings.github_api_url,
                timeout=self._settings.http_timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(accept),
                    params=params,
                    json=json_body,
                )
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                _error_detail(e.response) or str(e),
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL is not an HTTPError; a repo name with control characters raises it
            raise UpstreamError(str(e) or type(e).__name__) from e

    async def get_json(
        self, repo: str, path: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        response = await self._request("GET", self._repo_path(repo, path), params=params)
        return _decode(response)

    async def get_text(self, repo: str, path: str, accept: str) -> str:
        response = await self._request("GET", self._repo_path(repo, path), accept=accept)
        return response.text

    async def post_json(self, repo: str, path: str, body: Dict[str, Any]) -> Any:
        response = await self._request(
            "POST", self._repo_path(repo, path), json_body=body
        )
        return _decode(response)


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(f"Invalid response body: {e}", response.status_code) from e


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("message")
    return None
