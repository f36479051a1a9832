from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)


class ZipCloudClient:
    """Thin async client for the zipcloud Japanese postal-code search API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def search(self, zipcode: str) -> Dict[str, Any]:
        """
        Look up `zipcode` and return the decoded response body.

        zipcloud reports lookup failures in the body (`status` and `message`)
        with an HTTP 200, so only transport errors and malformed bodies raise.
        """
        logger.info("zipcloud search zipcode=%s", zipcode)
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.http_timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    self._settings.zipcloud_api_url,
                    params={"zipcode": zipcode},
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # InvalidURL is not an HTTPError; a malformed zipcloud_api_url raises it
            raise UpstreamError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise UpstreamError(f"Invalid response body: {e}") from e

        if not isinstance(body, dict):
            raise UpstreamError("Unexpected response body")
        return body
