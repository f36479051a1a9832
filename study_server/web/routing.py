from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Tuple

from starlette.requests import Request
from starlette.responses import Response

from ..errors import DuplicateNameError, NotFoundError

logger = logging.getLogger(__name__)

RouteHandler = Callable[[Request], Awaitable[Response]]
RouteKey = Tuple[str, str]


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    handler: RouteHandler
    description: str = ""


def _handler_name(handler: RouteHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def normalize_path(path: str) -> str:
    """Drop any query string; routes match on the bare path only."""
    return path.split("?", 1)[0] or "/"


class RouteTable:
    """
    Exact-match dispatch table keyed by (HTTP method, path).

    There are no path parameters or wildcards: `/users/1` and `/users` are
    unrelated keys. Supporting parameters would need a real matcher in
    `lookup`.

    A matched handler owns the whole response. Requests matching nothing go
    to the single `fallback` handler.
    """

    def __init__(self, fallback: RouteHandler) -> None:
        self._routes: Dict[RouteKey, Route] = {}
        self._fallback = fallback

    def register(
        self,
        method: str,
        path: str,
        handler: RouteHandler,
        description: str = "",
    ) -> None:
        key = (method.upper(), normalize_path(path))
        if key in self._routes:
            raise DuplicateNameError(f"Route '{key[0]} {key[1]}' already registered")
        self._routes[key] = Route(key[0], key[1], handler, description)

    def get(self, path: str, handler: RouteHandler, description: str = "") -> None:
        self.register("GET", path, handler, description)

    def routes(self) -> List[Route]:
        return list(self._routes.values())

    def lookup(self, method: str, path: str) -> Route:
        key = (method.upper(), normalize_path(path))
        try:
            return self._routes[key]
        except KeyError:
            raise NotFoundError(*key) from None

    async def dispatch(self, request: Request) -> Response:
        logger.info("Request received: %s %s", request.method, request.url)
        logger.debug("Request headers: %s", dict(request.headers))

        try:
            route = self.lookup(request.method, request.url.path)
        except NotFoundError as e:
            logger.info("Routing: %s %s -> no route, rendering 404", e.method, e.path)
            response = await self._fallback(request)
        else:
            logger.info(
                "Routing: %s %s -> %s", route.method, route.path, _handler_name(route.handler)
            )
            response = await route.handler(request)

        logger.info(
            "Response sent: %s (%s, %d bytes)",
            response.status_code,
            response.media_type,
            len(getattr(response, "body", b"")),
        )
        return response
