from __future__ import annotations

import logging
from typing import Optional

import anyio
from fastapi import FastAPI, Request

from ..config import Settings, configure_logging, get_settings
from .controllers import Controllers
from .models import FixtureStore, Product, User, product_store, user_store
from .routing import RouteTable

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def build_route_table(controllers: Controllers) -> RouteTable:
    table = RouteTable(fallback=controllers.not_found)
    table.get("/", controllers.index, "Home (this page)")
    table.get("/users", controllers.list_users, "User list (model -> data)")
    table.get("/products", controllers.list_products, "Product list (model -> data)")
    table.get("/ssr", controllers.ssr, "SSR demo (HTML built on the server)")
    table.get("/csr", controllers.csr, "CSR demo (browser fetches the API)")
    table.get("/api/users", controllers.api_users, "User API (JSON)")
    return table


def create_web_app(
    settings: Optional[Settings] = None,
    users: Optional[FixtureStore[User]] = None,
    products: Optional[FixtureStore[Product]] = None,
) -> FastAPI:
    """
    Create the tutorial web app.

    FastAPI only provides the HTTP plumbing here: a single catch-all route
    hands every request to the exact-match `RouteTable`, which is the piece
    the demo is about. The generated API docs are disabled so that every path
    goes through the table.
    """
    settings = settings or get_settings()
    route_table: Optional[RouteTable] = None

    def registered_routes():
        return route_table.routes() if route_table else []

    controllers = Controllers(
        users=users or user_store(),
        products=products or product_store(),
        routes=registered_routes,
        ssr_delay_seconds=settings.ssr_delay_seconds,
    )
    route_table = build_route_table(controllers)

    app = FastAPI(
        title="Web Server Demo",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.route_table = route_table

    @app.api_route("/{full_path:path}", methods=HTTP_METHODS, include_in_schema=False)
    async def dispatch(request: Request):
        return await route_table.dispatch(request)

    return app


async def run_web_server(host: str = "localhost", port: int = 3000) -> None:
    """Run the web demo using uvicorn."""
    import uvicorn

    app = create_web_app()
    for route in app.state.route_table.routes():
        logger.info("Route: %-4s %-10s %s", route.method, route.path, route.description)

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        access_log=True,
    )
    server = uvicorn.Server(config)
    logger.info("Web server demo listening on http://%s:%d", host, port)
    await server.serve()


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    anyio.run(run_web_server, settings.web_host, settings.web_port)


if __name__ == "__main__":
    main()
