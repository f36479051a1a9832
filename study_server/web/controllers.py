"""
Controller layer of the web demo.

Each controller pulls records from a model store, builds the page fragment
through the view helpers and returns the finished response. Controllers get
their stores at construction time; nothing here reads module-level state.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from html import escape
from typing import Callable, List

import anyio
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

from .models import FixtureStore, Product, User
from .routing import Route
from .views import format_yen, link_table, render_layout, table

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json; charset=utf-8"

HOME_TITLE = "Web Server Demo - Routing and MVC"
USERS_TITLE = "Users - MVC example"
PRODUCTS_TITLE = "Products - MVC example"
SSR_TITLE = "SSR demo - Server-side rendering"
CSR_TITLE = "CSR demo - Client-side rendering"
NOT_FOUND_TITLE = "404 Not Found"

USER_HEADERS = ("ID", "Name", "Email", "Role", "Department")
PRODUCT_HEADERS = ("ID", "Name", "Price", "Category", "Stock")

MVC_DIAGRAM = """
+---------------------------------------------+
|              Client (browser)               |
+----------------------+----------------------+
                       | HTTP request
                       v
+---------------------------------------------+
|         Routing (web/routing.py)            |
|     picks a controller for the URL          |
+----------------------+----------------------+
                       |
                       v
           +-----------------------+
           |   Controller layer    |  <- receives the request
           | (web/controllers.py)  |     asks the Model for data
           +-----------+-----------+     hands data to the View
                       |
           +-----------+-----------+
           v                       v
   +---------------+       +---------------+
   |  Model layer  |       |  View layer   |
   | web/models.py |       | web/views.py  |
   |  data access  |       |  HTML output  |
   +---------------+       +---------------+
"""

CSR_SCRIPT = """
<script>
    function escapeHtml(value) {
        return String(value)
            .replace(/&/g, '&amp;').replace(/</g, '&lt;').replace(/>/g, '&gt;')
            .replace(/"/g, '&quot;').replace(/'/g, '&#39;');
    }

    async function fetchUsers() {
        const container = document.getElementById('user-list');
        container.innerHTML = '<div class="loading"><div class="spinner"></div><p>Fetching data from the API...</p></div>';

        await new Promise(resolve => setTimeout(resolve, 1000));

        try {
            const response = await fetch('/api/users');
            const data = await response.json();
            const rows = data.users.map(user => `
                <tr>
                    <td>${escapeHtml(user.id)}</td>
                    <td>${escapeHtml(user.name)}</td>
                    <td>${escapeHtml(user.email)}</td>
                    <td>${escapeHtml(user.role)}</td>
                </tr>`).join('');
            container.innerHTML = `
                <p style="color: #666; margin-bottom: 10px;">Fetched at: ${new Date().toLocaleString()}</p>
                <table>
                    <tr><th>ID</th><th>Name</th><th>Email</th><th>Role</th></tr>
                    ${rows}
                </table>`;
        } catch (error) {
            container.innerHTML = '<p style="color: red;">Something went wrong: ' + escapeHtml(error.message) + '</p>';
        }
    }

    fetchUsers();
</script>
"""


def iso_timestamp() -> str:
    """UTC time as `YYYY-MM-DDTHH:MM:SS.sssZ`, the format browsers produce with `toISOString()`."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


def html_page(title: str, content: str, status_code: int = 200, badge: str = "") -> HTMLResponse:
    return HTMLResponse(render_layout(title, content, badge), status_code=status_code)


def _user_rows(users: List[User], with_department: bool = True) -> List[tuple]:
    if with_department:
        return [(u.id, u.name, u.email, u.role, u.department) for u in users]
    return [(u.id, u.name, u.email, u.role) for u in users]


class Controllers:
    """
    Route handlers for the demo site.

    `routes` returns the currently registered routes; the home and 404 pages
    list them so the pages always match the real routing table.
    """

    def __init__(
        self,
        users: FixtureStore[User],
        products: FixtureStore[Product],
        routes: Callable[[], List[Route]],
        ssr_delay_seconds: float = 1.0,
    ) -> None:
        self._users = users
        self._products = products
        self._routes = routes
        self._ssr_delay_seconds = ssr_delay_seconds

    def _route_rows(self) -> List[tuple]:
        return [(r.path, r.description) for r in self._routes()]

    async def index(self, request: Request) -> Response:
        logger.info("[Controller] index")
        mapping = "\n".join(
            f"{r.method} {r.path:<12} -> {escape(r.description)}" for r in self._routes()
        )
        content = f"""
        <h1>🌐 How a web server works</h1>
        <p class="subtitle">Study session - routing and the MVC pattern</p>

        <h2>📚 What this demo covers</h2>
        <div class="info-box">
            <ul style="padding-left: 20px; line-height: 2;">
                <li><strong>Routing</strong>: dispatch each URL to the right controller</li>
                <li><strong>MVC</strong>: split the work into Model, View and Controller</li>
                <li><strong>SSR vs CSR</strong>: two ways of rendering a page</li>
            </ul>
        </div>

        <h2>🔄 Routing</h2>
        <div class="card">
            <h3>URL to controller mapping</h3>
            <div class="code-block">{mapping}</div>
            <p style="margin-top: 15px;">
                Each request is matched on its exact method and path. The server log
                shows which controller handled it.
            </p>
        </div>

        <h2>🏗️ MVC</h2>
        <div class="mvc-diagram"><pre style="line-height: 1.6; text-align: left; font-size: 14px;">{escape(MVC_DIAGRAM)}</pre></div>

        <h2>🧪 Demo pages</h2>
        {link_table(self._route_rows())}
        """
        return html_page(HOME_TITLE, content)

    async def list_users(self, request: Request) -> Response:
        logger.info("[Controller] list_users")
        users = self._users.list()
        content = f"""
        <h1>👥 Users</h1>
        <p class="subtitle">Controllers.list_users -> users store</p>

        <div class="info-box">
            <strong>📊 MVC flow</strong><br>
            1. Routing: <code>/users</code> -> <code>Controllers.list_users()</code><br>
            2. Controller: calls <code>users.list()</code><br>
            3. Model: returns the user records<br>
            4. Controller: embeds the records in HTML and responds
        </div>

        <h2>📋 User data</h2>
        {table(USER_HEADERS, _user_rows(users))}

        <button onclick="location.reload()">🔄 Reload data</button>
        """
        return html_page(USERS_TITLE, content)

    async def list_products(self, request: Request) -> Response:
        logger.info("[Controller] list_products")
        products = self._products.list()
        rows = [
            (p.id, p.name, format_yen(p.price), p.category, p.stock) for p in products
        ]
        content = f"""
        <h1>📦 Products</h1>
        <p class="subtitle">Controllers.list_products -> products store</p>

        <div class="info-box">
            <strong>🔄 Different routes, same pattern</strong><br>
            <code>/users</code> -> list_users -> users store<br>
            <code>/products</code> -> list_products -> products store
        </div>

        <h2>📋 Product data</h2>
        {table(PRODUCT_HEADERS, rows)}

        <button onclick="location.reload()">🔄 Reload data</button>
        """
        return html_page(PRODUCTS_TITLE, content)

    async def ssr(self, request: Request) -> Response:
        logger.info("[Controller] ssr, rendering on the server")
        # Simulated data-store latency; other requests keep being served meanwhile.
        await anyio.sleep(self._ssr_delay_seconds)

        users = self._users.list()
        server_time = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        content = f"""
        <h1>📄 SSR (server-side rendering) demo</h1>
        <p class="subtitle">This page was rendered to complete HTML on the server</p>

        <div class="info-box">
            <strong>💡 SSR</strong><br>
            The server fetches the data and builds the HTML before sending it.
            The browser only displays the result, so it works without JavaScript.
        </div>

        <h2>⏱️ Server render time</h2>
        <p>This HTML was generated at: <strong>{server_time}</strong></p>
        <p>(Reloading the page updates the time.)</p>

        <h2>👥 Users (rendered on the server)</h2>
        {table(USER_HEADERS[:4], _user_rows(users, with_department=False))}

        <button onclick="location.reload()">🔄 Refetch (reloads the whole page)</button>
        """
        return html_page(SSR_TITLE, content, badge="ssr")

    async def csr(self, request: Request) -> Response:
        logger.info("[Controller] csr")
        content = f"""
        <h1>⚡ CSR (client-side rendering) demo</h1>
        <p class="subtitle">The browser fetches data from the API and renders it</p>

        <div class="info-box">
            <strong>💡 CSR</strong><br>
            The server sends an empty shell plus JavaScript; the browser calls the
            API and builds the UI, so data can refresh without a page load.
        </div>

        <h2>👥 Users (from the API)</h2>
        <div id="user-list">
            <div class="loading">
                <div class="spinner"></div>
                <p>Fetching data from the API...</p>
            </div>
        </div>

        <button onclick="fetchUsers()">🔄 Refetch</button>
        {CSR_SCRIPT}
        """
        return html_page(CSR_TITLE, content, badge="csr")

    async def api_users(self, request: Request) -> Response:
        logger.info("[Controller] api_users")
        users = self._users.list()
        payload = {
            "success": True,
            "timestamp": iso_timestamp(),
            "count": len(users),
            "users": [u.model_dump() for u in users],
        }
        return Response(
            json.dumps(payload, indent=2, ensure_ascii=False),
            media_type=JSON_MEDIA_TYPE,
            headers={"Access-Control-Allow-Origin": "*"},
        )

    async def not_found(self, request: Request) -> Response:
        path = request.url.path
        logger.warning("[Controller] not_found for %s %s", request.method, path)
        content = f"""
        <h1>😵 404 - Page not found</h1>
        <p class="subtitle">Requested URL: {escape(path)}</p>
        <div class="info-box">
            <p>No page exists for this URL.</p>
            <p>The routing table has no handler for this method and path.</p>
        </div>

        <h2>📋 Available routes</h2>
        {link_table(self._route_rows())}
        """
        return html_page(NOT_FOUND_TITLE, content, status_code=404)
