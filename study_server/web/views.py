"""
View layer: the shared page layout and small HTML building helpers.

Everything here is a pure function of its arguments. Controllers escape record
values with `table` / `escape` before handing fragments to `render_layout`.
"""

from __future__ import annotations

from html import escape
from typing import Iterable, Sequence, Tuple

NAV_LINKS: Tuple[Tuple[str, str], ...] = (
    ("/", "🏠 Home"),
    ("/users", "👥 Users"),
    ("/products", "📦 Products"),
    ("/ssr", "📄 SSR demo"),
    ("/csr", "⚡ CSR demo"),
    ("/api/users", "📊 API"),
)

BADGES = {
    "ssr": "SSR",
    "csr": "CSR",
    "api": "API",
}

STYLESHEET = """
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
            padding: 20px;
        }
        .container {
            max-width: 1000px;
            margin: 0 auto;
            background: white;
            border-radius: 16px;
            box-shadow: 0 20px 60px rgba(0,0,0,0.3);
            padding: 40px;
        }
        h1 { color: #333; margin-bottom: 10px; }
        h2 { color: #667eea; margin: 30px 0 15px; }
        .subtitle { color: #666; margin-bottom: 30px; }
        nav { background: #f8f9fa; padding: 15px; border-radius: 8px; margin-bottom: 30px; }
        nav a { color: #667eea; text-decoration: none; margin-right: 20px; font-weight: 500; }
        nav a:hover { text-decoration: underline; }
        .badge {
            display: inline-block;
            padding: 4px 12px;
            border-radius: 20px;
            font-size: 12px;
            font-weight: bold;
            margin-left: 10px;
        }
        .badge-ssr { background: #d4edda; color: #155724; }
        .badge-csr { background: #cce5ff; color: #004085; }
        .badge-api { background: #fff3cd; color: #856404; }
        table { width: 100%; border-collapse: collapse; margin-top: 20px; }
        th, td { padding: 12px 15px; text-align: left; border-bottom: 1px solid #ddd; }
        th { background: #667eea; color: white; }
        tr:hover { background: #f5f5f5; }
        .code-block {
            background: #2d2d2d;
            color: #f8f8f2;
            padding: 20px;
            border-radius: 8px;
            overflow-x: auto;
            margin: 15px 0;
            font-family: 'Courier New', monospace;
            font-size: 14px;
            line-height: 1.6;
            white-space: pre;
        }
        .info-box {
            background: #e7f3ff;
            border-left: 4px solid #667eea;
            padding: 15px 20px;
            margin: 20px 0;
            border-radius: 0 8px 8px 0;
        }
        button {
            margin-top: 20px;
            padding: 10px 20px;
            background: #667eea;
            color: white;
            border: none;
            border-radius: 8px;
            cursor: pointer;
            font-size: 16px;
        }
        button:hover { background: #5568d3; }
        .loading { text-align: center; padding: 40px; color: #666; }
        .spinner {
            width: 40px;
            height: 40px;
            border: 4px solid #f3f3f3;
            border-top: 4px solid #667eea;
            border-radius: 50%;
            animation: spin 1s linear infinite;
            margin: 0 auto 20px;
        }
        @keyframes spin {
            0% { transform: rotate(0deg); }
            100% { transform: rotate(360deg); }
        }
        .card {
            background: #f8f9fa;
            padding: 20px;
            border-radius: 8px;
            margin: 15px 0;
            border-left: 4px solid #667eea;
        }
        .mvc-diagram {
            background: #f8f9fa;
            padding: 30px;
            border-radius: 8px;
            margin: 20px 0;
            font-family: monospace;
        }
"""


def render_layout(title: str, content: str, badge: str = "") -> str:
    """
    Wrap a content fragment in the full page document.

    `content` is trusted HTML; `title` is escaped. `badge` is one of the keys
    of `BADGES` or empty.
    """
    nav = "\n".join(
        f'            <a href="{href}">{label}</a>' for href, label in NAV_LINKS
    )
    badge_html = ""
    if badge in BADGES:
        badge_html = f'<span class="badge badge-{badge}">{BADGES[badge]}</span>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
    <style>{STYLESHEET}    </style>
</head>
<body>
    <div class="container">
        <nav>
{nav}
        </nav>
        {badge_html}
        {content}
    </div>
</body>
</html>"""


def table(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    """Render an HTML table, escaping every header and cell."""
    head = "".join(f"<th>{escape(str(h))}</th>" for h in headers)
    body = "\n".join(
        "<tr>" + "".join(f"<td>{escape(str(cell))}</td>" for cell in row) + "</tr>"
        for row in rows
    )
    return f"<table>\n<tr>{head}</tr>\n{body}\n</table>"


def link_table(rows: Iterable[Tuple[str, str]]) -> str:
    """Two-column table of (path, description) with the path as a link."""
    body = "\n".join(
        f'<tr><td><a href="{escape(path)}">{escape(path)}</a></td><td>{escape(desc)}</td></tr>'
        for path, desc in rows
    )
    return f"<table>\n<tr><th>URL</th><th>Description</th></tr>\n{body}\n</table>"


def format_yen(amount: int) -> str:
    return f"¥{amount:,}"
