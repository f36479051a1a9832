"""
Study server package.

This package contains two small programs built around the same idea, a table
mapping a request key to a handler:
- An MCP tool server (arithmetic, Japanese postal-code lookup, GitHub pull
  request queries) over stdio or HTTP/SSE
- A tutorial web server demonstrating routing and the MVC pattern
"""
