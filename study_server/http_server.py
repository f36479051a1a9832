from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from mcp import types
from mcp.server import Server

from .config import Settings, get_settings
from .errors import ToolValidationError, UnknownToolError
from .main import create_server_with_registry
from .tools import ToolRegistry

logger = logging.getLogger(__name__)

VERSION = "0.1.0"
PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def _error(
    message_id: Any,
    code: int,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": message_id, "error": error}


def _result(message_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message_id, "result": result}


def create_http_app(
    settings: Optional[Settings] = None,
    registry: Optional[ToolRegistry] = None,
) -> FastAPI:
    """
    Create FastAPI app that wraps the MCP server for HTTP/SSE transport.

    MCP over HTTP/SSE:
    - Client sends POST requests with JSON-RPC messages in body
    - Server responds with SSE stream containing JSON-RPC responses
    - Each SSE event format: "data: <json-rpc-response>\\n\\n"
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Study MCP Server",
        version=VERSION,
        description="MCP tool server: arithmetic, postal-code lookup, GitHub pull requests",
    )

    # Create the MCP server instance and registry (shared across requests)
    mcp_server, registry = create_server_with_registry(settings, registry)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok", "service": mcp_server.name}

    @app.get("/")
    async def root():
        """Root endpoint with service info."""
        return {
            "service": mcp_server.name,
            "version": VERSION,
            "protocol": "mcp",
            "transport": "http/sse",
            "tools": len(registry),
            "endpoints": {
                "health": "/health",
                "mcp_stream": "/mcp/stream",
            },
        }

    @app.post("/mcp/stream")
    async def mcp_stream(request: Request):
        """
        MCP SSE stream endpoint.

        Supported MCP methods:
        - initialize: Server initialization handshake
        - tools/list: List available tools
        - tools/call: Execute a tool
        """
        body = await request.body()
        if not body:
            return JSONResponse(
                _error(None, INVALID_REQUEST, "Invalid Request: empty body"),
                status_code=400,
            )

        try:
            message = json.loads(body)
        except json.JSONDecodeError as e:
            return JSONResponse(
                _error(None, PARSE_ERROR, f"Parse error: {e}"),
                status_code=400,
            )

        if not isinstance(message, dict):
            return JSONResponse(
                _error(None, INVALID_REQUEST, "Invalid Request: expected an object"),
                status_code=400,
            )

        message_id = message.get("id")

        # Validate JSON-RPC 2.0 format
        if message.get("jsonrpc") != "2.0":
            return JSONResponse(
                _error(message_id, INVALID_REQUEST, "Invalid Request: jsonrpc must be '2.0'"),
                status_code=400,
            )

        method = message.get("method")
        if not method:
            return JSONResponse(
                _error(message_id, INVALID_REQUEST, "Invalid Request: method is required"),
                status_code=400,
            )

        params = message.get("params") or {}

        async def generate_sse() -> AsyncIterator[str]:
            """Generate SSE events from MCP server responses."""
            response = await handle_mcp_request(mcp_server, registry, method, params, message_id)
            yield f"data: {json.dumps(response, ensure_ascii=False)}\n\n"

        return StreamingResponse(
            generate_sse(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering
            },
        )

    return app


async def handle_mcp_request(
    server: Server,
    registry: ToolRegistry,
    method: str,
    params: Dict[str, Any],
    message_id: Any,
) -> Dict[str, Any]:
    """
    Handle one MCP JSON-RPC request and build the JSON-RPC response.

    Registry errors map onto protocol errors; tool handlers themselves report
    upstream failures inside a normal result.
    """
    try:
        if method == "initialize":
            return _result(
                message_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {"tools": {"listChanged": False}},
                    "serverInfo": {"name": server.name, "version": VERSION},
                },
            )

        elif method == "tools/list":
            tools = registry.list_tools()
            return _result(
                message_id,
                {"tools": [tool.model_dump(exclude_none=True) for tool in tools]},
            )

        elif method == "tools/call":
            tool_name = params.get("name")
            arguments = params.get("arguments") or {}

            if not tool_name:
                return _error(message_id, INVALID_PARAMS, "Invalid params: 'name' is required")

            try:
                result = await registry.invoke(tool_name, arguments)
            except UnknownToolError:
                return _error(message_id, METHOD_NOT_FOUND, f"Tool not found: {tool_name}")
            except ToolValidationError as e:
                return _error(
                    message_id,
                    INVALID_PARAMS,
                    f"Invalid params: {e}",
                    data={"field": e.field, "constraint": e.constraint},
                )

            content = types.TextContent(type="text", text=result)
            call_result = types.CallToolResult(content=[content])
            return _result(message_id, call_result.model_dump(exclude_none=True))

        else:
            return _error(message_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    except Exception as e:
        logger.exception("Error handling MCP method %s", method)
        return _error(message_id, INTERNAL_ERROR, f"Internal error: {e}")


async def run_http_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the HTTP server using uvicorn."""
    import uvicorn

    app = create_http_app()
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        access_log=True,
    )
    server = uvicorn.Server(config)
    await server.serve()
