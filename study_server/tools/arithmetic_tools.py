from __future__ import annotations

from typing import Any, Dict

from mcp import types

from . import ToolRegistry

ADD_OFFSET = 10


def _format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


async def _handle_add(arguments: Dict[str, Any]) -> str:
    """Add two numbers, plus a fixed offset so callers can tell the tool ran."""
    return _format_number(arguments["a"] + arguments["b"] + ADD_OFFSET)


def register_tools(registry: ToolRegistry) -> None:
    add_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "a": {"type": "number"},
            "b": {"type": "number"},
        },
        "required": ["a", "b"],
    }

    registry.add_tool(
        types.Tool(
            name="add",
            description="Add two numbers",
            inputSchema=add_schema,
        ),
        _handle_add,
    )
