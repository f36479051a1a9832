"""
Tool registration utilities.

Each module in this package exposes a `register_tools(registry)` function that
adds its tools to the central registry used by the MCP server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from jsonschema import Draft7Validator
from jsonschema.exceptions import ValidationError, best_match
from mcp import types

from ..errors import DuplicateNameError, ToolValidationError, UnknownToolError

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Awaitable[str]]


@dataclass
class RegisteredTool:
    spec: types.Tool
    handler: ToolHandler
    validator: Draft7Validator = field(init=False)

    def __post_init__(self) -> None:
        Draft7Validator.check_schema(self.spec.inputSchema)
        self.validator = Draft7Validator(self.spec.inputSchema)


class ToolRegistry:
    """
    In-memory registry mapping MCP tool names to their specifications and handlers.

    Arguments are validated against the tool's `inputSchema` before the handler
    runs, so handlers only ever see well-formed input with defaults filled in.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, RegisteredTool] = {}

    def add_tool(self, tool: types.Tool, handler: ToolHandler) -> None:
        if tool.name in self._tools:
            raise DuplicateNameError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = RegisteredTool(spec=tool, handler=handler)

    def list_tools(self) -> List[types.Tool]:
        return [rt.spec for rt in self._tools.values()]

    def get_handler(self, name: str) -> ToolHandler:
        return self._get(name).handler

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    async def invoke(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        """
        Validate `arguments` against the schema of `name` and run its handler.

        Raises `UnknownToolError` or `ToolValidationError` before the handler is
        touched. Whatever the handler returns is passed back unchanged.
        """
        registered = self._get(name)
        args = _apply_defaults(registered.spec.inputSchema, arguments or {})

        error = best_match(registered.validator.iter_errors(args))
        if error is not None:
            raise _to_validation_error(error)

        logger.debug("Invoking tool %s", name)
        return await registered.handler(args)

    def _get(self, name: str) -> RegisteredTool:
        if name not in self._tools:
            raise UnknownToolError(name)
        return self._tools[name]


def _apply_defaults(schema: Dict[str, Any], arguments: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(arguments, dict):
        return arguments
    filled = dict(arguments)
    for prop, prop_schema in schema.get("properties", {}).items():
        if prop not in filled and "default" in prop_schema:
            filled[prop] = prop_schema["default"]
    return filled


def _to_validation_error(error: ValidationError) -> ToolValidationError:
    path = [str(p) for p in error.absolute_path]
    if error.validator == "required" and isinstance(error.instance, dict):
        # jsonschema reports missing properties against the parent object
        missing = [p for p in error.validator_value if p not in error.instance]
        if missing:
            path.append(missing[0])
    field_path = ".".join(path) or "<root>"
    return ToolValidationError(field_path, str(error.validator), error.message)
