from __future__ import annotations

import logging
from typing import Any, Dict

from mcp import types

from ..errors import UpstreamError
from ..zipcloud_client import ZipCloudClient
from . import ToolRegistry

logger = logging.getLogger(__name__)


async def _handle_address(
    zipcloud_client: ZipCloudClient,
    arguments: Dict[str, Any],
) -> str:
    """
    Resolve a 7-digit Japanese postal code to prefecture + city + town.

    Only the first match is used; zipcloud returns several for codes shared by
    more than one town.
    """
    zipcode = arguments["zipcode"]
    try:
        result = await zipcloud_client.search(zipcode)
        status = result.get("status")
        results = result.get("results") or []
        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise UpstreamError("Unexpected response body")
    except UpstreamError as e:
        logger.warning("Address lookup for %s failed: %s", zipcode, e)
        return f"Error while searching address: {e}"

    if status != 200 or not results:
        return f"Address not found (status: {status})"

    address = results[0]
    return "".join(str(address.get(key) or "") for key in ("address1", "address2", "address3"))


def register_tools(registry: ToolRegistry, zipcloud_client: ZipCloudClient) -> None:
    address_schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "zipcode": {
                "type": "string",
                "minLength": 7,
                "maxLength": 7,
                "pattern": "^[0-9]{7}$",
                "description": "7-digit postal code without hyphen, e.g. '1000001'.",
            },
        },
        "required": ["zipcode"],
    }

    registry.add_tool(
        types.Tool(
            name="address",
            description="Search Japanese address by postal code",
            inputSchema=address_schema,
        ),
        lambda args: _handle_address(zipcloud_client, args),
    )
