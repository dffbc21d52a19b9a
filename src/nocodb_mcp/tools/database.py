"""Base (project) discovery tools."""

from typing import Any

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.models import BASE_SUMMARY_KEYS, pick


async def list_bases(client: NocoDBClient) -> dict[str, Any]:
    """List all NocoDB bases/projects visible to the configured token."""
    bases = await client.list_bases()
    return {
        "bases": [pick(base, BASE_SUMMARY_KEYS) for base in bases],
        "count": len(bases),
    }


async def get_base_info(client: NocoDBClient, base_id: str = "") -> dict[str, Any]:
    """Get detailed information about a specific base/project."""
    base = await client.get_base(client.base_id(base_id))
    return {"base": pick(base, BASE_SUMMARY_KEYS)}
