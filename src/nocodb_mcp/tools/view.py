"""View tools: list, create, and read records through a view."""

from typing import Any

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.query import QueryOptions

_VIEW_KEYS = (
    "id",
    "title",
    "type",
    "fk_model_id",
    "show_system_fields",
    "lock_type",
    "created_at",
    "updated_at",
)


async def list_views(client: NocoDBClient, table_id: str) -> dict[str, Any]:
    views = await client.list_views(table_id)
    return {
        "views": [{key: view.get(key) for key in _VIEW_KEYS} for view in views],
        "count": len(views),
    }


async def create_view(
    client: NocoDBClient, table_id: str, title: str, type: int = 1
) -> dict[str, Any]:
    """Create a view. ``type``: 1=Grid, 2=Gallery, 3=Form, 4=Kanban, 5=Calendar."""
    view = await client.create_view(table_id, title, type or 1)
    keys = ("id", "title", "type", "fk_model_id", "created_at", "updated_at")
    return {
        "view": {key: view.get(key) for key in keys},
        "message": f"View '{view.get('title')}' created successfully",
    }


async def get_view_data(
    client: NocoDBClient,
    table_name: str,
    view_id: str,
    base_id: str = "",
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    """List records as seen through a saved view."""
    options = QueryOptions(view_id=view_id, limit=limit, offset=offset)
    result = await client.list_records(client.base_id(base_id), table_name, options)
    records = result.get("list", [])
    return {
        "records": records,
        "pageInfo": result.get("pageInfo"),
        "count": len(records),
        "view_id": view_id,
    }
