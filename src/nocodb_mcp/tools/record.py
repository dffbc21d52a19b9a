"""Record CRUD and search tools.

Tables are addressed by name (table_name or title); the name is resolved to
a table id on every call. Record ids are the backend's numeric row ids.

NocoDB where syntax: "(field,op,value)" joined with ~and / ~or / ~not,
e.g. "(status,eq,active)~and(priority,gt,5)".
"""

from typing import Any

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.models import Record
from nocodb_mcp.query import QueryOptions


async def insert_record(
    client: NocoDBClient, table_name: str, data: Record, base_id: str = ""
) -> dict[str, Any]:
    """Insert a single record into a table."""
    record = await client.create_record(client.base_id(base_id), table_name, data)
    return {"record": record, "message": "Record inserted successfully"}


async def bulk_insert(
    client: NocoDBClient, table_name: str, records: list[Record], base_id: str = ""
) -> dict[str, Any]:
    """Insert multiple records in a single request."""
    inserted = await client.bulk_insert(client.base_id(base_id), table_name, records)
    count = len(inserted) if isinstance(inserted, list) else len(records)
    return {
        "records": inserted,
        "count": count,
        "message": f"{count} records inserted successfully",
    }


async def get_record(
    client: NocoDBClient, table_name: str, record_id: str, base_id: str = ""
) -> dict[str, Any]:
    record = await client.get_record(client.base_id(base_id), table_name, record_id)
    return {"record": record}


async def list_records(
    client: NocoDBClient,
    table_name: str,
    base_id: str = "",
    where: str | None = None,
    sort: str | list[str] | None = None,
    fields: str | list[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
    view_id: str | None = None,
) -> dict[str, Any]:
    """List records with optional filtering, sorting, field subset and pagination."""
    options = QueryOptions(
        where=where, sort=sort, fields=fields, limit=limit, offset=offset, view_id=view_id
    )
    result = await client.list_records(client.base_id(base_id), table_name, options)
    records = result.get("list", [])
    return {"records": records, "pageInfo": result.get("pageInfo"), "count": len(records)}


async def update_record(
    client: NocoDBClient, table_name: str, record_id: str, data: Record, base_id: str = ""
) -> dict[str, Any]:
    """Update fields of one record, addressed through the table's primary key."""
    record = await client.update_record(client.base_id(base_id), table_name, record_id, data)
    return {"record": record, "message": "Record updated successfully"}


async def delete_record(
    client: NocoDBClient, table_name: str, record_id: str, base_id: str = ""
) -> dict[str, Any]:
    await client.delete_record(client.base_id(base_id), table_name, record_id)
    return {"message": "Record deleted successfully", "record_id": record_id}


async def search_records(
    client: NocoDBClient,
    table_name: str,
    query: str,
    base_id: str = "",
    where: str | None = None,
    sort: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    """Case-insensitive substring search across all fields of one page.

    ``pageInfo`` describes the page fetched before filtering.
    """
    options = QueryOptions(where=where, sort=sort, limit=limit, offset=offset)
    result = await client.search_records(client.base_id(base_id), table_name, query, options)
    return {
        "records": result["list"],
        "pageInfo": result["pageInfo"],
        "count": len(result["list"]),
        "query": query,
    }
