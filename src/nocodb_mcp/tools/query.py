"""Query and analytics tools: advanced listing, aggregate and group by.

aggregate and group_by run client-side over one page of records (see
nocodb_mcp.aggregation). For large tables pass a where clause that keeps
the matching set within one page.
"""

from typing import Any

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.query import QueryOptions

DEFAULT_QUERY_LIMIT = 25


async def query(
    client: NocoDBClient,
    table_name: str,
    base_id: str = "",
    where: str | None = None,
    sort: list[str] | None = None,
    fields: list[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    """Execute an advanced query with filtering, sorting, and field selection."""
    options = QueryOptions(
        where=where,
        sort=sort,
        fields=fields,
        limit=limit or DEFAULT_QUERY_LIMIT,
        offset=offset or 0,
    )
    result = await client.list_records(client.base_id(base_id), table_name, options)
    records = result.get("list", [])
    return {
        "records": records,
        "pageInfo": result.get("pageInfo"),
        "count": len(records),
        "query": {
            "where": where,
            "sort": sort,
            "fields": fields,
            "limit": limit,
            "offset": offset,
        },
    }


async def aggregate(
    client: NocoDBClient,
    table_name: str,
    column_name: str,
    function: str,
    base_id: str = "",
    where: str | None = None,
) -> dict[str, Any]:
    """Aggregate a column: count, sum, avg, min or max."""
    value = await client.aggregate(
        client.base_id(base_id), table_name, column_name, function, where=where
    )
    return {
        "value": value,
        "aggregation": {"column": column_name, "function": function, "where": where},
    }


async def group_by(
    client: NocoDBClient,
    table_name: str,
    column_name: str,
    base_id: str = "",
    where: str | None = None,
    sort: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    """Group records by a column and count each group."""
    options = QueryOptions(where=where, sort=sort, limit=limit, offset=offset)
    groups = await client.group_by(client.base_id(base_id), table_name, column_name, options)
    return {"groups": groups, "count": len(groups), "column": column_name}
