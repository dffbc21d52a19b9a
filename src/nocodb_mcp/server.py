"""NocoDB MCP Server - Entry point.

Registers all tools with FastMCP and handles lifecycle.
Run via: nocodb-mcp serve
"""

import json
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.catalog import get_tool
from nocodb_mcp.config import settings
from nocodb_mcp.errors import NocoDBError

# Configure logging (stderr: stdout carries the MCP protocol)
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# Client shared by all tool calls for the lifetime of the server.
_state: dict[str, NocoDBClient] = {}


def get_client() -> NocoDBClient:
    client = _state.get("client")
    if client is None:
        client = NocoDBClient(settings.connection())
        _state["client"] = client
    return client


@asynccontextmanager
async def lifespan(app: FastMCP) -> AsyncIterator[None]:
    """Server lifecycle: build the client on startup, close it on shutdown."""
    client = get_client()
    logger.info("Connected to NocoDB at %s", client.config.base_url)
    if client.config.default_base:
        logger.info("Default base: %s", client.config.default_base)
    try:
        yield
    finally:
        await client.close()
        _state.pop("client", None)


def render(result: Any) -> str:
    return json.dumps(result, indent=2, default=str)


async def run_tool(name: str, **arguments: Any) -> str:
    """Run a catalog tool against the shared client and render it as JSON text.

    Raises:
        ToolError: Any NocoDBError, with the backend message.
    """
    spec = get_tool(name)
    try:
        result = await spec.func(get_client(), **arguments)
    except NocoDBError as e:
        logger.error("Tool %s failed: %s", name, e.message)
        raise ToolError(f"NocoDB error: {e.message}") from e
    return render(result)


# --- Initialize FastMCP Server ---
mcp = FastMCP(
    "NocoDB",
    lifespan=lifespan,
    instructions=(
        "You are connected to a NocoDB instance via the NocoDB MCP server.\n"
        "\n"
        "WORKFLOW:\n"
        "1. list_bases to find the base id (skip if a default base is configured)\n"
        "2. list_tables, then get_table_info(table_id) for exact column titles\n"
        "3. Record tools take the table NAME or title, not its id\n"
        "\n"
        "FILTERS (where):\n"
        "- (field,op,value) with ops eq, neq, gt, ge, lt, le, like, nlike, is, isnot\n"
        "- combine with ~and / ~or / ~not, e.g. (status,eq,active)~and(priority,gt,5)\n"
        "- sort: comma-separated fields, '-' prefix for descending\n"
        "\n"
        "ANALYTICS:\n"
        "- aggregate, group_by and search_records work on ONE fetched page\n"
        "- narrow with where so the matching rows fit in that page\n"
    ),
)


# --- Register Tools ---
# Each function's docstring becomes the tool description the model sees.
# Type hints become the parameter schema.


@mcp.tool()
async def list_bases() -> str:
    """List all NocoDB bases (projects) the configured token can see.

    Returns:
        JSON with bases (id, title, status, timestamps) and count.
    """
    return await run_tool("list_bases")


@mcp.tool()
async def get_base_info(base_id: str = "") -> str:
    """Get detailed information about a base.

    Args:
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool("get_base_info", base_id=base_id)


@mcp.tool()
async def list_tables(base_id: str = "") -> str:
    """List all tables in a base.

    Args:
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.

    Returns:
        JSON with tables (id, table_name, title, type, enabled, timestamps) and count.
    """
    return await run_tool("list_tables", base_id=base_id)


@mcp.tool()
async def get_table_info(table_id: str) -> str:
    """Get a table's metadata and its column schema.

    Use this before querying to learn the exact column titles and types.

    Args:
        table_id: Table id (from list_tables).
    """
    return await run_tool("get_table_info", table_id=table_id)


@mcp.tool()
async def create_table(
    table_name: str, columns: list[dict[str, Any]], base_id: str = ""
) -> str:
    """Create a new table.

    Args:
        table_name: Name (and title) of the new table.
        columns: Column definitions, e.g.
            [{"column_name": "name", "title": "Name", "uidt": "SingleLineText"}]
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool("create_table", table_name=table_name, columns=columns, base_id=base_id)


@mcp.tool()
async def delete_table(table_id: str) -> str:
    """Delete a table and all of its records. This cannot be undone.

    Args:
        table_id: Table id (from list_tables).
    """
    return await run_tool("delete_table", table_id=table_id)


@mcp.tool()
async def list_columns(table_id: str) -> str:
    """List a table's columns with their UI types and flags.

    Args:
        table_id: Table id (from list_tables).
    """
    return await run_tool("list_columns", table_id=table_id)


@mcp.tool()
async def add_column(
    table_id: str,
    title: str,
    uidt: str,
    column_name: str = "",
    dt: str = "",
    pk: bool | None = None,
    rqd: bool | None = None,
    unique: bool | None = None,
    ai: bool | None = None,
    un: bool | None = None,
    cdf: str | None = None,
    dtx: str = "",
    np: int | None = None,
    ns: int | None = None,
    meta: dict[str, Any] | None = None,
) -> str:
    """Add a column to an existing table.

    Args:
        table_id: Table id (from list_tables).
        title: Display title of the column.
        uidt: UI data type, e.g. SingleLineText, LongText, Number, Decimal,
            Checkbox, Date, DateTime, SingleSelect, MultiSelect, Attachment,
            Email, URL, JSON, QrCode, Barcode.
        column_name: Database column name. Empty derives it from the title
            ("Due Date" -> "due_date").
        dt: Database type (e.g. varchar, int).
        pk: Primary key flag.
        rqd: Required flag.
        unique: Unique flag.
        ai: Auto-increment flag.
        un: Unsigned flag.
        cdf: Column default value.
        dtx: Data type extra.
        np: Numeric precision.
        ns: Numeric scale.
        meta: Type-specific settings. For SingleSelect/MultiSelect:
            {"options": [{"title": "A"}, {"title": "B"}]}.
            For QrCode: {"fk_qr_value_column_id": "<column id>"}.
            For Barcode: {"fk_barcode_value_column_id": "<column id>",
            "barcode_format": "CODE128"}.
    """
    return await run_tool(
        "add_column",
        table_id=table_id,
        title=title,
        uidt=uidt,
        column_name=column_name,
        dt=dt,
        pk=pk,
        rqd=rqd,
        unique=unique,
        ai=ai,
        un=un,
        cdf=cdf,
        dtx=dtx,
        np=np,
        ns=ns,
        meta=meta,
    )


@mcp.tool()
async def delete_column(column_id: str) -> str:
    """Delete a column. Its data is lost.

    Args:
        column_id: Column id (from list_columns).
    """
    return await run_tool("delete_column", column_id=column_id)


@mcp.tool()
async def insert_record(table_name: str, data: dict[str, Any], base_id: str = "") -> str:
    """Insert a single record.

    Args:
        table_name: Table name or title.
        data: Field values keyed by column title.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool("insert_record", table_name=table_name, data=data, base_id=base_id)


@mcp.tool()
async def bulk_insert(table_name: str, records: list[dict[str, Any]], base_id: str = "") -> str:
    """Insert many records in one request.

    Args:
        table_name: Table name or title.
        records: List of field-value objects.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool("bulk_insert", table_name=table_name, records=records, base_id=base_id)


@mcp.tool()
async def get_record(table_name: str, record_id: str, base_id: str = "") -> str:
    """Get one record by its id.

    Args:
        table_name: Table name or title.
        record_id: Record (row) id.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool("get_record", table_name=table_name, record_id=record_id, base_id=base_id)


@mcp.tool()
async def list_records(
    table_name: str,
    base_id: str = "",
    where: str | None = None,
    sort: str | None = None,
    fields: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    view_id: str | None = None,
) -> str:
    """List records with optional filtering, sorting and pagination.

    Args:
        table_name: Table name or title.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
        where: Filter, e.g. "(status,eq,active)~and(priority,gt,5)".
        sort: Comma-separated fields, "-" prefix for descending ("-created_at").
        fields: Comma-separated fields to return.
        limit: Page size.
        offset: Rows to skip.
        view_id: Apply a saved view's filters and sorts.

    Returns:
        JSON with records, pageInfo and count.
    """
    return await run_tool(
        "list_records",
        table_name=table_name,
        base_id=base_id,
        where=where,
        sort=sort,
        fields=fields,
        limit=limit,
        offset=offset,
        view_id=view_id,
    )


@mcp.tool()
async def update_record(
    table_name: str, record_id: str, data: dict[str, Any], base_id: str = ""
) -> str:
    """Update fields of an existing record.

    Args:
        table_name: Table name or title.
        record_id: Record (row) id.
        data: Field values to change, keyed by column title.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool(
        "update_record", table_name=table_name, record_id=record_id, data=data, base_id=base_id
    )


@mcp.tool()
async def delete_record(table_name: str, record_id: str, base_id: str = "") -> str:
    """Delete a record.

    Args:
        table_name: Table name or title.
        record_id: Record (row) id.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool(
        "delete_record", table_name=table_name, record_id=record_id, base_id=base_id
    )


@mcp.tool()
async def search_records(
    table_name: str,
    query: str,
    base_id: str = "",
    where: str | None = None,
    sort: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> str:
    """Full-text search: case-insensitive substring match across all fields.

    Only the fetched page is searched; pageInfo describes that page before
    filtering.

    Args:
        table_name: Table name or title.
        query: Text to look for.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
        where: Optional pre-filter applied by the backend.
        sort: Optional sort for the fetched page.
        limit: Page size of the fetch.
        offset: Rows to skip in the fetch.
    """
    return await run_tool(
        "search_records",
        table_name=table_name,
        query=query,
        base_id=base_id,
        where=where,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@mcp.tool()
async def query(
    table_name: str,
    base_id: str = "",
    where: str | None = None,
    sort: list[str] | None = None,
    fields: list[str] | None = None,
    limit: int = 25,
    offset: int = 0,
) -> str:
    """Advanced query with filtering, multi-field sort and field selection.

    Args:
        table_name: Table name or title.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
        where: Filter, e.g. "(amount,gt,100)~or(status,eq,open)".
        sort: Sort fields, e.g. ["-amount", "title"].
        fields: Fields to return, e.g. ["title", "amount"].
        limit: Page size (default 25).
        offset: Rows to skip (default 0).
    """
    return await run_tool(
        "query",
        table_name=table_name,
        base_id=base_id,
        where=where,
        sort=sort,
        fields=fields,
        limit=limit,
        offset=offset,
    )


@mcp.tool()
async def aggregate(
    table_name: str,
    column_name: str,
    function: str,
    base_id: str = "",
    where: str | None = None,
) -> str:
    """Aggregate a column over the records matching a filter.

    Args:
        table_name: Table name or title.
        column_name: Column to aggregate.
        function: One of count, sum, avg, min, max. Non-numeric values count as 0.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
        where: Optional filter.
    """
    return await run_tool(
        "aggregate",
        table_name=table_name,
        column_name=column_name,
        function=function,
        base_id=base_id,
        where=where,
    )


@mcp.tool()
async def group_by(
    table_name: str,
    column_name: str,
    base_id: str = "",
    where: str | None = None,
    sort: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> str:
    """Group records by a column's value and count each group.

    Args:
        table_name: Table name or title.
        column_name: Column to group by.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
        where: Optional filter applied before grouping.
        sort: Sort for the fetched page; groups are also ordered by value
            ("-" prefix for descending).
        limit: Page size of the fetch, and the maximum groups returned.
        offset: Rows skipped in the fetch, and groups skipped in the result.

    Returns:
        JSON with groups [{"value", "count"}], count and column.
    """
    return await run_tool(
        "group_by",
        table_name=table_name,
        column_name=column_name,
        base_id=base_id,
        where=where,
        sort=sort,
        limit=limit,
        offset=offset,
    )


@mcp.tool()
async def list_views(table_id: str) -> str:
    """List the saved views of a table.

    Args:
        table_id: Table id (from list_tables).
    """
    return await run_tool("list_views", table_id=table_id)


@mcp.tool()
async def create_view(table_id: str, title: str, type: int = 1) -> str:
    """Create a view on a table.

    Args:
        table_id: Table id (from list_tables).
        title: View title.
        type: 1=Grid (default), 2=Gallery, 3=Form, 4=Kanban, 5=Calendar.
    """
    return await run_tool("create_view", table_id=table_id, title=title, type=type)


@mcp.tool()
async def get_view_data(
    table_name: str,
    view_id: str,
    base_id: str = "",
    limit: int | None = None,
    offset: int | None = None,
) -> str:
    """List records through a saved view (its filters, sorts and hidden fields apply).

    Args:
        table_name: Table name or title.
        view_id: View id (from list_views).
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
        limit: Page size.
        offset: Rows to skip.
    """
    return await run_tool(
        "get_view_data",
        table_name=table_name,
        view_id=view_id,
        base_id=base_id,
        limit=limit,
        offset=offset,
    )


@mcp.tool()
async def upload_attachment(file_path: str, storage_path: str | None = None) -> str:
    """Upload a local file to NocoDB storage.

    Args:
        file_path: Path of the local file.
        storage_path: Optional folder inside NocoDB storage.

    Returns:
        JSON with success, file_name, file_size and upload_result
        (the attachment descriptor to store in an Attachment field).
    """
    return await run_tool("upload_attachment", file_path=file_path, storage_path=storage_path)


@mcp.tool()
async def upload_attachment_by_url(urls: list[str], storage_path: str | None = None) -> str:
    """Have NocoDB download files from URLs into its storage.

    Args:
        urls: File URLs.
        storage_path: Optional folder inside NocoDB storage.
    """
    return await run_tool("upload_attachment_by_url", urls=urls, storage_path=storage_path)


@mcp.tool()
async def attach_file_to_record(
    table_name: str,
    record_id: str,
    attachment_field: str,
    file_path: str,
    base_id: str = "",
) -> str:
    """Upload a local file and append it to a record's Attachment field.

    Existing attachments in the field are kept.

    Args:
        table_name: Table name or title.
        record_id: Record (row) id.
        attachment_field: Title of the Attachment column.
        file_path: Path of the local file.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool(
        "attach_file_to_record",
        table_name=table_name,
        record_id=record_id,
        attachment_field=attachment_field,
        file_path=file_path,
        base_id=base_id,
    )


@mcp.tool()
async def get_attachment_info(
    table_name: str, record_id: str, attachment_field: str, base_id: str = ""
) -> str:
    """Show the attachments stored in a record's Attachment field.

    Args:
        table_name: Table name or title.
        record_id: Record (row) id.
        attachment_field: Title of the Attachment column.
        base_id: Base id. Empty uses NOCODB_DEFAULT_BASE.
    """
    return await run_tool(
        "get_attachment_info",
        table_name=table_name,
        record_id=record_id,
        attachment_field=attachment_field,
        base_id=base_id,
    )


def main() -> None:
    """Entry point for the MCP server."""
    if not settings.has_credentials:
        logger.error("NOCODB_API_TOKEN or NOCODB_AUTH_TOKEN must be set")
        sys.exit(1)
    logger.info("Starting NocoDB MCP Server")
    logger.info("NocoDB URL: %s", settings.nocodb_base_url)
    mcp.run()


if __name__ == "__main__":
    main()
