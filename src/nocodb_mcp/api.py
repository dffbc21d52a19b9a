"""NocoDB API client: every backend operation the tools use.

Two API generations are mixed, per resource type:
  /api/v1/db/meta/...   bases (projects), tables, table definitions
  /api/v2/...           records, views, columns, storage
They are not interchangeable on the real backend; keep each path as is.

Table-scoped record operations take a table *name* and resolve it to an id
by listing the base's tables on every call. Nothing is cached between calls.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

from nocodb_mcp.aggregation import aggregate_values, group_values, search_records
from nocodb_mcp.auth import NocoDBTransport
from nocodb_mcp.config import ConnectionConfig
from nocodb_mcp.errors import NocoDBError, NotFoundError
from nocodb_mcp.models import Attachment, Base, Column, JSONValue, Record, Table, View
from nocodb_mcp.query import QueryOptions, build_query_params
from nocodb_mcp.resolver import find_pk_field, find_table

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_record_id(record_id: str | int) -> int | None:
    """Parse the leading integer of a record id ("12" -> 12, "12abc" -> 12).

    Returns None when there is no leading integer; the backend then rejects
    the key.
    """
    if isinstance(record_id, int):
        return record_id
    match = _LEADING_INT_RE.match(str(record_id))
    return int(match.group(1)) if match else None


def normalize_attachments(value: JSONValue) -> list[Attachment]:
    """Normalize an attachment field value to a list of descriptors.

    Accepts: missing/empty (-> []), a JSON-encoded string, a single
    descriptor object, or a list.

    Raises:
        NocoDBError: If a string value is not valid JSON.
    """
    if not value:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise NocoDBError(f"Attachment field is not valid JSON: {e}") from e
    if isinstance(value, list):
        return list(value)
    return [value]


class NocoDBClient:
    """Async client for one NocoDB instance.

    Args:
        config: Connection settings (base URL, credentials, default base).
        transport: Pre-built transport; defaults to one built from config.
    """

    def __init__(self, config: ConnectionConfig, transport: NocoDBTransport | None = None) -> None:
        self.config = config
        self.transport = transport if transport is not None else NocoDBTransport(config)

    async def close(self) -> None:
        await self.transport.close()

    def base_id(self, base_id: str = "") -> str:
        """Return ``base_id`` or the configured default base.

        Raises:
            NocoDBError: If neither is set.
        """
        resolved = base_id or self.config.default_base
        if not resolved:
            raise NocoDBError("base_id is required (no NOCODB_DEFAULT_BASE configured)")
        return resolved

    # --- Bases ---

    async def list_bases(self) -> list[Base]:
        data = await self.transport.get("/api/v1/db/meta/projects")
        return data["list"]

    async def get_base(self, base_id: str) -> Base:
        return await self.transport.get(f"/api/v1/db/meta/projects/{base_id}")

    # --- Tables ---

    async def list_tables(self, base_id: str) -> list[Table]:
        data = await self.transport.get(f"/api/v1/db/meta/projects/{base_id}/tables")
        return data["list"]

    async def get_table(self, table_id: str) -> Table:
        return await self.transport.get(f"/api/v1/db/meta/tables/{table_id}")

    async def create_table(
        self, base_id: str, table_name: str, columns: list[dict[str, Any]]
    ) -> Table:
        logger.info("Creating table '%s' in base %s", table_name, base_id)
        return await self.transport.post(
            f"/api/v1/db/meta/projects/{base_id}/tables",
            json_body={"table_name": table_name, "title": table_name, "columns": columns},
        )

    async def delete_table(self, table_id: str) -> None:
        logger.info("Deleting table %s", table_id)
        await self.transport.delete(f"/api/v1/db/meta/tables/{table_id}")

    async def resolve_table(self, base_id: str, table_name: str) -> Table:
        """Resolve a table name (or title) to its metadata.

        Raises:
            NotFoundError: If no table in the base matches.
        """
        tables = await self.list_tables(base_id)
        return find_table(tables, table_name)

    # --- Columns ---

    async def list_columns(self, table_id: str) -> list[Column]:
        """Columns of a table, read from the full table definition.

        There is no dedicated columns listing endpoint.
        """
        data = await self.transport.get(f"/api/v1/db/meta/tables/{table_id}")
        return data.get("columns") or []

    async def add_column(self, table_id: str, column_definition: dict[str, Any]) -> Column:
        """Add a column and return it.

        The backend answers with the whole table object; the new column is
        picked out of its ``columns`` by title or column_name. If it cannot
        be found the raw response is returned.
        """
        logger.info("Adding column '%s' to table %s", column_definition.get("title"), table_id)
        data = await self.transport.post(
            f"/api/v2/meta/tables/{table_id}/columns", json_body=column_definition
        )
        if isinstance(data, dict):
            for column in data.get("columns") or []:
                if column.get("title") == column_definition.get("title") or (
                    column.get("column_name") == column_definition.get("column_name")
                ):
                    return column
        return data

    async def delete_column(self, column_id: str) -> None:
        logger.info("Deleting column %s", column_id)
        await self.transport.delete(f"/api/v2/meta/columns/{column_id}")

    async def get_pk_field(self, table_id: str) -> str:
        """Field name used to address records of a table in PATCH/DELETE bodies."""
        return find_pk_field(await self.list_columns(table_id))

    # --- Records ---

    async def create_record(self, base_id: str, table_name: str, data: Record) -> Record:
        table = await self.resolve_table(base_id, table_name)
        return await self.transport.post(f"/api/v2/tables/{table['id']}/records", json_body=data)

    async def bulk_insert(self, base_id: str, table_name: str, records: list[Record]) -> list[Record]:
        """Insert all ``records`` in one call. No batch ceiling is applied."""
        table = await self.resolve_table(base_id, table_name)
        logger.info("Bulk inserting %d records into %s", len(records), table_name)
        return await self.transport.post(
            f"/api/v2/tables/{table['id']}/records", json_body=records
        )

    async def get_record(self, base_id: str, table_name: str, record_id: str) -> Record:
        table = await self.resolve_table(base_id, table_name)
        return await self.transport.get(f"/api/v2/tables/{table['id']}/records/{record_id}")

    async def list_records(
        self, base_id: str, table_name: str, options: QueryOptions | None = None
    ) -> dict[str, Any]:
        """List records. Returns the backend's {"list": [...], "pageInfo": {...}} as is."""
        table = await self.resolve_table(base_id, table_name)
        return await self.transport.get(
            f"/api/v2/tables/{table['id']}/records", params=build_query_params(options)
        )

    async def update_record(
        self, base_id: str, table_name: str, record_id: str, data: Record
    ) -> Any:
        table = await self.resolve_table(base_id, table_name)
        pk_field = await self.get_pk_field(table["id"])
        return await self.transport.patch(
            f"/api/v2/tables/{table['id']}/records",
            json_body={pk_field: parse_record_id(record_id), **data},
        )

    async def delete_record(self, base_id: str, table_name: str, record_id: str) -> None:
        table = await self.resolve_table(base_id, table_name)
        pk_field = await self.get_pk_field(table["id"])
        logger.info("Deleting record %s from %s", record_id, table_name)
        await self.transport.delete(
            f"/api/v2/tables/{table['id']}/records",
            json_body={pk_field: parse_record_id(record_id)},
        )

    # --- Views ---

    async def list_views(self, table_id: str) -> list[View]:
        data = await self.transport.get(f"/api/v2/meta/tables/{table_id}/views")
        return (data or {}).get("list") or []

    async def create_view(self, table_id: str, title: str, view_type: int = 1) -> View:
        return await self.transport.post(
            f"/api/v2/meta/tables/{table_id}/views", json_body={"title": title, "type": view_type}
        )

    # --- Client-side search / aggregation ---

    async def search_records(
        self, base_id: str, table_name: str, query: str, options: QueryOptions | None = None
    ) -> dict[str, Any]:
        """Substring search over one fetched page.

        ``pageInfo`` is the backend's metadata for the page *before*
        filtering, so its totals can exceed the number of matches.
        """
        page = await self.list_records(base_id, table_name, options)
        return {"list": search_records(page["list"], query), "pageInfo": page.get("pageInfo")}

    async def aggregate(
        self, base_id: str, table_name: str, column_name: str, func: str, where: str | None = None
    ) -> int | float:
        """Aggregate a column over the page matching ``where`` (limit/offset not used)."""
        page = await self.list_records(base_id, table_name, QueryOptions(where=where))
        return aggregate_values(page["list"], column_name, func)

    async def group_by(
        self, base_id: str, table_name: str, column_name: str, options: QueryOptions | None = None
    ) -> list[dict[str, Any]]:
        """Group the page fetched under ``options`` by a column's raw value.

        The options go to the backend as given; sort, limit and offset are then
        applied once more to the resulting groups.
        """
        options = options or QueryOptions()
        page = await self.list_records(base_id, table_name, options)
        return group_values(
            page["list"],
            column_name,
            sort=options.first_sort_token(),
            limit=options.limit,
            offset=options.offset,
        )

    # --- Storage ---

    async def upload_file(self, file_path: str, storage_path: str | None = None) -> Any:
        """Stream a local file to NocoDB storage as multipart/form-data.

        Raises:
            NotFoundError: If the file does not exist (checked before any call).
        """
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {file_path}")

        data = {"path": storage_path} if storage_path else None
        logger.info("Uploading %s (%d bytes)", path.name, path.stat().st_size)
        with path.open("rb") as fh:
            return await self.transport.request(
                "POST", "/api/v2/storage/upload", files={"file": (path.name, fh)}, data=data
            )

    async def upload_by_url(self, urls: list[str], storage_path: str | None = None) -> Any:
        url_data = [{"url": url} for url in urls]
        body: Any = {"urls": url_data, "path": storage_path} if storage_path else url_data
        return await self.transport.post("/api/v2/storage/upload-by-url", json_body=body)

    # --- Attachments ---

    async def attach_file_to_record(
        self,
        base_id: str,
        table_name: str,
        record_id: str,
        attachment_field: str,
        file_path: str,
    ) -> list[Attachment]:
        """Upload a file and append it to a record's attachment field.

        Read-modify-write: concurrent calls on the same record and field are
        not coordinated and the last write wins.

        Returns:
            The full attachment list written back to the record.
        """
        uploaded = await self.upload_file(file_path)
        record = await self.get_record(base_id, table_name, record_id)
        attachments = normalize_attachments(record.get(attachment_field))
        if isinstance(uploaded, list):
            attachments.extend(uploaded)
        else:
            attachments.append(uploaded)
        await self.update_record(base_id, table_name, record_id, {attachment_field: attachments})
        return attachments
