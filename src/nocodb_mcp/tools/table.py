"""Table and column management tools.

Column UI data types (uidt) accepted by NocoDB:
  Basic:      SingleLineText, LongText, Number, Decimal, Currency, Percent
  Date/Time:  Date, DateTime, Duration
  Boolean:    Checkbox
  Select:     SingleSelect, MultiSelect (options in meta)
  Advanced:   Attachment, JSON, Email, PhoneNumber, URL, Rating
  Computed:   Formula, Rollup, Lookup, QrCode, Barcode
  Relational: Link, Links
"""

import asyncio
import re
from typing import Any

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.models import COLUMN_SUMMARY_KEYS, TABLE_SUMMARY_KEYS, pick

# Optional column flags/settings copied into the definition only when given.
_OPTIONAL_COLUMN_KEYS = ("dt", "pk", "rqd", "unique", "ai", "un", "cdf", "dtx", "np", "ns")


def default_column_name(title: str) -> str:
    """Derive a database column name from a display title: "Due Date" -> "due_date"."""
    return re.sub(r"\s+", "_", title.lower())


def build_column_definition(
    title: str,
    uidt: str,
    column_name: str = "",
    meta: dict[str, Any] | None = None,
    **options: Any,
) -> dict[str, Any]:
    """Build the add-column request body.

    QrCode and Barcode columns need their reference column id (and barcode
    format) at the root of the body rather than inside ``meta``; every other
    type keeps ``meta`` as given.
    """
    definition: dict[str, Any] = {
        "title": title,
        "column_name": column_name or default_column_name(title),
        "uidt": uidt,
    }
    for key in _OPTIONAL_COLUMN_KEYS:
        value = options.get(key)
        if value is None or value == "":
            continue
        definition[key] = value

    if uidt == "QrCode" and meta and meta.get("fk_qr_value_column_id"):
        definition["fk_qr_value_column_id"] = meta["fk_qr_value_column_id"]
    elif uidt == "Barcode" and meta and meta.get("fk_barcode_value_column_id"):
        definition["fk_barcode_value_column_id"] = meta["fk_barcode_value_column_id"]
        if meta.get("barcode_format"):
            definition["barcode_format"] = meta["barcode_format"]
    elif meta:
        definition["meta"] = meta

    return definition


async def list_tables(client: NocoDBClient, base_id: str = "") -> dict[str, Any]:
    """List all tables in a base."""
    tables = await client.list_tables(client.base_id(base_id))
    return {
        "tables": [pick(table, TABLE_SUMMARY_KEYS) for table in tables],
        "count": len(tables),
    }


async def get_table_info(client: NocoDBClient, table_id: str) -> dict[str, Any]:
    """Get a table's metadata together with its column schema.

    The table fetch and the column listing are independent and run concurrently.
    """
    table, columns = await asyncio.gather(
        client.get_table(table_id),
        client.list_columns(table_id),
    )
    return {
        "table": pick(table, TABLE_SUMMARY_KEYS),
        "columns": [pick(column, COLUMN_SUMMARY_KEYS) for column in columns],
    }


async def create_table(
    client: NocoDBClient,
    table_name: str,
    columns: list[dict[str, Any]],
    base_id: str = "",
) -> dict[str, Any]:
    """Create a table with the given column definitions."""
    table = await client.create_table(client.base_id(base_id), table_name, columns)
    return {
        "table": pick(table, TABLE_SUMMARY_KEYS),
        "message": f"Table '{table.get('title')}' created successfully",
    }


async def delete_table(client: NocoDBClient, table_id: str) -> dict[str, Any]:
    await client.delete_table(table_id)
    return {"message": "Table deleted successfully", "table_id": table_id}


async def list_columns(client: NocoDBClient, table_id: str) -> dict[str, Any]:
    """List a table's columns with their types and flags."""
    columns = await client.list_columns(table_id)
    return {
        "columns": [pick(column, COLUMN_SUMMARY_KEYS) for column in columns],
        "count": len(columns),
    }


async def add_column(
    client: NocoDBClient,
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
) -> dict[str, Any]:
    """Add a column to an existing table."""
    definition = build_column_definition(
        title,
        uidt,
        column_name=column_name,
        meta=meta,
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
    )
    column = await client.add_column(table_id, definition)
    return {
        "column": pick(column, COLUMN_SUMMARY_KEYS),
        "message": f"Column '{column.get('title')}' added successfully to table",
    }


async def delete_column(client: NocoDBClient, column_id: str) -> dict[str, Any]:
    await client.delete_column(column_id)
    return {"message": "Column deleted successfully", "column_id": column_id}
