"""Table-name and primary-key resolution.

NocoDB's v2 record endpoints take table ids, while tool callers speak in
table names. Resolution is done on every call against a fresh table list.
"""

from collections.abc import Iterable

from nocodb_mcp.errors import NotFoundError
from nocodb_mcp.models import Column, Table

# Fallback key field when a table has neither a pk column nor an "ID" column.
DEFAULT_PK_FIELD = "ID"


def find_table(tables: Iterable[Table], table_name: str) -> Table:
    """Return the first table whose table_name or title equals ``table_name``.

    Raises:
        NotFoundError: If no table matches.
    """
    for table in tables:
        if table.get("table_name") == table_name or table.get("title") == table_name:
            return table
    raise NotFoundError(f"Table {table_name} not found")


def find_pk_field(columns: Iterable[Column]) -> str:
    """Return the field name used to address records in PATCH/DELETE bodies.

    Order: the column flagged pk, then a column titled "ID", then "ID".
    """
    columns = list(columns)
    pk_column = next((col for col in columns if col.get("pk")), None)
    if pk_column is None:
        pk_column = next((col for col in columns if col.get("title") == DEFAULT_PK_FIELD), None)
    if pk_column is None or not pk_column.get("title"):
        return DEFAULT_PK_FIELD
    return pk_column["title"]
