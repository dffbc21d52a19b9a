"""Tool catalog: name -> coroutine registry and a dispatcher.

The FastMCP server registers its own typed wrappers; this registry backs the
``nocodb-mcp tools`` / ``nocodb-mcp call`` commands and the smoke test.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.errors import NocoDBError, NotFoundError
from nocodb_mcp.tools import attachment, database, query, record, table, view

logger = logging.getLogger(__name__)

ToolFunc = Callable[..., Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    func: ToolFunc
    group: str

    @property
    def description(self) -> str:
        doc = inspect.getdoc(self.func) or ""
        return doc.splitlines()[0] if doc else self.name.replace("_", " ").capitalize()

    @property
    def parameters(self) -> list[str]:
        """Argument names the tool accepts (the client argument excluded)."""
        return list(inspect.signature(self.func).parameters)[1:]


def _specs(group: str, *funcs: ToolFunc) -> dict[str, ToolSpec]:
    return {func.__name__: ToolSpec(func.__name__, func, group) for func in funcs}


TOOLS: dict[str, ToolSpec] = {
    **_specs("database", database.list_bases, database.get_base_info),
    **_specs(
        "table",
        table.list_tables,
        table.get_table_info,
        table.create_table,
        table.delete_table,
        table.list_columns,
        table.add_column,
        table.delete_column,
    ),
    **_specs(
        "record",
        record.insert_record,
        record.bulk_insert,
        record.get_record,
        record.list_records,
        record.update_record,
        record.delete_record,
        record.search_records,
    ),
    **_specs("query", query.query, query.aggregate, query.group_by),
    **_specs("view", view.list_views, view.create_view, view.get_view_data),
    **_specs(
        "attachment",
        attachment.upload_attachment,
        attachment.upload_attachment_by_url,
        attachment.attach_file_to_record,
        attachment.get_attachment_info,
    ),
}


def get_tool(name: str) -> ToolSpec:
    try:
        return TOOLS[name]
    except KeyError:
        raise NotFoundError(f"Tool {name} not found") from None


async def call_tool(
    client: NocoDBClient, name: str, arguments: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Run a catalog tool by name.

    Args:
        client: Client the tool runs against.
        name: Tool name, e.g. "list_records".
        arguments: Keyword arguments for the tool.

    Raises:
        NotFoundError: Unknown tool name (raised before any network call).
        NocoDBError: Arguments that do not match the tool's parameters, or a
            backend failure from the tool itself.
    """
    spec = get_tool(name)
    arguments = arguments or {}
    try:
        inspect.signature(spec.func).bind(client, **arguments)
    except TypeError as e:
        raise NocoDBError(f"Invalid arguments for {name}: {e}") from e

    logger.debug("Calling tool %s with %s", name, sorted(arguments))
    return await spec.func(client, **arguments)
