"""Translate generic query options into NocoDB v2 record-list parameters.

NocoDB query reference:
  where   filter expression, e.g. "(status,eq,active)~and(priority,gt,5)"
  sort    comma-separated fields, "-" prefix for descending ("-created_at,title")
  fields  comma-separated field subset
  limit   page size
  offset  rows to skip
  viewId  apply a saved view's filters/sorts
"""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class QueryOptions:
    """Options for a record listing. Unset options are omitted from the request."""

    where: str | None = None
    sort: str | Sequence[str] | None = None
    fields: str | Sequence[str] | None = None
    limit: int | None = None
    offset: int | None = None
    view_id: str | None = None

    def first_sort_token(self) -> str | None:
        """First sort token, e.g. "-title" for sort=["-title", "id"]."""
        if not self.sort:
            return None
        if isinstance(self.sort, str):
            return self.sort.split(",")[0].strip() or None
        return self.sort[0]


def _join(value: str | Sequence[str]) -> str:
    if isinstance(value, str):
        return value
    return ",".join(value)


def build_query_params(options: QueryOptions | None) -> dict[str, str]:
    """Convert QueryOptions into the records endpoint's query parameters.

    Input:  QueryOptions(where="(a,eq,1)", sort=["-b", "c"], limit=10)
    Output: {"where": "(a,eq,1)", "sort": "-b,c", "limit": "10"}
    """
    if options is None:
        return {}

    params: dict[str, str] = {}
    if options.where:
        params["where"] = options.where
    if options.sort:
        params["sort"] = _join(options.sort)
    if options.fields:
        params["fields"] = _join(options.fields)
    if options.limit is not None:
        params["limit"] = str(options.limit)
    if options.offset is not None:
        params["offset"] = str(options.offset)
    if options.view_id:
        params["viewId"] = options.view_id
    return params
