"""Client-side search, aggregation and grouping over a fetched record page.

NocoDB's own search syntax and aggregate endpoints differ between releases,
so these operations run locally on one page of records returned by
list_records. They never paginate: the result covers exactly the page the
backend returned (its default page size unless a limit was given).
"""

import json
import math
from collections.abc import Sequence
from typing import Any

import pandas as pd  # type: ignore[import-untyped]

from nocodb_mcp.errors import UnsupportedAggregateError
from nocodb_mcp.models import JSONValue, Record

AGGREGATE_FUNCTIONS = ("count", "sum", "avg", "min", "max")


# --- Search ---


def _search_text(value: JSONValue) -> str:
    """String form of a field value for substring matching.

    Strings match as-is and integral floats as integers ("1.0" -> "1").
    Everything else matches on its JSON text, so a nested JSON field or an
    attachment list is searchable by content.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value, ensure_ascii=False, default=str)


def search_records(records: Sequence[Record], query: str) -> list[Record]:
    """Keep records where any field's string form contains ``query`` (case-insensitive)."""
    needle = query.lower()
    return [
        record
        for record in records
        if any(needle in _search_text(value).lower() for value in record.values())
    ]


# --- Aggregate ---


def _to_number(value: JSONValue) -> int | float:
    """Coerce a field value to a number; missing or non-numeric becomes 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value
    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
        if not math.isfinite(number):
            return 0
        return int(number) if number.is_integer() else number
    return 0


def _scalar(value: Any) -> int | float:
    """Convert a numpy scalar from pandas into a plain Python number."""
    return value.item() if hasattr(value, "item") else value


def aggregate_values(records: Sequence[Record], column: str, func: str) -> int | float:
    """Compute count/sum/avg/min/max of ``column`` over ``records``.

    ``count`` is the number of records, regardless of the column's values.
    Over an empty set: sum and avg are 0, min is +inf and max is -inf.

    Raises:
        UnsupportedAggregateError: For any other function name.
    """
    if func not in AGGREGATE_FUNCTIONS:
        raise UnsupportedAggregateError(f"Unknown aggregate function: {func}")

    if func == "count":
        return len(records)

    numbers = [_to_number(record.get(column)) for record in records]
    if not numbers:
        return {"sum": 0, "avg": 0, "min": math.inf, "max": -math.inf}[func]

    series = pd.Series(numbers)
    if func == "sum":
        return _scalar(series.sum())
    if func == "avg":
        return _scalar(series.mean())
    if func == "min":
        return _scalar(series.min())
    return _scalar(series.max())


# --- Group by ---

# Ordering of JSON types when group values of different types are sorted.
_TYPE_RANK = {"null": 0, "boolean": 1, "number": 2, "string": 3, "array": 4, "object": 5}


def _json_type(value: JSONValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _group_key(value: JSONValue) -> tuple[str, Any]:
    """Hashable key comparing by value and JSON type.

    1 and "1" are different groups, as are True and 1. Lists and dicts are
    keyed by their canonical JSON text.
    """
    kind = _json_type(value)
    if kind in ("array", "object"):
        return kind, json.dumps(value, sort_keys=True, default=str)
    return kind, value


def _sort_key(value: JSONValue) -> tuple[int, Any]:
    kind, comparable = _group_key(value)
    if kind == "null":
        comparable = 0
    return _TYPE_RANK[kind], comparable


def group_values(
    records: Sequence[Record],
    column: str,
    sort: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> list[dict[str, Any]]:
    """Count records per raw value of ``column``.

    Args:
        records: The fetched page.
        column: Field to group by. Missing fields group under None.
        sort: A sort token; only its leading "-" matters (descending by value).
            Without it, groups keep first-seen order.
        limit: Max groups returned (applied after sorting).
        offset: Groups to skip (applied after sorting).

    Returns:
        [{"value": v, "count": n}, ...]
    """
    groups: dict[tuple[str, Any], dict[str, Any]] = {}
    for record in records:
        value = record.get(column)
        key = _group_key(value)
        if key in groups:
            groups[key]["count"] += 1
        else:
            groups[key] = {"value": value, "count": 1}

    result = list(groups.values())

    if sort:
        descending = sort.startswith("-")
        result.sort(key=lambda group: _sort_key(group["value"]), reverse=descending)

    start = offset or 0
    end = start + limit if limit else None
    return result[start:end]
