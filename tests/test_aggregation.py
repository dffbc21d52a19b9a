"""Tests for client-side search, aggregation and grouping.

No network: these run directly on record lists.
"""

import math

import pytest

from nocodb_mcp.aggregation import aggregate_values, group_values, search_records
from nocodb_mcp.errors import UnsupportedAggregateError

RECORDS = [
    {"Id": 1, "Title": "Alpha invoice", "Status": "open", "Amount": 120},
    {"Id": 2, "Title": "Beta invoice", "Status": "paid", "Amount": "80"},
    {"Id": 3, "Title": "Gamma receipt", "Status": "open", "Amount": None},
    {"Id": 4, "Title": "Delta", "Status": "void", "Amount": "n/a", "Tags": ["Urgent", "q3"]},
]


class TestSearch:
    def test_case_insensitive_substring(self) -> None:
        found = search_records(RECORDS, "INVOICE")
        assert [r["Id"] for r in found] == [1, 2]

    def test_matches_numbers(self) -> None:
        assert [r["Id"] for r in search_records(RECORDS, "12")] == [1]

    def test_matches_inside_lists(self) -> None:
        assert [r["Id"] for r in search_records(RECORDS, "urgent")] == [4]

    def test_no_match(self) -> None:
        assert search_records(RECORDS, "zzz") == []

    def test_empty_query_matches_all(self) -> None:
        assert len(search_records(RECORDS, "")) == len(RECORDS)

    def test_integral_float_matches_as_integer(self) -> None:
        records = [{"Id": 1, "Score": 1.0}, {"Id": 2, "Score": 2.5}]
        assert [r["Id"] for r in search_records(records, "1.0")] == []
        assert [r["Id"] for r in search_records(records, "2.5")] == [2]


class TestAggregate:
    def test_count_ignores_values(self) -> None:
        assert aggregate_values(RECORDS, "Amount", "count") == 4

    def test_sum_coerces_non_numeric_to_zero(self) -> None:
        assert aggregate_values(RECORDS, "Amount", "sum") == 200

    def test_avg(self) -> None:
        assert aggregate_values(RECORDS, "Amount", "avg") == 50

    def test_min_max(self) -> None:
        assert aggregate_values(RECORDS, "Amount", "min") == 0
        assert aggregate_values(RECORDS, "Amount", "max") == 120

    def test_result_is_plain_python_number(self) -> None:
        assert type(aggregate_values(RECORDS, "Amount", "sum")) is int
        assert type(aggregate_values(RECORDS, "Amount", "avg")) is float

    def test_decimal_strings(self) -> None:
        records = [{"v": "1.5"}, {"v": " 2.5 "}, {"v": True}]
        assert aggregate_values(records, "v", "sum") == 5.0

    def test_missing_column_is_zero(self) -> None:
        assert aggregate_values(RECORDS, "Nope", "sum") == 0

    def test_underscore_and_non_finite_strings_are_zero(self) -> None:
        records = [{"v": "1_000"}, {"v": "inf"}, {"v": "-Infinity"}, {"v": "nan"}, {"v": "7"}]
        assert aggregate_values(records, "v", "sum") == 7
        assert aggregate_values(records, "v", "max") == 7

    def test_empty_set(self) -> None:
        assert aggregate_values([], "Amount", "count") == 0
        assert aggregate_values([], "Amount", "sum") == 0
        assert aggregate_values([], "Amount", "avg") == 0
        assert aggregate_values([], "Amount", "min") == math.inf
        assert aggregate_values([], "Amount", "max") == -math.inf

    def test_unknown_function(self) -> None:
        with pytest.raises(UnsupportedAggregateError, match="Unknown aggregate function: median"):
            aggregate_values(RECORDS, "Amount", "median")


class TestGroupBy:
    def test_first_seen_order(self) -> None:
        groups = group_values(RECORDS, "Status")
        assert groups == [
            {"value": "open", "count": 2},
            {"value": "paid", "count": 1},
            {"value": "void", "count": 1},
        ]

    def test_counts_sum_to_record_count(self) -> None:
        groups = group_values(RECORDS, "Amount")
        assert sum(g["count"] for g in groups) == len(RECORDS)

    def test_sort_descending(self) -> None:
        values = [g["value"] for g in group_values(RECORDS, "Status", sort="-Status")]
        assert values == ["void", "paid", "open"]

    def test_sort_ascending(self) -> None:
        values = [g["value"] for g in group_values(RECORDS, "Status", sort="Status")]
        assert values == ["open", "paid", "void"]

    def test_limit_and_offset_apply_to_groups(self) -> None:
        groups = group_values(RECORDS, "Status", sort="Status", limit=1, offset=1)
        assert groups == [{"value": "paid", "count": 1}]

    def test_type_sensitive_keys(self) -> None:
        records = [{"v": 1}, {"v": "1"}, {"v": True}, {"v": 1.0}, {"v": None}, {}]
        groups = group_values(records, "v")
        assert groups == [
            {"value": 1, "count": 2},
            {"value": "1", "count": 1},
            {"value": True, "count": 1},
            {"value": None, "count": 2},
        ]

    def test_mixed_types_sort_by_type_rank(self) -> None:
        records = [{"v": "b"}, {"v": 2}, {"v": None}, {"v": ["x"]}, {"v": False}]
        values = [g["value"] for g in group_values(records, "v", sort="v")]
        assert values == [None, False, 2, "b", ["x"]]

    def test_lists_group_by_content(self) -> None:
        records = [{"tags": ["a", "b"]}, {"tags": ["a", "b"]}, {"tags": ["b"]}]
        assert group_values(records, "tags") == [
            {"value": ["a", "b"], "count": 2},
            {"value": ["b"], "count": 1},
        ]
