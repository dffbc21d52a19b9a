"""Shared test fixtures for nocodb-mcp tests.

FakeNocoDB stands in for NocoDBTransport: it answers the handful of NocoDB
paths the client uses from in-memory tables, columns and records, so tests
run without a live instance. Every verb is an AsyncMock, so tests can assert
on the exact paths and payloads sent.
"""

import copy
from typing import Any
from unittest.mock import AsyncMock

import pytest

from nocodb_mcp.api import NocoDBClient
from nocodb_mcp.config import ConnectionConfig

BASE_ID = "p_test"

SAMPLE_BASES = [
    {"id": BASE_ID, "title": "Operations", "status": None, "created_at": "2026-01-05", "updated_at": "2026-02-01", "color": "#fff"},
    {"id": "p_other", "title": "Archive", "status": None, "created_at": "2025-03-01", "updated_at": "2025-03-01"},
]

SAMPLE_TABLES = [
    {"id": "m_tasks", "table_name": "tasks", "title": "Tasks", "type": "table", "enabled": True, "created_at": "2026-01-05", "updated_at": "2026-01-05", "meta": None},
    {"id": "m_notes", "table_name": "nc_notes", "title": "Notes", "type": "table", "enabled": True, "created_at": "2026-01-06", "updated_at": "2026-01-06"},
]

SAMPLE_COLUMNS = [
    {"id": "c_id", "title": "Id", "column_name": "id", "uidt": "ID", "dt": "int", "pk": True, "pv": False, "rqd": True, "unique": False, "ai": True},
    {"id": "c_title", "title": "Title", "column_name": "title", "uidt": "SingleLineText", "dt": "varchar", "pk": False, "pv": True},
    {"id": "c_status", "title": "Status", "column_name": "status", "uidt": "SingleLineText", "dt": "varchar", "pk": False},
    {"id": "c_amount", "title": "Amount", "column_name": "amount", "uidt": "Number", "dt": "bigint", "pk": False},
    {"id": "c_files", "title": "Files", "column_name": "files", "uidt": "Attachment", "dt": "text", "pk": False},
]

SAMPLE_RECORDS = [
    {"Id": 1, "Title": "Alpha invoice", "Status": "open", "Amount": 120, "Files": None},
    {
        "Id": 2,
        "Title": "Beta invoice",
        "Status": "paid",
        "Amount": "80",
        "Files": '[{"url": "https://files.test/a.png", "title": "a.png"}]',
    },
    {"Id": 3, "Title": "Gamma receipt", "Status": "open", "Amount": None, "Files": [{"title": "b.pdf"}]},
]

SAMPLE_VIEWS = [
    {"id": "vw_grid", "title": "Tasks", "type": 3, "fk_model_id": "m_tasks", "show_system_fields": False, "lock_type": "collaborative", "created_at": "2026-01-05", "updated_at": "2026-01-05"},
]

UPLOADED = {"url": "https://files.test/new.txt", "title": "new.txt", "mimetype": "text/plain", "size": 11}


class FakeNocoDB:
    """In-memory NocoDB answering the client's REST paths."""

    def __init__(self) -> None:
        self.bases = copy.deepcopy(SAMPLE_BASES)
        self.tables = copy.deepcopy(SAMPLE_TABLES)
        self.columns = copy.deepcopy(SAMPLE_COLUMNS)
        self.records = copy.deepcopy(SAMPLE_RECORDS)
        self.views = copy.deepcopy(SAMPLE_VIEWS)
        self.get = AsyncMock(side_effect=self._get)
        self.post = AsyncMock(side_effect=self._post)
        self.patch = AsyncMock(side_effect=self._patch)
        self.delete = AsyncMock(return_value=None)
        self.request = AsyncMock(return_value=[dict(UPLOADED)])
        self.close = AsyncMock()

    def get_paths(self) -> list[str]:
        """Paths of all GET calls, in order."""
        return [call.args[0] for call in self.get.await_args_list]

    async def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        parts = path.strip("/").split("/")
        if path == "/api/v1/db/meta/projects":
            return {"list": self.bases, "pageInfo": {"totalRows": len(self.bases)}}
        if path.startswith("/api/v1/db/meta/projects/") and path.endswith("/tables"):
            return {"list": self.tables}
        if path.startswith("/api/v1/db/meta/projects/"):
            return next(base for base in self.bases if base["id"] == parts[-1])
        if path.startswith("/api/v1/db/meta/tables/"):
            table = next(t for t in self.tables if t["id"] == parts[-1])
            return {**table, "columns": self.columns}
        if path.startswith("/api/v2/meta/tables/") and path.endswith("/views"):
            return {"list": self.views}
        if path.endswith("/records"):
            return {
                "list": self.records,
                "pageInfo": {"totalRows": len(self.records), "page": 1, "pageSize": 25, "isLastPage": True},
            }
        if "/records/" in path:
            return next(r for r in self.records if str(r["Id"]) == parts[-1])
        raise AssertionError(f"unexpected GET {path}")

    async def _post(self, path: str, json_body: Any = None) -> Any:
        if path.endswith("/records"):
            if isinstance(json_body, list):
                return [{"Id": 10 + i} for i, _ in enumerate(json_body)]
            return {"Id": 10, **json_body}
        if path.endswith("/tables"):
            return {"id": "m_new", "table_name": json_body["table_name"], "title": json_body["title"], "type": "table"}
        if path.endswith("/columns"):
            added = {"id": "c_new", **json_body}
            return {"id": path.split("/")[-2], "columns": [*self.columns, added]}
        if path.endswith("/views"):
            return {"id": "vw_new", "fk_model_id": path.split("/")[-2], **json_body}
        if path.endswith("/upload-by-url"):
            return [dict(UPLOADED)]
        raise AssertionError(f"unexpected POST {path}")

    async def _patch(self, path: str, json_body: Any = None) -> Any:
        body = dict(json_body)
        record_id = body.pop("Id")
        record = next(r for r in self.records if r["Id"] == record_id)
        record.update(body)
        return {"Id": record_id}


@pytest.fixture
def config() -> ConnectionConfig:
    return ConnectionConfig(base_url="http://nocodb.test", api_token="tok_test", default_base=BASE_ID)


@pytest.fixture
def fake() -> FakeNocoDB:
    return FakeNocoDB()


@pytest.fixture
def client(config: ConnectionConfig, fake: FakeNocoDB) -> NocoDBClient:
    return NocoDBClient(config, transport=fake)  # type: ignore[arg-type]
