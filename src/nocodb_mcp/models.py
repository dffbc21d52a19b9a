"""Typed shapes of the NocoDB metadata objects this server reads.

Field names follow the backend's JSON (uidt = UI data type, dt = database
type, pv = primary value, rqd = required, un = unsigned, ai = auto increment,
np/ns = numeric precision/scale). All shapes are partial: the backend adds
fields between releases and we pass them through untouched.
"""

from typing import TypedDict, Union

JSONValue = Union[None, bool, int, float, str, list["JSONValue"], dict[str, "JSONValue"]]

# One row. No shape is enforced; attachments and multi-selects arrive as
# lists, JSON fields as nested dicts.
Record = dict[str, JSONValue]


class Base(TypedDict, total=False):
    """A NocoDB base (called "project" by the v1 meta API)."""

    id: str
    title: str
    status: str
    created_at: str
    updated_at: str


class Table(TypedDict, total=False):
    """Table metadata. ``columns`` is only present on the single-table endpoint."""

    id: str
    base_id: str
    table_name: str
    title: str
    type: str
    enabled: bool
    created_at: str
    updated_at: str
    columns: list["Column"]


class Column(TypedDict, total=False):
    id: str
    base_id: str
    fk_model_id: str
    title: str
    column_name: str
    uidt: str
    dt: str
    np: int
    ns: int
    pk: bool
    pv: bool
    rqd: bool
    un: bool
    ai: bool
    unique: bool
    created_at: str
    updated_at: str


class View(TypedDict, total=False):
    """Saved view. ``type``: 1=Grid, 2=Gallery, 3=Form, 4=Kanban, 5=Calendar."""

    id: str
    title: str
    type: int
    fk_model_id: str
    show_system_fields: bool
    lock_type: str
    created_at: str
    updated_at: str


class Attachment(TypedDict, total=False):
    """Upload descriptor as returned by the storage endpoints."""

    url: str
    path: str
    title: str
    mimetype: str
    size: int


TABLE_SUMMARY_KEYS = ("id", "table_name", "title", "type", "enabled", "created_at", "updated_at")
BASE_SUMMARY_KEYS = ("id", "title", "status", "created_at", "updated_at")
COLUMN_SUMMARY_KEYS = ("id", "title", "column_name", "uidt", "dt", "pk", "pv", "rqd", "unique", "ai")


def pick(obj: dict, keys: tuple[str, ...]) -> dict:
    """Project ``obj`` onto ``keys``; missing keys come back as None."""
    return {key: obj.get(key) for key in keys}
