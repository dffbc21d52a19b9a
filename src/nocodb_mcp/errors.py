"""Errors raised by the NocoDB client layer.

Every failure that crosses the client boundary is a NocoDBError: backend
HTTP errors, connection failures, unknown tables/tools, missing local files
and unsupported aggregate functions.
"""

from typing import Any


class NocoDBError(Exception):
    """Root error for everything the NocoDB client raises.

    Attributes:
        message: Human-readable message (backend ``msg``/``message`` when present).
        status_code: HTTP status of the failed call, if there was a response.
        details: Raw decoded response payload, if any.
    """

    def __init__(self, message: str, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code!r})"


class NotFoundError(NocoDBError):
    """A named table, tool or local file does not exist."""


class UnsupportedAggregateError(NocoDBError, ValueError):
    """Aggregate function name is not one of count/sum/avg/min/max."""
