"""Attachment tools: upload to NocoDB storage and attach to records.

The upload tools report backend failures in the result instead of raising,
so the caller sees {"success": false, "error": ...}. A local file that does
not exist is still an error.
"""

import logging
from pathlib import Path
from typing import Any

from nocodb_mcp.api import NocoDBClient, normalize_attachments
from nocodb_mcp.errors import NocoDBError, NotFoundError

logger = logging.getLogger(__name__)


def _check_file(file_path: str) -> Path:
    path = Path(file_path)
    if not path.is_file():
        raise NotFoundError(f"File not found: {file_path}")
    return path


async def upload_attachment(
    client: NocoDBClient, file_path: str, storage_path: str | None = None
) -> dict[str, Any]:
    """Upload a local file to NocoDB storage."""
    path = _check_file(file_path)
    try:
        result = await client.upload_file(file_path, storage_path)
    except NocoDBError as e:
        logger.warning("Upload of %s failed: %s", file_path, e.message)
        return {"success": False, "error": e.message, "file_path": file_path}
    return {
        "success": True,
        "file_name": path.name,
        "file_size": path.stat().st_size,
        "upload_result": result,
        "message": "File uploaded successfully",
    }


async def upload_attachment_by_url(
    client: NocoDBClient, urls: list[str], storage_path: str | None = None
) -> dict[str, Any]:
    """Have NocoDB fetch remote URLs into its storage."""
    try:
        result = await client.upload_by_url(urls, storage_path)
    except NocoDBError as e:
        logger.warning("Upload by URL failed: %s", e.message)
        return {"success": False, "error": e.message, "urls": urls}
    return {
        "success": True,
        "urls_count": len(urls),
        "upload_result": result,
        "message": f"{len(urls)} file(s) uploaded from URLs successfully",
    }


async def attach_file_to_record(
    client: NocoDBClient,
    table_name: str,
    record_id: str,
    attachment_field: str,
    file_path: str,
    base_id: str = "",
) -> dict[str, Any]:
    """Upload a local file and append it to a record's attachment field."""
    path = _check_file(file_path)
    resolved_base = client.base_id(base_id)
    try:
        attachments = await client.attach_file_to_record(
            resolved_base, table_name, record_id, attachment_field, file_path
        )
    except NocoDBError as e:
        logger.warning("Attaching %s to record %s failed: %s", file_path, record_id, e.message)
        return {
            "success": False,
            "error": e.message,
            "file_path": file_path,
            "record_id": record_id,
        }
    return {
        "success": True,
        "message": "File uploaded and attached to record",
        "file_name": path.name,
        "record_id": record_id,
        "attachment_field": attachment_field,
        "total_attachments": len(attachments),
    }


async def get_attachment_info(
    client: NocoDBClient,
    table_name: str,
    record_id: str,
    attachment_field: str,
    base_id: str = "",
) -> dict[str, Any]:
    """Read the attachment descriptors stored in one field of a record."""
    record = await client.get_record(client.base_id(base_id), table_name, record_id)
    attachments = normalize_attachments(record.get(attachment_field))
    if not attachments:
        return {"attachments": [], "message": "No attachments found in the specified field"}
    return {
        "attachments": attachments,
        "count": len(attachments),
        "field": attachment_field,
        "record_id": record_id,
    }
