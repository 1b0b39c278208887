"""
Metadata probe - what is this file, and how much can we see of it?

Never fails: a refused metadata call degrades to a record scraped from the
viewer page, and a failed scrape degrades further to name "file" with an
unknown MIME type.
"""

from typing import Any

import httpx

from adapters.drive import fetch_viewer_page, get_file_metadata
from config import Settings
from extractors import export_options, extract_title, looks_like_pdf_viewer
from logging_config import logger
from models import NATIVE_APP_PREFIX, FileMetadata, GrabError

DEGRADED_NAME = "file"


def _parse_size(raw: Any) -> int | None:
    """Drive returns size as a decimal string; native docs have none."""
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _is_public(permissions: Any) -> bool | None:
    """Any non-owner 'anyone' permission means link sharing is on."""
    if not isinstance(permissions, list):
        return None
    return any(
        p.get("type") == "anyone" and p.get("role") != "owner"
        for p in permissions
        if isinstance(p, dict)
    )


def metadata_from_api(file_id: str, data: dict[str, Any]) -> FileMetadata:
    """Build FileMetadata from a Drive v3 files.get response."""
    mime_type = data.get("mimeType") or None
    is_native = bool(mime_type and mime_type.startswith(NATIVE_APP_PREFIX))
    capabilities = data.get("capabilities") or {}
    can_download = bool(capabilities.get("canDownload", False))

    return FileMetadata(
        file_id=file_id,
        name=data.get("name") or DEGRADED_NAME,
        mime_type=mime_type,
        size_bytes=_parse_size(data.get("size")),
        can_download=can_download,
        is_native_app=is_native,
        export_options=export_options(mime_type) if is_native else (),
        is_view_only=not can_download,
        is_public=_is_public(data.get("permissions")),
    )


def degraded_metadata(file_id: str, page: str | None) -> FileMetadata:
    """Best-effort record from the viewer page (or from nothing at all)."""
    name = extract_title(page) if page else None
    is_pdf = bool(page) and looks_like_pdf_viewer(page or "")
    return FileMetadata(
        file_id=file_id,
        name=name or DEGRADED_NAME,
        mime_type="application/pdf" if is_pdf else None,
        can_download=False,
        is_view_only=True,
        degraded=True,
    )


def probe_metadata(client: httpx.Client, settings: Settings, file_id: str) -> FileMetadata:
    """
    Get metadata for a file, degrading instead of failing.

    Args:
        client: Client from adapters.http.build_client()
        settings: Runtime settings
        file_id: Extracted file ID

    Returns:
        FileMetadata - degraded=True when the API refused us
    """
    try:
        data = get_file_metadata(client, settings, file_id)
        return metadata_from_api(file_id, data)
    except GrabError as e:
        logger.info(f"Metadata API unavailable for {file_id} ({e.kind.value}), scraping viewer page")

    try:
        page = fetch_viewer_page(client, settings, file_id)
    except GrabError as e:
        logger.warning(f"Viewer page unavailable for {file_id} ({e.kind.value}), using defaults")
        page = None

    return degraded_metadata(file_id, page)
