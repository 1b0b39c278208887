"""
Drive adapter - unauthenticated Google Drive endpoints.

Builds the upstream URLs the strategy chain tries, and wraps the two
read-only metadata sources: the Drive v3 metadata API and the human-facing
viewer page (scrape fallback).
"""

from typing import Any, cast
from urllib.parse import quote, urlencode

import httpx

from adapters.http import get_text, transport_error
from config import Settings
from logging_config import log_attempt
from models import ErrorKind, GrabError, kind_for_status
from retry import RETRYABLE_STATUS_CODES, with_retry


# Fields for file metadata - only what routing and the info response need
FILE_METADATA_FIELDS = (
    "id,"
    "name,"
    "mimeType,"
    "size,"
    "capabilities(canDownload),"
    "permissions(type,role)"
)


# ============================================================================
# URL BUILDERS
# ============================================================================

def _fid(file_id: str) -> str:
    return quote(file_id, safe="")


def metadata_url(settings: Settings, file_id: str) -> str:
    params = {"fields": FILE_METADATA_FIELDS, "supportsAllDrives": "true"}
    if settings.api_key:
        params["key"] = settings.api_key
    return f"{settings.api_base}/files/{_fid(file_id)}?{urlencode(params)}"


def direct_download_url(settings: Settings, file_id: str) -> str:
    return f"{settings.drive_base}/uc?{urlencode({'export': 'download', 'id': file_id})}"


def alternate_download_url(settings: Settings, file_id: str) -> str:
    """Same download, served from the docs host with the parameters reversed."""
    return f"{settings.docs_base}/uc?{urlencode({'id': file_id, 'export': 'download'})}"


def confirm_download_url(settings: Settings, file_id: str, token: str = "t") -> str:
    return (
        f"{settings.drive_base}/uc?"
        f"{urlencode({'export': 'download', 'id': file_id, 'confirm': token})}"
    )


def pdf_export_url(settings: Settings, file_id: str) -> str:
    return (
        f"{settings.drive_base}/uc?"
        f"{urlencode({'id': file_id, 'export': 'download', 'format': 'pdf'})}"
    )


def preview_url(settings: Settings, file_id: str) -> str:
    return f"{settings.drive_base}/file/d/{_fid(file_id)}/preview"


def export_url(settings: Settings, file_id: str, fmt: str, editor_path: str | None = None) -> str:
    """
    Native-app export URL.

    Editor documents export from their own editor path; drawings use a path
    segment for the format. Anything else goes through the generic
    download endpoint with a format hint.
    """
    if editor_path == "drawings":
        return f"{settings.docs_base}/drawings/d/{_fid(file_id)}/export/{quote(fmt, safe='')}"
    if editor_path:
        return f"{settings.docs_base}/{editor_path}/d/{_fid(file_id)}/export?{urlencode({'format': fmt})}"
    return (
        f"{settings.drive_base}/uc?"
        f"{urlencode({'export': 'download', 'id': file_id, 'format': fmt})}"
    )


def viewer_url(settings: Settings, file_id: str, editor_path: str | None = None) -> str:
    """Human-facing viewer: the editor for native documents, the file viewer otherwise."""
    if editor_path and editor_path != "drawings":
        return f"{settings.docs_base}/{editor_path}/d/{_fid(file_id)}/view"
    return f"{settings.drive_base}/file/d/{_fid(file_id)}/view"


def form_url(action: str, params: dict[str, str]) -> str:
    """GET URL for a submitted interstitial form."""
    separator = "&" if "?" in action else "?"
    return f"{action}{separator}{urlencode(params)}"


# ============================================================================
# METADATA SOURCES
# ============================================================================

def _status_error(status: int, what: str, file_id: str) -> GrabError:
    return GrabError(
        kind_for_status(status),
        f"{what} returned {status} for {file_id}",
        details={"status": status, "file_id": file_id},
        retryable=status in RETRYABLE_STATUS_CODES,
    )


@with_retry(max_attempts=2, delay_ms=500)
def get_file_metadata(client: httpx.Client, settings: Settings, file_id: str) -> dict[str, Any]:
    """
    Get file metadata from the Drive v3 API without credentials.

    Args:
        client: Client from adapters.http.build_client()
        settings: Supplies API base URL and optional API key
        file_id: The file ID

    Returns:
        Dict with: id, name, mimeType, size, capabilities, permissions

    Raises:
        GrabError: PERMISSION_DENIED / NOT_FOUND for restricted or missing
            files, NETWORK_ERROR / TIMEOUT on transport failure
    """
    url = metadata_url(settings, file_id)
    log_attempt("metadata", url)
    try:
        response = client.get(url, headers={"Accept": "application/json"})
    except httpx.HTTPError as e:
        raise transport_error(url, e) from e

    if not response.is_success:
        raise _status_error(response.status_code, "Metadata API", file_id)

    try:
        return cast(dict[str, Any], response.json())
    except ValueError as e:
        raise GrabError(ErrorKind.UNKNOWN, f"Metadata API returned invalid JSON for {file_id}") from e


@with_retry(max_attempts=2, delay_ms=500)
def fetch_viewer_page(client: httpx.Client, settings: Settings, file_id: str) -> str:
    """
    Fetch the viewer page HTML for scraping.

    Raises:
        GrabError: On non-success status or transport failure
    """
    url = viewer_url(settings, file_id)
    log_attempt("viewer-page", url)
    status, html = get_text(client, url)
    if status >= 400:
        raise _status_error(status, "Viewer page", file_id)
    return html
