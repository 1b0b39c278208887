"""
Shared test helpers for drivegrab.

Centralizes the fake upstream: a routing table served through
httpx.MockTransport, so adapters and tools run their real HTTP code paths
without touching the network.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from adapters.http import CandidateResponse
from config import Settings

FILE_ID = "1AbCdEfGhIjKlMnOpQrStUvWxYz012345"

PDF_MIME = "application/pdf"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_MIME = "application/vnd.google-apps.spreadsheet"
DOC_MIME = "application/vnd.google-apps.document"

Responder = httpx.Response | Callable[[httpx.Request], httpx.Response]


# ============================================================================
# Canned responses
# ============================================================================

def html_page(body: str, status: int = 200) -> httpx.Response:
    """An HTML response (interstitial, viewer page, error page)."""
    return httpx.Response(
        status,
        headers={"content-type": "text/html; charset=utf-8"},
        content=body.encode("utf-8"),
    )


def file_response(
    content: bytes,
    content_type: str = "application/octet-stream",
    status: int = 200,
    disposition: str | None = None,
) -> httpx.Response:
    """A file payload."""
    headers = {"content-type": content_type}
    if disposition:
        headers["content-disposition"] = disposition
    return httpx.Response(status, headers=headers, content=content)


def json_response(data: dict[str, Any], status: int = 200) -> httpx.Response:
    return httpx.Response(
        status,
        headers={"content-type": "application/json"},
        content=json.dumps(data).encode("utf-8"),
    )


def api_metadata(
    file_id: str = FILE_ID,
    name: str = "Report.pdf",
    mime_type: str = PDF_MIME,
    size: str | None = "40000",
    can_download: bool = True,
    public: bool = True,
) -> dict[str, Any]:
    """A Drive v3 files.get body."""
    data: dict[str, Any] = {
        "id": file_id,
        "name": name,
        "mimeType": mime_type,
        "capabilities": {"canDownload": can_download},
        "permissions": [{"type": "anyone", "role": "reader"}] if public else [{"type": "user", "role": "owner"}],
    }
    if size is not None:
        data["size"] = size
    return data


VIRUS_SCAN_PAGE = """<!DOCTYPE html><html><head><title>Google Drive - Virus scan warning</title></head>
<body><p>Google Drive can't scan this file for viruses.</p>
<form id="download-form" action="https://drive.usercontent.google.com/download" method="get">
<input type="hidden" name="id" value="{file_id}">
<input type="hidden" name="export" value="download">
<input type="hidden" name="confirm" value="t">
<input type="hidden" name="uuid" value="abc-123">
<input type="submit" id="uc-download-link" value="Download anyway">
</form></body></html>"""

QUOTA_PAGE = "<html><head><title>Google Drive - Quota exceeded</title></head><body>Too many users have viewed or downloaded this file recently.</body></html>"

ACCESS_PAGE = "<html><head><title>Google Drive</title></head><body>You need access. Request access, or switch to an account with access.</body></html>"


# ============================================================================
# Fake upstream
# ============================================================================

@dataclass
class Route:
    host: str | None
    path: str
    query: dict[str, str] | None
    responder: Responder

    def matches(self, request: httpx.Request) -> bool:
        if self.host is not None and request.url.host != self.host:
            return False
        if request.url.path != self.path:
            return False
        if self.query is not None and dict(request.url.params) != self.query:
            return False
        return True


@dataclass
class FakeDrive:
    """
    Routing table for httpx.MockTransport.

    Routes match on host, path and (exactly) the query parameters; first
    match wins. Unrouted requests get Drive's 404 page. Every request is
    recorded in order.

    Usage:
        drive = FakeDrive()
        drive.on("/uc", file_response(b"data"), query={"export": "download", "id": FILE_ID})
        with drive.client(settings) as client:
            ...
        assert drive.paths() == ["/uc"]
    """
    routes: list[Route] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def on(
        self,
        path: str,
        responder: Responder,
        *,
        host: str | None = None,
        query: dict[str, str] | None = None,
    ) -> FakeDrive:
        self.routes.append(Route(host=host, path=path, query=query, responder=responder))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for route in self.routes:
            if route.matches(request):
                responder = route.responder
                if isinstance(responder, httpx.Response):
                    # Fresh copy: a Response body can only be read once
                    return httpx.Response(
                        responder.status_code,
                        headers=responder.headers,
                        content=responder.content,
                    )
                return responder(request)
        return html_page("<html><title>Error 404 (Not Found)!!1</title></html>", status=404)

    def client(self, settings: Settings) -> httpx.Client:
        """Client configured like adapters.http.build_client(), on this transport."""
        return httpx.Client(
            transport=httpx.MockTransport(self),
            follow_redirects=True,
            max_redirects=settings.max_redirects,
            headers={"User-Agent": settings.user_agent},
        )

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]


def fake_drive_with_metadata(data: dict[str, Any] | None, status: int = 200) -> FakeDrive:
    """FakeDrive with the metadata API route set (403 when data is None)."""
    drive = FakeDrive()
    file_id = data["id"] if data else FILE_ID
    if data is None:
        drive.on(f"/drive/v3/files/{file_id}", json_response({"error": {"code": 403}}, status=403))
    else:
        drive.on(f"/drive/v3/files/{file_id}", json_response(data, status=status))
    return drive


def make_candidate(
    body: bytes = b"",
    content_type: str = "application/octet-stream",
    status: int = 200,
    declared_length: int | None = None,
    streaming: bool = False,
) -> CandidateResponse:
    """CandidateResponse without HTTP; streaming=True leaves an (empty) rest iterator."""
    return CandidateResponse(
        status_code=status,
        headers={"content-type": content_type},
        url="https://drive.google.com/uc",
        head=body,
        rest=iter([]) if streaming else None,
        declared_length=declared_length,
    )
