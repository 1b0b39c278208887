"""
Type definitions for drivegrab.

Dataclasses defining the contracts between layers:
- Adapters produce CandidateResponse objects from upstream calls
- Extractors are pure functions over names, MIME types and HTML
- Tools probe, run the strategy chain and build deliveries

These types make the adapter→tool contract explicit and IDE-checkable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from adapters.http import CandidateResponse


# ============================================================================
# ERROR TYPES
# ============================================================================

class ErrorKind(Enum):
    """Categories of errors for consistent handling."""
    INVALID_INPUT = "invalid_input"          # Missing or unparseable identifier
    NOT_FOUND = "not_found"                  # Upstream says the file doesn't exist
    PERMISSION_DENIED = "permission_denied"  # Not shared for link access
    RATE_LIMITED = "rate_limited"            # Quota / too many downloads
    NETWORK_ERROR = "network_error"          # Connection failed
    TIMEOUT = "timeout"                      # Request timed out
    UNKNOWN = "unknown"                      # Unexpected error


# HTTP status classification surfaced to callers
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMITED: 429,
}

SHARING_HINT = (
    'Ask the owner to enable link sharing ("Anyone with the link") '
    "or to allow downloads for viewers."
)


class GrabError(Exception):
    """
    Structured error for consistent handling across layers.

    Adapters raise these on upstream failures.
    Tools catch them per attempt, or format them for the caller.

    Inherits from Exception so it can be raised.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    @property
    def status_classification(self) -> int:
        return STATUS_BY_KIND.get(self.kind, 500)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for CLI/MCP response."""
        return {
            "error": True,
            "kind": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
            **self.details,
        }


def kind_for_status(status: int) -> ErrorKind:
    """Map an upstream HTTP status to an ErrorKind."""
    if status in (401, 403):
        return ErrorKind.PERMISSION_DENIED
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status >= 500:
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.UNKNOWN


# ============================================================================
# METADATA TYPES
# ============================================================================

NATIVE_APP_PREFIX = "application/vnd.google-apps"


@dataclass
class FileMetadata:
    """
    What we know about an upstream file before retrieval.

    Never absent: when the metadata API refuses us, the prober builds a
    degraded record (name scraped from the viewer page, MIME type guessed
    or unknown).
    """
    file_id: str
    name: str = "file"
    mime_type: str | None = None
    size_bytes: int | None = None
    can_download: bool = False
    is_native_app: bool = False
    export_options: tuple[str, ...] = ()
    is_view_only: bool | None = None
    is_public: bool | None = None
    degraded: bool = False

    def __post_init__(self) -> None:
        # Export options only make sense for editor-only documents
        if not self.is_native_app:
            self.export_options = ()

    @property
    def is_pdf_like(self) -> bool:
        return bool(self.mime_type and "pdf" in self.mime_type)

    def to_dict(self) -> dict[str, Any]:
        """Outbound metadata response."""
        result: dict[str, Any] = {
            "id": self.file_id,
            "name": self.name,
            "mimeType": self.mime_type,
        }
        if self.size_bytes is not None:
            result["size"] = self.size_bytes
        result["canDownload"] = self.can_download
        result["isGoogleApps"] = self.is_native_app
        if self.is_view_only is not None:
            result["isViewOnly"] = self.is_view_only
        if self.is_public is not None:
            result["isPublic"] = self.is_public
        result["exportOptions"] = [fmt.lower() for fmt in self.export_options]
        return result


# ============================================================================
# RETRIEVAL TYPES
# ============================================================================

@dataclass(frozen=True)
class RetrievalRequest:
    """One caller request. Identifier presence is checked here, before the chain runs."""
    file_id: str
    requested_format: str | None = None
    force_pdf: bool = False
    view_only: bool = False

    def __post_init__(self) -> None:
        if not self.file_id or not self.file_id.strip():
            raise GrabError(ErrorKind.INVALID_INPUT, "File ID is required")
        if self.requested_format is not None:
            fmt = self.requested_format.strip().lstrip(".").lower()
            object.__setattr__(self, "requested_format", fmt or None)


@dataclass
class RetrievalSuccess:
    """Validated content, ready for delivery."""
    candidate: CandidateResponse
    content_type: str
    filename: str
    strategy: str


@dataclass
class ViewerRedirect:
    """Soft failure: send the caller to the upstream viewer instead."""
    location: str
    reason: str
    last_status: int | None = None


@dataclass
class RetrievalFailure:
    """Hard failure: nothing retrievable and no redirect wanted."""
    kind: ErrorKind
    reason: str
    last_status: int | None = None

    def to_error(self) -> GrabError:
        details: dict[str, Any] = {}
        if self.last_status is not None:
            details["last_status"] = self.last_status
        return GrabError(self.kind, self.reason, details=details)


RetrievalOutcome = RetrievalSuccess | ViewerRedirect | RetrievalFailure


# ============================================================================
# TOOL RESULTS
# ============================================================================

@dataclass
class DownloadResult:
    """Successful download deposited to disk."""
    path: str                    # Full path to the deposited file
    filename: str
    content_type: str
    size_bytes: int
    strategy: str                # Which retrieval strategy produced it
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "filename": self.filename,
            "content_type": self.content_type,
            "size_bytes": self.size_bytes,
            "strategy": self.strategy,
            "metadata": self.metadata,
        }


@dataclass
class RedirectResult:
    """Nothing downloadable, but the viewer may still work for a human."""
    location: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "redirect": True,
            "location": self.location,
            "reason": self.reason,
            "hint": "Open the viewer link in a browser. " + SHARING_HINT,
        }


@dataclass
class ErrorResult:
    """Error payload with status classification for the caller."""
    error: str
    status_classification: int = 500
    kind: str = "unknown"
    details: str | None = None
    hint: str | None = None

    @classmethod
    def from_error(cls, exc: GrabError) -> ErrorResult:
        hint = SHARING_HINT if exc.kind in (ErrorKind.PERMISSION_DENIED, ErrorKind.NOT_FOUND) else None
        details = ", ".join(f"{k}={v}" for k, v in exc.details.items()) or None
        return cls(
            error=exc.message,
            status_classification=exc.status_classification,
            kind=exc.kind.value,
            details=details,
            hint=hint,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.error, "kind": self.kind}
        if self.details:
            result["details"] = self.details
        if self.hint:
            result["hint"] = self.hint
        result["statusClassification"] = self.status_classification
        return result
