"""
Delivery - turn a retrieval outcome into status, headers and body.

Transport-agnostic: the CLI writes the body to disk, the MCP server
deposits it, an HTTP front end can hand `body` straight to its response.
"""

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from models import (
    ErrorKind,
    ErrorResult,
    FileMetadata,
    GrabError,
    RetrievalFailure,
    RetrievalOutcome,
    RetrievalSuccess,
    ViewerRedirect,
)


@dataclass
class Delivery:
    """What goes back to the caller."""
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Iterator[bytes] | bytes | None = None
    filename: str | None = None
    content_type: str | None = None
    strategy: str | None = None
    redirect_reason: str | None = None
    error: ErrorResult | None = None
    file_id: str | None = None
    metadata: FileMetadata | None = None
    release: Callable[[], None] | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status == 200

    @property
    def payload(self) -> dict[str, Any] | None:
        """JSON body for error responses."""
        return self.error.to_dict() if self.error else None

    def close(self) -> None:
        """Abort an unconsumed streamed body (caller went away)."""
        if self.body is not None and not isinstance(self.body, bytes):
            close = getattr(self.body, "close", None)
            if close is not None:
                close()
        if self.release is not None:
            self.release()


def content_disposition(filename: str) -> str:
    """
    attachment header value with the filename quoted.

    Backslashes and quotes are escaped; line breaks can't reach the header.
    Non-ASCII names get an RFC 5987 filename* alongside an ASCII fallback.
    """
    filename = re.sub(r'[\r\n]+', ' ', filename)
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    if escaped.isascii():
        return f'attachment; filename="{escaped}"'

    fallback = escaped.encode("ascii", errors="replace").decode("ascii").replace("?", "_")
    return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quote(filename, safe="")}'


def deliver(outcome: RetrievalOutcome, *, stream: bool = True) -> Delivery:
    """
    Build the caller-facing delivery for a chain outcome.

    Args:
        outcome: Result of tools.retrieve.retrieve()
        stream: Hand back a chunk iterator (True) or the whole payload (False)
    """
    if isinstance(outcome, RetrievalSuccess):
        candidate = outcome.candidate
        headers = {
            "Content-Type": outcome.content_type,
            "Content-Disposition": content_disposition(outcome.filename),
        }
        if candidate.fully_buffered:
            headers["Content-Length"] = str(candidate.byte_length)

        body: Iterator[bytes] | bytes = candidate.iter_payload() if stream else candidate.read()
        return Delivery(
            status=200,
            headers=headers,
            body=body,
            filename=outcome.filename,
            content_type=outcome.content_type,
            strategy=outcome.strategy,
        )

    if isinstance(outcome, ViewerRedirect):
        return Delivery(
            status=302,
            headers={"Location": outcome.location},
            redirect_reason=outcome.reason,
        )

    if isinstance(outcome, RetrievalFailure):
        return deliver_error(outcome.to_error())

    raise TypeError(f"Unknown retrieval outcome: {outcome!r}")


def deliver_error(exc: GrabError) -> Delivery:
    """Structured error delivery with status classification and remediation hint."""
    error = ErrorResult.from_error(exc)
    return Delivery(
        status=error.status_classification,
        headers={"Content-Type": "application/json"},
        error=error,
    )


def unexpected_error(exc: Exception) -> Delivery:
    """Anything that escaped the chain: a 500 with the message as details."""
    return deliver_error(GrabError(ErrorKind.UNKNOWN, "Failed to download file", details={"cause": str(exc)}))
