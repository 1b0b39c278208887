"""
HTTP adapter - one GET per retrieval attempt.

Every attempt:
1. Follows redirects up to Settings.max_redirects
2. Applies explicit connect/read timeouts
3. Never raises on status - the validator decides what counts as success
4. Buffers at most Settings.size_ceiling bytes for inspection, leaving the
   rest of the body on the wire for streamed delivery

Transport failures are raised as GrabError (NETWORK_ERROR / TIMEOUT) so the
strategy chain can catch them per attempt.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

import httpx

from config import Settings
from models import ErrorKind, GrabError

__all__ = [
    "CandidateResponse",
    "build_client",
    "get_candidate",
    "get_text",
    "transport_error",
]


@dataclass
class CandidateResponse:
    """
    One upstream response, produced per attempt.

    `head` holds the buffered bytes. When the body was larger than the
    inspection limit, `rest` yields the remaining chunks and the underlying
    response stays open until iter_payload() finishes or close() is called.
    """
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    head: bytes = b""
    rest: Iterator[bytes] | None = None
    declared_length: int | None = None
    _response: httpx.Response | None = field(default=None, repr=False)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def fully_buffered(self) -> bool:
        return self.rest is None

    @property
    def byte_length(self) -> int:
        """Exact when fully buffered, otherwise a lower bound."""
        if self.rest is None:
            return len(self.head)
        return max(self.declared_length or 0, len(self.head))

    def iter_payload(self) -> Iterator[bytes]:
        """
        Yield the whole payload, buffered part first.

        Closes the upstream response when done, or when the consumer stops
        early (generator close on client disconnect).
        """
        try:
            if self.head:
                yield self.head
            if self.rest is not None:
                for chunk in self.rest:
                    if chunk:
                        yield chunk
        except httpx.HTTPError as e:
            raise GrabError(ErrorKind.NETWORK_ERROR, f"Upstream read failed mid-stream: {e}") from e
        finally:
            self.close()

    def read(self) -> bytes:
        """Buffer the whole payload (for callers that can't stream)."""
        return b"".join(self.iter_payload())

    def close(self) -> None:
        if self._response is not None:
            self._response.close()
            self._response = None


def build_client(settings: Settings) -> httpx.Client:
    """Create the per-request client with bounded redirects and explicit timeouts."""
    return httpx.Client(
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        timeout=httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout),
        headers={"User-Agent": settings.user_agent},
    )


def _parse_content_length(header_value: str | None) -> int | None:
    """Parse Content-Length header, returning None if missing or invalid."""
    if not header_value:
        return None
    try:
        return int(header_value.strip())
    except (ValueError, TypeError):
        return None


def transport_error(url: str, exc: Exception) -> GrabError:
    if isinstance(exc, httpx.TimeoutException):
        return GrabError(ErrorKind.TIMEOUT, f"Request timed out: {url}", retryable=True)
    if isinstance(exc, httpx.TooManyRedirects):
        return GrabError(ErrorKind.NETWORK_ERROR, f"Too many redirects: {url}")
    return GrabError(ErrorKind.NETWORK_ERROR, f"Request failed: {url} - {exc}", retryable=True)


def get_candidate(
    client: httpx.Client,
    url: str,
    settings: Settings,
    *,
    accept: str | None = None,
) -> CandidateResponse:
    """
    GET a URL and buffer up to the size ceiling.

    Args:
        client: Client from build_client()
        url: Upstream URL
        settings: Supplies size_ceiling and chunk_size
        accept: Optional Accept header

    Returns:
        CandidateResponse (any status code)

    Raises:
        GrabError: On transport failure (connect, timeout, redirect loop)
    """
    headers = {"Accept": accept} if accept else None
    request = client.build_request("GET", url, headers=headers)
    try:
        response = client.send(request, stream=True)
    except httpx.HTTPError as e:
        raise transport_error(url, e) from e

    chunks = response.iter_bytes(chunk_size=settings.chunk_size)
    buffered = bytearray()
    exhausted = True
    try:
        for chunk in chunks:
            buffered.extend(chunk)
            if len(buffered) > settings.size_ceiling:
                exhausted = False
                break
    except httpx.HTTPError as e:
        response.close()
        raise transport_error(url, e) from e

    if exhausted:
        response.close()

    return CandidateResponse(
        status_code=response.status_code,
        headers={k.lower(): v for k, v in response.headers.items()},
        url=str(response.url),
        head=bytes(buffered),
        rest=None if exhausted else chunks,
        declared_length=_parse_content_length(response.headers.get("content-length")),
        _response=None if exhausted else response,
    )


def get_text(client: httpx.Client, url: str) -> tuple[int, str]:
    """
    Plain GET for small HTML pages (viewer page scrape).

    Returns:
        (status_code, body text)

    Raises:
        GrabError: On transport failure
    """
    try:
        response = client.get(url, headers={"Accept": "text/html,application/xhtml+xml"})
    except httpx.HTTPError as e:
        raise transport_error(url, e) from e
    return response.status_code, response.text
