"""
Download tool - link in, file (or redirect, or structured error) out.

Three entry points:
- do_info: metadata only
- do_download: stream into the workspace, return a result for CLI/MCP
- open_download: hand back a streaming Delivery for embedding elsewhere

One httpx client per request. When the delivery streams, the client lives
until the body is exhausted or Delivery.close() is called.
"""

from collections.abc import Callable, Iterator
from pathlib import Path

import httpx

from adapters.http import build_client
from config import Settings, get_settings
from logging_config import logger
from models import (
    DownloadResult,
    ErrorResult,
    FileMetadata,
    GrabError,
    RedirectResult,
    RetrievalRequest,
    RetrievalSuccess,
)
from validation import extract_file_id
from workspace import get_deposit_folder, write_manifest, write_stream

from .deliver import Delivery, deliver, deliver_error, unexpected_error
from .probe import probe_metadata
from .retrieve import retrieve


def _release_when_done(body: Iterator[bytes], release: Callable[[], None]) -> Iterator[bytes]:
    try:
        yield from body
    finally:
        release()


def open_download(
    link: str,
    *,
    requested_format: str | None = None,
    force_pdf: bool = False,
    view_only: bool = False,
    stream: bool = True,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> Delivery:
    """
    Resolve a link all the way to a Delivery.

    Never raises: invalid input or settings, upstream refusals and
    unexpected failures all come back as error deliveries.

    Args:
        link: Share link, editor URL or bare file ID
        requested_format: Export format (e.g. "csv"); None for the natural one
        force_pdf: Go straight for a PDF rendition
        view_only: Treat the file as view-only
        stream: Body as a chunk iterator (True) or bytes (False)
        settings: Overrides get_settings()
        client: Caller-owned client; left open
    """
    try:
        settings = settings or get_settings()
        file_id = extract_file_id(link)
        request = RetrievalRequest(
            file_id=file_id,
            requested_format=requested_format,
            force_pdf=force_pdf,
            view_only=view_only,
        )
    except GrabError as e:
        logger.info(f"Rejected request for {link!r}: {e.message}")
        return deliver_error(e)

    owns_client = client is None
    http = client or build_client(settings)
    candidate = None

    def release() -> None:
        if candidate is not None:
            candidate.close()
        if owns_client:
            http.close()

    try:
        metadata = probe_metadata(http, settings, file_id)
        outcome = retrieve(request, metadata, client=http, settings=settings)
        if isinstance(outcome, RetrievalSuccess):
            candidate = outcome.candidate
        delivery = deliver(outcome, stream=stream)
    except GrabError as e:
        release()
        return deliver_error(e)
    except Exception as e:
        release()
        logger.exception(f"Unexpected failure retrieving {file_id}")
        return unexpected_error(e)

    delivery.file_id = file_id
    delivery.metadata = metadata

    if isinstance(delivery.body, Iterator):
        delivery.body = _release_when_done(delivery.body, release)
        delivery.release = release
    else:
        release()
    return delivery


def do_info(
    link: str,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> FileMetadata | ErrorResult:
    """
    Metadata for a link. Degrades instead of failing when upstream refuses.

    Only an unparseable link or malformed settings are errors.
    """
    try:
        settings = settings or get_settings()
        file_id = extract_file_id(link)
        if client is not None:
            return probe_metadata(client, settings, file_id)
        with build_client(settings) as http:
            return probe_metadata(http, settings, file_id)
    except GrabError as e:
        return ErrorResult.from_error(e)
    except Exception as e:
        logger.exception(f"Unexpected failure probing {link!r}")
        return unexpected_error(e).error


def do_download(
    link: str,
    base_path: Path | None = None,
    requested_format: str | None = None,
    force_pdf: bool = False,
    view_only: bool = False,
    settings: Settings | None = None,
    client: httpx.Client | None = None,
) -> DownloadResult | RedirectResult | ErrorResult:
    """
    Download a file into drivegrab-fetch/{title}--{id}/.

    Args:
        link: Share link, editor URL or bare file ID
        base_path: Base directory for deposits (defaults to cwd)
        requested_format: Export format for editor-only documents
        force_pdf: Ask for a PDF rendition
        view_only: Treat the file as view-only

    Returns:
        DownloadResult with the deposited path, RedirectResult when only the
        viewer can show the file, or ErrorResult.
    """
    delivery = open_download(
        link,
        requested_format=requested_format,
        force_pdf=force_pdf,
        view_only=view_only,
        settings=settings,
        client=client,
    )

    if delivery.status == 302:
        return RedirectResult(
            location=delivery.headers["Location"],
            reason=delivery.redirect_reason or "",
        )
    if not delivery.ok or delivery.body is None:
        return delivery.error or unexpected_error(RuntimeError("empty delivery")).error

    try:
        folder = get_deposit_folder(delivery.metadata.name, delivery.file_id, base_path)
        body = [delivery.body] if isinstance(delivery.body, bytes) else delivery.body
        path, size = write_stream(folder, delivery.filename, body)
        write_manifest(
            folder,
            delivery.file_id,
            path.name,
            extra={
                "content_type": delivery.content_type,
                "strategy": delivery.strategy,
                "size_bytes": size,
                "metadata": delivery.metadata.to_dict(),
            },
        )
    except GrabError as e:
        delivery.close()
        logger.warning(f"{delivery.file_id}: download interrupted: {e.message}")
        return ErrorResult.from_error(e)
    except OSError as e:
        delivery.close()
        logger.error(f"{delivery.file_id}: could not write deposit: {e}")
        return unexpected_error(e).error

    logger.info(f"{delivery.file_id}: saved {size} bytes to {path}")
    return DownloadResult(
        path=str(path),
        filename=path.name,
        content_type=delivery.content_type,
        size_bytes=size,
        strategy=delivery.strategy or "",
        metadata=delivery.metadata.to_dict(),
    )
