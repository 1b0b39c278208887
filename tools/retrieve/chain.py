"""
Strategy chain - try each retrieval strategy in order, first match wins.

Order (fixed):
1. View-only / forced PDF
2. Native-app export
3. Direct download (+ one alternate-host retry)
4. Confirmation-token download
5. Redirect to the viewer (or a structured error, per Settings.on_exhausted)

Attempts run strictly one after another: each outcome decides whether the
next is needed.
"""

import httpx

from adapters.drive import viewer_url
from config import Settings
from extractors import InterstitialKind, editor_path
from logging_config import logger
from models import (
    ErrorKind,
    FileMetadata,
    RetrievalFailure,
    RetrievalOutcome,
    RetrievalRequest,
    RetrievalSuccess,
    ViewerRedirect,
)

from .strategies import (
    AttemptContext,
    ConfirmationStrategy,
    DirectDownloadStrategy,
    NativeExportStrategy,
    Strategy,
    ViewOnlyPdfStrategy,
)

DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    ViewOnlyPdfStrategy(),
    NativeExportStrategy(),
    DirectDownloadStrategy(),
    ConfirmationStrategy(),
)


def retrieve(
    request: RetrievalRequest,
    metadata: FileMetadata,
    *,
    client: httpx.Client,
    settings: Settings,
    strategies: tuple[Strategy, ...] = DEFAULT_STRATEGIES,
) -> RetrievalOutcome:
    """
    Run the chain for one request.

    Returns:
        RetrievalSuccess with a validated candidate (caller must consume or
        close it), ViewerRedirect, or RetrievalFailure. Never raises for
        upstream trouble.
    """
    ctx = AttemptContext(client=client, settings=settings, request=request, metadata=metadata)

    for strategy in strategies:
        if not strategy.applies(request, metadata):
            logger.debug(f"{strategy.name}: not applicable")
            continue

        match = strategy.attempt(ctx)
        if match is not None:
            logger.info(f"{request.file_id}: retrieved by {strategy.name} as {match.filename}")
            return RetrievalSuccess(
                candidate=match.candidate,
                content_type=match.content_type,
                filename=match.filename,
                strategy=strategy.name,
            )

    return _exhausted(ctx)


def _exhausted_kind(ctx: AttemptContext) -> ErrorKind:
    """Best guess at why nothing worked."""
    if InterstitialKind.QUOTA_EXCEEDED in ctx.interstitials:
        return ErrorKind.RATE_LIMITED
    if ctx.statuses and ctx.statuses[-1] == 404:
        return ErrorKind.NOT_FOUND
    if ctx.interstitials and ctx.interstitials[-1] == InterstitialKind.NOT_FOUND:
        return ErrorKind.NOT_FOUND
    return ErrorKind.PERMISSION_DENIED


_REASONS = {
    ErrorKind.RATE_LIMITED: "Download quota exceeded for this file; try again later",
    ErrorKind.NOT_FOUND: "File not found or not shared",
    ErrorKind.PERMISSION_DENIED: "File is view-only or not publicly accessible",
}


def _exhausted(ctx: AttemptContext) -> RetrievalOutcome:
    last_status = ctx.statuses[-1] if ctx.statuses else None

    # Transport failure on the very last attempt: an internal error, not a
    # sharing problem
    if ctx.last_error is not None:
        logger.error(f"{ctx.request.file_id}: final attempt failed: {ctx.last_error.message}")
        return RetrievalFailure(
            kind=ctx.last_error.kind,
            reason=f"Failed to download file: {ctx.last_error.message}",
            last_status=last_status,
        )

    kind = _exhausted_kind(ctx)
    reason = _REASONS[kind]
    logger.warning(f"{ctx.request.file_id}: all strategies failed after {ctx.attempts} attempts ({kind.value})")

    if ctx.settings.on_exhausted == "redirect":
        path = editor_path(ctx.metadata.mime_type) if ctx.metadata.is_native_app else None
        return ViewerRedirect(
            location=viewer_url(ctx.settings, ctx.request.file_id, path),
            reason=reason,
            last_status=last_status,
        )
    return RetrievalFailure(kind=kind, reason=reason, last_status=last_status)
