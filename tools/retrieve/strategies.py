"""
Retrieval strategies - one upstream technique each.

Every strategy exposes the same two calls:
    applies(request, metadata) -> bool
    attempt(ctx) -> StrategyMatch | None

None means "no match, try the next one". Strategies never raise for
upstream trouble: AttemptContext.fetch() swallows transport errors and
rejected candidates, recording them for the chain's final verdict.
"""

from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx

from adapters.drive import (
    alternate_download_url,
    confirm_download_url,
    direct_download_url,
    export_url,
    form_url,
    pdf_export_url,
    preview_url,
)
from adapters.http import CandidateResponse, get_candidate
from config import Settings
from extractors import (
    InterstitialKind,
    classify_interstitial,
    content_type_for_format,
    default_export_format,
    editor_path,
    extract_confirm_token,
    extract_download_form,
    filename_from_disposition,
    resolve_filename,
)
from extractors.filenames import GENERIC_CONTENT_TYPE, bare_mime
from logging_config import log_attempt, log_verdict, logger
from models import FileMetadata, GrabError, RetrievalRequest

from .validator import Verdict, validate_candidate

PDF_CONTENT_TYPE = "application/pdf"

# Declared types that say nothing about the file
_GENERIC_TYPES = {"", GENERIC_CONTENT_TYPE, "binary/octet-stream", "application/binary", "application/force-download"}

# Interstitial forms may only send us back to Google
_TRUSTED_FORM_HOSTS = ("google.com", "googleusercontent.com")


@dataclass
class StrategyMatch:
    candidate: CandidateResponse
    content_type: str
    filename: str


@dataclass
class AttemptContext:
    """Per-request scratchpad. Never shared between requests."""
    client: httpx.Client
    settings: Settings
    request: RetrievalRequest
    metadata: FileMetadata
    statuses: list[int] = field(default_factory=list)
    interstitials: list[InterstitialKind] = field(default_factory=list)
    last_page: str | None = None
    last_verdict: Verdict | None = None
    last_error: GrabError | None = None
    attempts: int = 0

    def fetch(
        self,
        strategy: str,
        url: str,
        *,
        accept: str | None = None,
        min_bytes: int = 0,
    ) -> CandidateResponse | None:
        """
        One validated GET. Returns the candidate, or None if it was rejected
        or the transport failed.
        """
        self.attempts += 1
        self.last_verdict = None
        log_attempt(strategy, url)
        try:
            candidate = get_candidate(self.client, url, self.settings, accept=accept)
        except GrabError as e:
            self.last_error = e
            logger.warning(f"{strategy}: {e.message}")
            return None

        self.last_error = None
        self.statuses.append(candidate.status_code)
        verdict = validate_candidate(candidate, self.settings.size_ceiling, min_bytes=min_bytes)
        self.last_verdict = verdict
        log_verdict(strategy, candidate.status_code, candidate.content_type, candidate.byte_length, verdict.reason)

        if verdict.accepted:
            return candidate

        if verdict.interstitial:
            page = candidate.head.decode("utf-8", errors="replace")
            self.last_page = page
            self.interstitials.append(classify_interstitial(page))
        candidate.close()
        return None

    def base_name(self, candidate: CandidateResponse) -> str:
        """Metadata name, unless we only have a placeholder and upstream offers better."""
        if self.metadata.degraded:
            offered = filename_from_disposition(candidate.headers.get("content-disposition"))
            if offered:
                return offered
        return self.metadata.name


class Strategy:
    """Base class: applies everywhere, never matches."""

    name = "strategy"

    def applies(self, request: RetrievalRequest, metadata: FileMetadata) -> bool:
        return True

    def attempt(self, ctx: AttemptContext) -> StrategyMatch | None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class ViewOnlyPdfStrategy(Strategy):
    """
    View-only and forced-PDF files.

    Tries the PDF export endpoint, then the embedded preview. Tiny payloads
    are rejected: both endpoints answer restricted files with small stubs.
    """

    name = "view-only-pdf"

    def applies(self, request: RetrievalRequest, metadata: FileMetadata) -> bool:
        if request.view_only or request.force_pdf:
            return True
        return metadata.is_pdf_like and bool(metadata.is_view_only)

    def attempt(self, ctx: AttemptContext) -> StrategyMatch | None:
        settings, file_id = ctx.settings, ctx.request.file_id
        sub_attempts = (
            (pdf_export_url(settings, file_id), PDF_CONTENT_TYPE),
            (preview_url(settings, file_id), None),
        )
        for url, accept in sub_attempts:
            candidate = ctx.fetch(self.name, url, accept=accept, min_bytes=settings.min_payload_bytes)
            if candidate is not None:
                filename = resolve_filename(ctx.base_name(candidate), PDF_CONTENT_TYPE, "pdf")
                return StrategyMatch(candidate, PDF_CONTENT_TYPE, filename)
        return None


class NativeExportStrategy(Strategy):
    """
    Editor-only documents, or any file the caller wants in a specific format.

    The export endpoint's declared Content-Type is not trusted: the type
    comes from the format table.
    """

    name = "native-export"

    def applies(self, request: RetrievalRequest, metadata: FileMetadata) -> bool:
        return metadata.is_native_app or request.requested_format is not None

    def effective_format(self, request: RetrievalRequest, metadata: FileMetadata) -> str:
        return request.requested_format or default_export_format(metadata.mime_type)

    def attempt(self, ctx: AttemptContext) -> StrategyMatch | None:
        fmt = self.effective_format(ctx.request, ctx.metadata)
        path = editor_path(ctx.metadata.mime_type) if ctx.metadata.is_native_app else None
        url = export_url(ctx.settings, ctx.request.file_id, fmt, path)

        candidate = ctx.fetch(self.name, url)
        if candidate is None:
            return None

        content_type = content_type_for_format(fmt)
        filename = resolve_filename(ctx.base_name(candidate), content_type, fmt)
        return StrategyMatch(candidate, content_type, filename)


class DirectDownloadStrategy(Strategy):
    """
    Ordinary files via the standard download endpoint.

    An interstitial answer gets one retry against the docs host before the
    strategy gives up.
    """

    name = "direct-download"

    def content_type(self, candidate: CandidateResponse, metadata: FileMetadata) -> str:
        declared = candidate.content_type
        if bare_mime(declared) in _GENERIC_TYPES and metadata.mime_type and not metadata.is_native_app:
            return metadata.mime_type
        return declared or GENERIC_CONTENT_TYPE

    def match(self, ctx: AttemptContext, candidate: CandidateResponse) -> StrategyMatch:
        content_type = self.content_type(candidate, ctx.metadata)
        filename = resolve_filename(ctx.base_name(candidate), content_type)
        return StrategyMatch(candidate, content_type, filename)

    def attempt(self, ctx: AttemptContext) -> StrategyMatch | None:
        settings, file_id = ctx.settings, ctx.request.file_id
        # Confirmation only follows this path's own interstitial
        ctx.last_page = None

        candidate = ctx.fetch(self.name, direct_download_url(settings, file_id))
        if candidate is None and ctx.last_verdict is not None and ctx.last_verdict.interstitial:
            candidate = ctx.fetch(self.name, alternate_download_url(settings, file_id))

        if candidate is None:
            return None
        return self.match(ctx, candidate)


class ConfirmationStrategy(DirectDownloadStrategy):
    """
    Large files behind the virus-scan warning.

    Submits the warning page's own download form when we captured one,
    otherwise appends a bare confirm token.
    """

    name = "confirm-download"

    def applies(self, request: RetrievalRequest, metadata: FileMetadata) -> bool:
        return not metadata.is_native_app

    def confirm_url(self, ctx: AttemptContext) -> str:
        settings, file_id = ctx.settings, ctx.request.file_id
        page = ctx.last_page
        if page:
            form = extract_download_form(page)
            if form and _is_trusted(form[0]):
                action, params = form
                params.setdefault("id", file_id)
                params.setdefault("export", "download")
                params.setdefault("confirm", "t")
                return form_url(action, params)
            token = extract_confirm_token(page)
            if token:
                return confirm_download_url(settings, file_id, token)
        return confirm_download_url(settings, file_id)

    def attempt(self, ctx: AttemptContext) -> StrategyMatch | None:
        candidate = ctx.fetch(self.name, self.confirm_url(ctx))
        if candidate is None:
            return None
        return self.match(ctx, candidate)


def _is_trusted(action: str) -> bool:
    host = (urlparse(action).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in _TRUSTED_FORM_HOSTS)
