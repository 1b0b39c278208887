"""
Extractors - Pure functions over names, MIME types and upstream HTML.

No HTTP calls, no logging. Just transform input → output.
Easily testable with literal strings.
"""

from .filenames import (
    resolve_filename,
    extension_for,
    content_type_for_format,
    default_export_format,
    export_options,
    editor_path,
    filename_from_disposition,
    MIME_EXTENSIONS,
    FORMAT_CONTENT_TYPES,
)
from .interstitial import (
    InterstitialKind,
    classify_interstitial,
    extract_download_form,
    extract_confirm_token,
)
from .viewer_page import extract_title, looks_like_pdf_viewer

__all__ = [
    "resolve_filename",
    "extension_for",
    "content_type_for_format",
    "default_export_format",
    "export_options",
    "editor_path",
    "filename_from_disposition",
    "MIME_EXTENSIONS",
    "FORMAT_CONTENT_TYPES",
    "InterstitialKind",
    "classify_interstitial",
    "extract_download_form",
    "extract_confirm_token",
    "extract_title",
    "looks_like_pdf_viewer",
]
