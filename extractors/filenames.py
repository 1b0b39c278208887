"""
Filename Extractor - Pure functions mapping MIME types to filenames.

Receives a base name, a resolved content type and an optional requested
format; returns the filename to deliver under. Tables are read-only and
fixed at import time. No I/O, no logging.
"""

import re
from types import MappingProxyType
from typing import Mapping
from urllib.parse import unquote

FALLBACK_EXTENSION = "bin"
GENERIC_CONTENT_TYPE = "application/octet-stream"

# MIME type → standard extension. Native types map to their interchange format.
MIME_EXTENSIONS: Mapping[str, str] = MappingProxyType({
    # Documents
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/msword": "doc",
    "application/vnd.oasis.opendocument.text": "odt",
    "application/rtf": "rtf",
    "application/epub+zip": "epub",
    "text/plain": "txt",
    "text/html": "html",
    "text/css": "css",
    "text/javascript": "js",
    "text/markdown": "md",
    "application/json": "json",

    # Spreadsheets
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.oasis.opendocument.spreadsheet": "ods",
    "text/csv": "csv",
    "text/tab-separated-values": "tsv",

    # Presentations
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.oasis.opendocument.presentation": "odp",

    # Images
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "image/tiff": "tiff",

    # Audio
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
    "audio/flac": "flac",
    "audio/aac": "aac",

    # Video
    "video/mp4": "mp4",
    "video/mpeg": "mpeg",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "video/x-msvideo": "avi",

    # Archives
    "application/zip": "zip",
    "application/x-zip-compressed": "zip",
    "application/x-rar-compressed": "rar",
    "application/x-tar": "tar",
    "application/x-7z-compressed": "7z",
    "application/gzip": "gz",

    # Native apps (editor-only) → interchange format
    "application/vnd.google-apps.document": "docx",
    "application/vnd.google-apps.spreadsheet": "xlsx",
    "application/vnd.google-apps.presentation": "pptx",
    "application/vnd.google-apps.drawing": "png",
    "application/vnd.google-apps.form": "html",
    "application/vnd.google-apps.script": "json",
})

# Export format token → MIME type delivered for it
FORMAT_CONTENT_TYPES: Mapping[str, str] = MappingProxyType({
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "odt": "application/vnd.oasis.opendocument.text",
    "ods": "application/vnd.oasis.opendocument.spreadsheet",
    "odp": "application/vnd.oasis.opendocument.presentation",
    "rtf": "application/rtf",
    "epub": "application/epub+zip",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "txt": "text/plain",
    "html": "text/html",
    "zip": "application/zip",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "svg": "image/svg+xml",
    "json": "application/json",
})

# Native MIME type → (editor path, default export format, export options)
NATIVE_TYPES: Mapping[str, tuple[str | None, str, tuple[str, ...]]] = MappingProxyType({
    "application/vnd.google-apps.document": ("document", "pdf", ("pdf", "docx", "txt", "rtf")),
    "application/vnd.google-apps.spreadsheet": ("spreadsheets", "xlsx", ("xlsx", "csv", "pdf")),
    "application/vnd.google-apps.presentation": ("presentation", "pptx", ("pptx", "pdf")),
    "application/vnd.google-apps.drawing": ("drawings", "pdf", ("pdf",)),
})

_DEFAULT_NATIVE: tuple[str | None, str, tuple[str, ...]] = (None, "pdf", ("pdf",))

_EXTENSION_RE = re.compile(r'\.([^/.\s]+)$')


def bare_mime(content_type: str | None) -> str:
    """Strip parameters: 'text/csv; charset=utf-8' → 'text/csv'."""
    if not content_type:
        return ""
    return content_type.split(";")[0].strip().lower()


def extension_for(content_type: str | None) -> str | None:
    """Expected extension for a content type, or None if unknown."""
    return MIME_EXTENSIONS.get(bare_mime(content_type))


def content_type_for_format(fmt: str) -> str:
    """MIME type to deliver an export format under."""
    return FORMAT_CONTENT_TYPES.get(fmt.lower(), GENERIC_CONTENT_TYPE)


def editor_path(mime_type: str | None) -> str | None:
    """Editor URL segment for a native type ('document', 'spreadsheets', ...)."""
    return NATIVE_TYPES.get(bare_mime(mime_type), _DEFAULT_NATIVE)[0]


def default_export_format(mime_type: str | None) -> str:
    """Format a native document exports to when the caller didn't ask for one."""
    return NATIVE_TYPES.get(bare_mime(mime_type), _DEFAULT_NATIVE)[1]


def export_options(mime_type: str | None) -> tuple[str, ...]:
    """Offered export formats for a native type, most useful first."""
    return NATIVE_TYPES.get(bare_mime(mime_type), _DEFAULT_NATIVE)[2]


def strip_extension(name: str) -> str:
    return _EXTENSION_RE.sub("", name)


def resolve_filename(
    base_name: str,
    content_type: str | None,
    requested_format: str | None = None,
) -> str:
    """
    Work out the filename to deliver under.

    Priority:
    1. An explicitly requested format always wins: replace the extension.
    2. An existing extension is corrected when the content type maps to a
       different one, and kept when it matches or the type is unknown.
    3. No extension: append the one for the content type, or 'bin'.

    Examples:
        resolve_filename("Report.pdf", "application/pdf", "xlsx") -> "Report.xlsx"
        resolve_filename("data", "text/csv") -> "data.csv"
        resolve_filename("photo.jpeg", "image/jpeg") -> "photo.jpg"
    """
    if requested_format:
        fmt = requested_format.lstrip(".")
        return f"{strip_extension(base_name)}.{fmt}"

    expected = extension_for(content_type)

    match = _EXTENSION_RE.search(base_name)
    if match:
        existing = match.group(1).lower()
        if expected and existing != expected:
            return f"{strip_extension(base_name)}.{expected}"
        return base_name

    return f"{base_name}.{expected or FALLBACK_EXTENSION}"


_DISPOSITION_EXTENDED_RE = re.compile(r"filename\*\s*=\s*(?:UTF-8|utf-8)''([^;]+)")
_DISPOSITION_QUOTED_RE = re.compile(r'filename\s*=\s*"((?:[^"\\]|\\.)*)"')
_DISPOSITION_BARE_RE = re.compile(r'filename\s*=\s*([^;"\s]+)')


def filename_from_disposition(header: str | None) -> str | None:
    """
    Read the filename an upstream Content-Disposition header offers.

    Prefers the RFC 5987 filename* form, which carries non-ASCII names.
    """
    if not header:
        return None

    match = _DISPOSITION_EXTENDED_RE.search(header)
    if match:
        name = unquote(match.group(1).strip())
        return name or None

    match = _DISPOSITION_QUOTED_RE.search(header)
    if match:
        name = re.sub(r'\\(.)', r'\1', match.group(1))
        return name or None

    match = _DISPOSITION_BARE_RE.search(header)
    if match:
        return match.group(1)
    return None
