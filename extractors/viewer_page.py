"""
Viewer Page Extractor - Pure functions for scraping the Drive viewer page.

Used when the metadata API refuses us: the viewer page title carries the
file name, and the embedded viewer gives away PDFs.
"""

import html
import re

_TITLE_RE = re.compile(r'<title[^>]*>(.*?)</title>', re.IGNORECASE | re.DOTALL)

# Suffixes the viewer appends to the document name
_TITLE_SUFFIXES = (" - Google Drive", " - Google Docs", " - Google Sheets", " - Google Slides")

# Titles that are the page chrome rather than a file name
_GENERIC_TITLES = {"google drive", "google docs", "sign in", "sign in - google accounts", "error 404 (not found)!!1"}

PDF_VIEWER_MARKERS = (
    "pdf.js",
    "PDF viewer",
    '"application/pdf"',
)


def extract_title(page: str) -> str | None:
    """
    Pull the file name out of the viewer page <title>.

    Returns:
        The name, or None when the page has no usable title
    """
    match = _TITLE_RE.search(page)
    if not match:
        return None

    title = html.unescape(match.group(1)).strip()
    for suffix in _TITLE_SUFFIXES:
        if title.endswith(suffix):
            title = title[: -len(suffix)].strip()
            break

    if not title or title.lower() in _GENERIC_TITLES:
        return None
    return title


def looks_like_pdf_viewer(page: str) -> bool:
    """True when the page embeds the PDF viewer."""
    return any(marker in page for marker in PDF_VIEWER_MARKERS)
