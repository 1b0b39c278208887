"""
Input validation and ID extraction utilities.

Handles:
- Google Drive / Docs link → file ID extraction
- Bare ID validation

Patterns are tried in a fixed priority order: path-based shapes before
query-based ones, so `file/d/{id}` wins over a stray `id=` parameter.
"""

import re
from urllib.parse import urlparse

from models import ErrorKind, GrabError

# =============================================================================
# PATTERNS
# =============================================================================

# Ordered (name, pattern) pairs. First capturing match wins.
DRIVE_LINK_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    # https://drive.google.com/file/d/{id}/view
    ("file_view", re.compile(r'/file/d/([a-zA-Z0-9_-]+)')),
    # https://docs.google.com/{document|spreadsheets|presentation}/d/{id}/edit
    ("editor", re.compile(r'/(?:document|spreadsheets|presentation|drawings|forms)(?:/u/\d+)?/d/([a-zA-Z0-9_-]+)')),
    # https://drive.google.com/open?id={id}
    ("open", re.compile(r'/open\?(?:[^#]*&)?id=([a-zA-Z0-9_-]+)')),
    # https://drive.google.com/uc?id={id}&export=download
    ("uc_download", re.compile(r'/uc\?(?:[^#]*&)?id=([a-zA-Z0-9_-]+)')),
    # Anything else carrying ?id= / &id=
    ("id_query", re.compile(r'[?&]id=([a-zA-Z0-9_-]+)')),
)

# Bare IDs: Drive IDs are long URL-safe tokens (legacy ones start with 0B)
BARE_FILE_ID_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{10,}$')


# =============================================================================
# DRIVE ID EXTRACTION
# =============================================================================

DRIVE_HOSTS = frozenset({"drive.google.com", "docs.google.com"})


def is_drive_link(link: str) -> bool:
    """Check whether a URL's host is Drive or Docs."""
    try:
        host = urlparse(link.strip()).hostname
    except ValueError:
        return False
    return host in DRIVE_HOSTS


def find_file_id(link: str | None) -> str | None:
    """
    Find the Google Drive file ID in a link string.

    Accepts:
    - https://drive.google.com/file/d/{id}/view
    - https://drive.google.com/open?id={id}
    - https://docs.google.com/{document|spreadsheets|presentation}/d/{id}/edit
    - https://drive.google.com/uc?id={id}&export=download
    - Bare ID

    Returns:
        The ID, or None when nothing matches
    """
    if not link:
        return None

    link = link.strip()

    # Foreign URLs never carry a Drive ID, even with an id= parameter
    if link.startswith(("http://", "https://")) and not is_drive_link(link):
        return None

    for _name, pattern in DRIVE_LINK_PATTERNS:
        match = pattern.search(link)
        if match:
            return match.group(1)

    if BARE_FILE_ID_PATTERN.match(link):
        return link

    return None


def extract_file_id(link: str | None) -> str:
    """
    Extract the file ID or fail with an input error.

    Raises:
        GrabError: INVALID_INPUT if no known link shape matches
    """
    if not link or not link.strip():
        raise GrabError(ErrorKind.INVALID_INPUT, "File ID or link is required")

    file_id = find_file_id(link)
    if file_id is None:
        raise GrabError(
            ErrorKind.INVALID_INPUT,
            f"Could not extract a Google Drive file ID from: {link.strip()}\n"
            "Expected format: https://drive.google.com/file/d/{id}/view, "
            "https://docs.google.com/document/d/{id}/edit or "
            "https://drive.google.com/open?id={id}",
        )
    return file_id
