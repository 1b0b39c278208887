"""
Interstitial Extractor - Pure functions for reading upstream error/consent pages.

Drive answers many failed downloads with a 200 and an HTML page. These
helpers say what kind of page it was, and pull the confirmation form out of
the large-file virus-scan warning.
"""

import html
import re
from enum import Enum


class InterstitialKind(Enum):
    VIRUS_SCAN = "virus_scan"          # Large file: needs confirmation
    QUOTA_EXCEEDED = "quota_exceeded"  # Too many downloads recently
    ACCESS_REQUIRED = "access_required"
    SIGN_IN = "sign_in"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


# Checked in order; first hit wins
_MARKERS: tuple[tuple[InterstitialKind, tuple[str, ...]], ...] = (
    (InterstitialKind.VIRUS_SCAN, (
        "can't scan this file for viruses",
        "can&#39;t scan this file for viruses",
        "virus scan warning",
        'id="download-form"',
        "uc-download-link",
    )),
    (InterstitialKind.QUOTA_EXCEEDED, (
        "too many users have viewed or downloaded",
        "download quota",
    )),
    (InterstitialKind.ACCESS_REQUIRED, (
        "you need access",
        "you need permission",
        "request access",
    )),
    (InterstitialKind.SIGN_IN, (
        "accounts.google.com/servicelogin",
        "accounts.google.com/v3/signin",
        "<title>sign in",
    )),
    (InterstitialKind.NOT_FOUND, (
        "the file you have requested does not exist",
        "error 404",
    )),
)

_FORM_RE = re.compile(
    r'<form[^>]*id="download-form"[^>]*>(.*?)</form>',
    re.IGNORECASE | re.DOTALL,
)
_ACTION_RE = re.compile(r'action="([^"]+)"', re.IGNORECASE)
_INPUT_RE = re.compile(r'<input[^>]*>', re.IGNORECASE)
_NAME_RE = re.compile(r'name="([^"]*)"', re.IGNORECASE)
_VALUE_RE = re.compile(r'value="([^"]*)"', re.IGNORECASE)
_CONFIRM_PATTERNS = (
    re.compile(r'confirm=([0-9A-Za-z_-]+)'),
    re.compile(r'name="confirm"\s+value="([0-9A-Za-z_-]+)"'),
)


def classify_interstitial(page: str) -> InterstitialKind:
    """Say what kind of error/consent page this is."""
    lowered = page.lower()
    for kind, markers in _MARKERS:
        if any(marker in lowered for marker in markers):
            return kind
    return InterstitialKind.UNKNOWN


def extract_download_form(page: str) -> tuple[str, dict[str, str]] | None:
    """
    Pull the confirmation form out of the virus-scan warning.

    Returns:
        (action URL, hidden input values), or None when the page has no
        download form
    """
    form_match = _FORM_RE.search(page)
    if not form_match:
        return None

    tag_end = page.find(">", form_match.start())
    action_match = _ACTION_RE.search(page, form_match.start(), tag_end + 1)
    if not action_match:
        return None

    params: dict[str, str] = {}
    for tag in _INPUT_RE.findall(form_match.group(1)):
        name = _NAME_RE.search(tag)
        if not name or not name.group(1):
            continue
        value = _VALUE_RE.search(tag)
        params[html.unescape(name.group(1))] = html.unescape(value.group(1)) if value else ""

    return html.unescape(action_match.group(1)), params


def extract_confirm_token(page: str) -> str | None:
    """Find a bare confirm token (older warning pages link instead of posting a form)."""
    for pattern in _CONFIRM_PATTERNS:
        match = pattern.search(page)
        if match:
            return match.group(1)
    return None
