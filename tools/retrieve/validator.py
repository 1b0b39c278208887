"""
Response validator - genuine content, or an error/consent page?

The only signal Drive gives us is the declared content type plus the size.
Small HTML is treated as an interstitial; large payloads are accepted even
when mislabeled, because real downloads sometimes arrive as text/html.

Known misclassifications: a legitimately small HTML export (a form exported
as html) is rejected, and an unusually large error page would be accepted.
"""

from dataclasses import dataclass

from adapters.http import CandidateResponse

HTML_MARKERS = ("text/html", "application/xhtml+xml")


@dataclass(frozen=True)
class Verdict:
    accepted: bool
    reason: str | None = None
    interstitial: bool = False


ACCEPTED = Verdict(accepted=True)


def is_interstitial(candidate: CandidateResponse, size_ceiling: int) -> bool:
    """HTML under the size ceiling: almost certainly not the file."""
    content_type = candidate.content_type.lower()
    return any(marker in content_type for marker in HTML_MARKERS) and candidate.byte_length < size_ceiling


def validate_candidate(
    candidate: CandidateResponse,
    size_ceiling: int,
    *,
    min_bytes: int = 0,
) -> Verdict:
    """
    Decide whether a candidate response is deliverable.

    Args:
        candidate: Response from adapters.http.get_candidate()
        size_ceiling: HTML smaller than this is rejected as interstitial
        min_bytes: Reject payloads smaller than this (error stubs)
    """
    if not 200 <= candidate.status_code < 300:
        return Verdict(False, f"status {candidate.status_code}")

    if is_interstitial(candidate, size_ceiling):
        return Verdict(False, "HTML page below size ceiling", interstitial=True)

    if candidate.byte_length < min_bytes:
        return Verdict(False, f"payload below {min_bytes} bytes")

    return ACCEPTED
