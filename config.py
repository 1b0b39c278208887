"""
Configuration - Single Source of Truth

Upstream base URLs, timeouts and size thresholds live here. Do not duplicate
elsewhere. Every value can be overridden with a DRIVEGRAB_* environment
variable; settings are read once and never mutated afterwards.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from functools import lru_cache

from models import ErrorKind, GrabError

# Desktop browser UA. The download endpoints serve different (worse) pages
# to unknown clients.
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/96.0.4664.110 Safari/537.36"
)

ENV_PREFIX = "DRIVEGRAB_"

EXHAUSTED_MODES = ("redirect", "error")


@dataclass(frozen=True)
class Settings:
    """Read-only runtime configuration."""

    # Upstream endpoints
    api_base: str = "https://www.googleapis.com/drive/v3"
    drive_base: str = "https://drive.google.com"
    docs_base: str = "https://docs.google.com"

    # Optional public API key for the metadata endpoint (not a user credential)
    api_key: str | None = None

    user_agent: str = BROWSER_USER_AGENT

    # Per-attempt transport limits (seconds / hops)
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    max_redirects: int = 5

    # HTML responses smaller than this are treated as interstitial pages.
    # Also the most we ever buffer for inspection before streaming.
    size_ceiling: int = 1_000_000

    # View-only sub-attempts must return at least this much
    min_payload_bytes: int = 1000

    chunk_size: int = 64 * 1024

    # What to do when every strategy fails: "redirect" to the viewer, or "error"
    on_exhausted: str = "redirect"

    def __post_init__(self) -> None:
        if self.on_exhausted not in EXHAUSTED_MODES:
            raise GrabError(
                ErrorKind.INVALID_INPUT,
                f"on_exhausted must be one of {EXHAUSTED_MODES}, got {self.on_exhausted!r}",
            )
        for name in ("connect_timeout", "read_timeout", "size_ceiling", "chunk_size"):
            if getattr(self, name) <= 0:
                raise GrabError(ErrorKind.INVALID_INPUT, f"{name} must be positive")
        if self.max_redirects < 0 or self.min_payload_bytes < 0:
            raise GrabError(ErrorKind.INVALID_INPUT, "max_redirects and min_payload_bytes must not be negative")


def _coerce(name: str, raw: str, default: object) -> object:
    """Convert an environment string to the type of the field default."""
    try:
        if isinstance(default, float):
            return float(raw)
        if isinstance(default, int):
            return int(raw)
    except ValueError:
        raise GrabError(
            ErrorKind.INVALID_INPUT,
            f"{ENV_PREFIX}{name.upper()} must be a number, got {raw!r}",
        )
    return raw


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from defaults plus DRIVEGRAB_* overrides.

    Args:
        env: Environment mapping (defaults to os.environ)

    Raises:
        GrabError: INVALID_INPUT on malformed values
    """
    env = os.environ if env is None else env
    base = Settings()
    overrides: dict[str, object] = {}
    for f in fields(Settings):
        raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None or raw == "":
            continue
        overrides[f.name] = _coerce(f.name, raw.strip(), getattr(base, f.name))
    return replace(base, **overrides) if overrides else base


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return load_settings()
