"""
Workspace - Per-download folder management.

Handles file deposit to drivegrab-fetch/{title}--{id}/ folders.
"""

from .manager import (
    slugify,
    safe_filename,
    get_deposit_folder,
    write_stream,
    write_manifest,
)

__all__ = [
    "slugify",
    "safe_filename",
    "get_deposit_folder",
    "write_stream",
    "write_manifest",
]
