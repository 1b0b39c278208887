"""
Workspace Manager - Handles file deposit for downloads.

Deposits retrieved files into drivegrab-fetch/{title}--{id}/ folders
in the current working directory. Each download gets its own folder.

Writes go through a .part file and are renamed into place only once the
stream has been consumed completely, so an interrupted download never
leaves a truncated file behind.
"""

import json
import re
import unicodedata
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

DEPOSIT_ROOT = "drivegrab-fetch"
PARTIAL_SUFFIX = ".part"


def slugify(text: str, max_length: int = 50) -> str:
    """
    Convert text to a filesystem-safe slug.

    Examples:
        "Quarterly Report.pdf" -> "quarterly-report-pdf"
        "Über Cool Presentation!!!" -> "uber-cool-presentation"
    """
    text = unicodedata.normalize("NFKD", text)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")

    if len(text) > max_length:
        # Try to break at a hyphen
        text = text[:max_length].rsplit("-", 1)[0]

    return text or "untitled"


def safe_filename(name: str) -> str:
    """
    Make a delivered filename safe to create inside the deposit folder.

    Path separators and control characters become underscores; the name can
    never climb out of the folder ("..", leading dots).
    """
    name = re.sub(r'[\x00-\x1f\x7f/\\]', "_", name).strip()
    name = name.lstrip(".")
    return name or "file"


def get_deposit_folder(
    title: str,
    file_id: str,
    base_path: Path | None = None,
) -> Path:
    """
    Get the folder path for depositing a downloaded file.

    Creates the folder structure:
        drivegrab-fetch/{title-slug}--{id}/

    Args:
        title: Human-readable file name (will be slugified)
        file_id: Drive file ID
        base_path: Base directory (defaults to cwd)

    Returns:
        Path to the deposit folder (created if not exists)
    """
    base = base_path or Path.cwd()

    # Truncate ID to first 12 chars for readability
    short_id = file_id[:12] if len(file_id) > 12 else file_id
    folder_path = base / DEPOSIT_ROOT / f"{slugify(title)}--{short_id}"
    folder_path.mkdir(parents=True, exist_ok=True)

    return folder_path


def write_stream(
    folder: Path,
    filename: str,
    chunks: Iterable[bytes],
) -> tuple[Path, int]:
    """
    Stream chunks to folder/filename.

    Args:
        folder: Deposit folder from get_deposit_folder()
        filename: Output filename (sanitised here)
        chunks: Payload chunks, e.g. Delivery.body

    Returns:
        (path, bytes written)

    Raises:
        Whatever the chunk iterator raises; the partial file is removed first.
    """
    file_path = folder / safe_filename(filename)
    partial = file_path.with_name(file_path.name + PARTIAL_SUFFIX)

    written = 0
    try:
        with partial.open("wb") as fh:
            for chunk in chunks:
                fh.write(chunk)
                written += len(chunk)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise

    partial.replace(file_path)
    return file_path, written


def write_manifest(
    folder: Path,
    file_id: str,
    filename: str,
    extra: dict[str, Any] | None = None,
) -> Path:
    """
    Write a manifest.json to make the deposit folder self-describing.

    Args:
        folder: Deposit folder from get_deposit_folder()
        file_id: Drive file ID
        filename: Delivered filename
        extra: Additional fields (content type, strategy, metadata)

    Returns:
        Path to the manifest file
    """
    manifest = {
        "id": file_id,
        "filename": filename,
        "fetched_at": datetime.now(timezone.utc).isoformat(),
    }
    if extra:
        manifest.update(extra)

    file_path = folder / "manifest.json"
    file_path.write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return file_path
