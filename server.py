#!/usr/bin/env python3
"""
drivegrab MCP Server

Pulls publicly shared Google Drive files to the filesystem without
credentials. Files go to disk; the tool returns the path.

Tools:
- info: What is this file? (name, type, size, export formats)
- download: Content to filesystem, or the viewer link when it can't be downloaded

Documentation is provided via MCP Resources, not a tool.

Architecture:
- extractors/: Pure functions (no MCP, no HTTP)
- adapters/: Thin HTTP wrappers around Drive endpoints
- tools/: Probe, strategy chain, delivery
- workspace/: Deposit folder management
- server.py: Thin MCP wrappers (this file)
"""

import os
import signal
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from logging_config import configure_logging
from tools import do_download, do_info

# Initialize MCP server
mcp = FastMCP("drivegrab")


# ============================================================================
# TOOLS (thin wrappers)
# ============================================================================

@mcp.tool()
def info(link: str) -> dict[str, Any]:
    """
    Describe a shared Drive file without downloading it.

    Args:
        link: Share link, Docs/Sheets/Slides URL, or bare file ID

    Returns:
        id, name, mimeType, size, canDownload, isGoogleApps, isViewOnly,
        isPublic, exportOptions. Degrades to name "file" when Drive refuses
        the metadata call.
    """
    return do_info(link).to_dict()


@mcp.tool()
def download(
    link: str,
    base_path: str = "",
    format: str | None = None,
    force_pdf: bool = False,
    view_only: bool = False,
) -> dict[str, Any]:
    """
    Download a shared Drive file to the filesystem.

    Args:
        link: Share link, Docs/Sheets/Slides URL, or bare file ID
        base_path: Directory for deposits (pass your cwd so files land next to your project)
        format: Export format for Docs/Sheets/Slides (pdf, docx, xlsx, csv, pptx, txt, ...)
        force_pdf: Ask for a PDF rendition of any file
        view_only: The file is view-only; go straight to the PDF routes

    Returns:
        path, filename, content_type, size_bytes, strategy, metadata on success;
        redirect + location when only the Drive viewer can show it;
        error + statusClassification + hint otherwise.
    """
    if not base_path:
        return {"error": "base_path is required - pass your working directory so deposits land in your project",
                "kind": "invalid_input", "statusClassification": 400}
    return do_download(
        link,
        base_path=Path(base_path),
        requested_format=format,
        force_pdf=force_pdf,
        view_only=view_only,
    ).to_dict()


# ============================================================================
# RESOURCES - Self-documenting MCP capabilities
# ============================================================================

@mcp.resource("drivegrab://docs/overview")
def docs_overview() -> str:
    """Overview of the drivegrab MCP server."""
    return """# drivegrab

Download publicly shared Google Drive files. No sign-in, no API credentials.

## Tools

| Tool | Purpose | Writes files? |
|------|---------|---------------|
| `info` | Name, type, size and export formats of a shared file | No |
| `download` | File content to `drivegrab-fetch/`, return path | Yes |

## What works

- Ordinary uploads (PDF, images, zip, ...): downloaded as-is
- Large files behind the virus-scan warning: confirmed automatically
- Docs/Sheets/Slides: exported (default pdf / xlsx / pptx; pick with `format`)
- View-only PDFs: fetched through the PDF export or preview route

## What doesn't

Files that aren't shared "Anyone with the link", or whose owner disabled
downloads for anything but a human in the viewer. `download` then returns
`redirect: true` with the viewer `location`.

## Deposit layout

    drivegrab-fetch/{title-slug}--{id-prefix}/
        {filename}
        manifest.json
"""


# ============================================================================
# SERVER ENTRY POINT
# ============================================================================

def _shutdown_handler(signum: int, frame: object) -> None:
    """Handle termination signals by exiting immediately.

    os._exit() is required because sys.exit() raises SystemExit,
    which asyncio's event loop catches and ignores.
    """
    os._exit(0)


def main() -> None:
    signal.signal(signal.SIGTERM, _shutdown_handler)
    signal.signal(signal.SIGINT, _shutdown_handler)
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
