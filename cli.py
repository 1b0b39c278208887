#!/usr/bin/env python3
"""
CLI interface for drivegrab.

Usage:
    drivegrab info <link>
    drivegrab download <link> [--format F] [--force-pdf] [--view-only] [--out DIR]

Same functionality as the MCP tools, via command line. Results are printed
as JSON; the exit status is non-zero when nothing was downloaded.
"""

import argparse
import json
import sys
from pathlib import Path

from logging_config import configure_logging
from models import DownloadResult, ErrorResult, FileMetadata
from tools import do_download, do_info


def cmd_info(args: argparse.Namespace) -> int:
    """Print file metadata."""
    result = do_info(args.link)
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if isinstance(result, FileMetadata) else 1


def cmd_download(args: argparse.Namespace) -> int:
    """Download into drivegrab-fetch/ under --out."""
    result = do_download(
        args.link,
        base_path=args.out,
        requested_format=args.format,
        force_pdf=args.force_pdf,
        view_only=args.view_only,
    )
    print(json.dumps(result.to_dict(), indent=2))
    if isinstance(result, DownloadResult):
        return 0
    return 1 if isinstance(result, ErrorResult) else 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drivegrab",
        description="Download publicly shared Google Drive files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    drivegrab info "https://drive.google.com/file/d/1abc.../view"
    drivegrab download 1abc123def456
    drivegrab download "https://docs.google.com/spreadsheets/d/1abc.../edit" --format csv
    drivegrab download "https://drive.google.com/file/d/1abc.../view" --view-only --out ~/Downloads
""",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # info
    info_p = subparsers.add_parser("info", help="Show file metadata")
    info_p.add_argument("link", help="Share link, editor URL, or file ID")
    info_p.set_defaults(func=cmd_info)

    # download
    download_p = subparsers.add_parser("download", help="Download to drivegrab-fetch/")
    download_p.add_argument("link", help="Share link, editor URL, or file ID")
    download_p.add_argument(
        "--format",
        help="Export format for Docs/Sheets/Slides (e.g. pdf, docx, xlsx, csv)",
    )
    download_p.add_argument(
        "--force-pdf",
        action="store_true",
        help="Ask for a PDF rendition",
    )
    download_p.add_argument(
        "--view-only",
        action="store_true",
        help="Treat the file as view-only",
    )
    download_p.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Base directory for deposits (default: current directory)",
    )
    download_p.set_defaults(func=cmd_download)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
