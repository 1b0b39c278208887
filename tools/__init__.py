"""
Tools - link-to-file operations.

Each tool has its own module with the implementation logic.
server.py and cli.py provide thin wrappers that call into these.

- info: metadata for a shared file
- download: file content to the filesystem (or a streaming Delivery)
"""

from .download import do_info, do_download, open_download
from .deliver import Delivery, content_disposition, deliver, deliver_error
from .probe import probe_metadata

__all__ = [
    "do_info", "do_download", "open_download",
    "Delivery", "content_disposition", "deliver", "deliver_error",
    "probe_metadata",
]
