"""
Shared utility helpers for filesystem writes and HTTP error reporting.
"""

from .filesystem import copy_file, ensure_directory, is_relative_to, safe_unlink, write_text_file
from .http import format_request_exception

__all__ = [
    "copy_file",
    "ensure_directory",
    "is_relative_to",
    "safe_unlink",
    "write_text_file",
    "format_request_exception",
]
