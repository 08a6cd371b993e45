# app_packager/utils/__init__.py
"""Utility functions for app-packager"""

from .async_utils import run_async, run_cancellable, sync_to_async
from .file_utils import (
    extract_archive,
    find_file,
    format_size,
    get_file_size,
    prepare_dir,
    read_lines,
    write_volume_file,
)
from .naming import compose_name, decode_escapes, get_memory_type

__all__ = [
    # Async utilities
    "run_async",
    "run_cancellable",
    "sync_to_async",

    # File utilities
    "extract_archive",
    "find_file",
    "format_size",
    "get_file_size",
    "prepare_dir",
    "read_lines",
    "write_volume_file",

    # Naming
    "compose_name",
    "decode_escapes",
    "get_memory_type",
]
