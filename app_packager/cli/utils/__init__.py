"""CLI utility functions"""

from .output import (
    console,
    format_export_result,
    format_failure,
    format_import_result,
)

__all__ = [
    'console',
    'format_export_result',
    'format_failure',
    'format_import_result',
]
