"""CLI commands"""

from . import export
from . import import_cmd

__all__ = [
    "export",
    "import_cmd",
]
