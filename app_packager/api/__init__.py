# app_packager/api/__init__.py
"""API layer for app-packager"""

from .exceptions import (
    AppPackagerError,
    ArchiveImportError,
    AuthRequiredError,
    ConfigError,
    ExportError,
    ExternalToolError,
    ImageError,
    ImageIOError,
    ImageNotFoundError,
    LocalImageNotFoundError,
    MalformedReferenceError,
    ManifestError,
    OperationCancelledError,
    OperationTimeoutError,
    PartialWriteError,
    RegistryError,
    RemoteOperationError,
    RepositoryNotFoundError,
    SignalWaitExhaustedError,
    UnsupportedFormatError,
)
from .exporter import Exporter, export
from .importer import Importer, import_archive

__all__ = [
    # Main classes
    "Exporter",
    "Importer",

    # Convenience functions
    "export",
    "import_archive",

    # Exceptions
    "AppPackagerError",
    "ArchiveImportError",
    "AuthRequiredError",
    "ConfigError",
    "ExportError",
    "ExternalToolError",
    "ImageError",
    "ImageIOError",
    "ImageNotFoundError",
    "LocalImageNotFoundError",
    "MalformedReferenceError",
    "ManifestError",
    "OperationCancelledError",
    "OperationTimeoutError",
    "PartialWriteError",
    "RegistryError",
    "RemoteOperationError",
    "RepositoryNotFoundError",
    "SignalWaitExhaustedError",
    "UnsupportedFormatError",
]
