"""App Packager - export applications to deployable artifacts.

Packages an application description (components, plugins, container images
and Kubernetes resources) into an offline archive, a Docker Compose bundle,
raw Kubernetes YAML or a Helm chart, and imports offline archives back into
an image hub.
"""

from .__version__ import __version__, __version_info__, __author__, __email__, __license__

# Core API
from .api.exporter import Exporter, export
from .api.importer import Importer, import_archive

# Data models
from .models.application import ApplicationConfig, Component, ImageInfo, KubernetesResource, Plugin
from .models.export import ExportFormat, ExportMode, ExportResult, ImportResult
from .models.config import PackagerConfig

# Exceptions
from .api.exceptions import (
    AppPackagerError,
    ArchiveImportError,
    ConfigError,
    ExportError,
    ImageError,
    UnsupportedFormatError,
)

__all__ = [
    # Version information
    "__version__",
    "__version_info__",
    "__author__",
    "__email__",
    "__license__",

    # Main classes
    "Exporter",
    "Importer",

    # Core API functions
    "export",
    "import_archive",

    # Data models
    "ApplicationConfig",
    "Component",
    "ImageInfo",
    "KubernetesResource",
    "Plugin",
    "ExportFormat",
    "ExportMode",
    "ExportResult",
    "ImportResult",
    "PackagerConfig",

    # Exceptions
    "AppPackagerError",
    "ArchiveImportError",
    "ConfigError",
    "ExportError",
    "ImageError",
    "UnsupportedFormatError",
]
