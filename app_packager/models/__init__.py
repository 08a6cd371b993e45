# app_packager/models/__init__.py
"""Data models for app-packager"""

from .application import (
    ApplicationConfig,
    Component,
    ComponentVolume,
    ImageInfo,
    KubernetesResource,
    Plugin,
)
from .export import (
    ExportFormat,
    ExportJob,
    ExportMode,
    ExportResult,
    ExportState,
    ImportResult,
)
from .config import (
    PackagerConfig,
    DockerConfig,
    TimeoutConfig,
    SignalConfig,
    RegistryConfig,
)

__all__ = [
    # Application models
    "ApplicationConfig",
    "Component",
    "ComponentVolume",
    "ImageInfo",
    "KubernetesResource",
    "Plugin",

    # Export models
    "ExportFormat",
    "ExportJob",
    "ExportMode",
    "ExportResult",
    "ExportState",
    "ImportResult",

    # Config models
    "PackagerConfig",
    "DockerConfig",
    "TimeoutConfig",
    "SignalConfig",
    "RegistryConfig",
]
