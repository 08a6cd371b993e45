"""Export job and result models"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any, Tuple

from ..api.exceptions import UnsupportedFormatError
from ..constants import EXPORT_DIR_PATTERN, PACKAGE_FILE_PATTERN
from .application import ApplicationConfig


class ExportFormat(Enum):
    """Supported export formats"""
    RAM = "ram"
    DOCKER_COMPOSE = "docker-compose"
    K8S_YAML = "yaml"
    HELM_CHART = "helm-chart"

    @property
    def suffix(self) -> str:
        """Suffix used in export directory and package names"""
        return _FORMAT_SUFFIXES[self]

    @property
    def awaits_manifest_signal(self) -> bool:
        """Whether the format waits for the manifest-dependency file"""
        return self in (ExportFormat.K8S_YAML, ExportFormat.HELM_CHART)

    @classmethod
    def parse(cls, value) -> 'ExportFormat':
        """Create ExportFormat from a tag, raising on unknown tags"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnsupportedFormatError(str(value))


_FORMAT_SUFFIXES = {
    ExportFormat.RAM: "ram",
    ExportFormat.DOCKER_COMPOSE: "dockercompose",
    ExportFormat.K8S_YAML: "yaml",
    ExportFormat.HELM_CHART: "helm",
}


class ExportMode(Enum):
    """Export modes"""
    OFFLINE = "offline"
    ONLINE = "online"


class ExportState(Enum):
    """Export job states"""
    PENDING = "pending"
    PREPARING = "preparing"
    MATERIALIZING_IMAGES = "materializing_images"
    AWAITING_MANIFEST_SIGNAL = "awaiting_manifest_signal"
    EMITTING_MANIFESTS = "emitting_manifests"
    PACKAGING = "packaging"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExportJob:
    """State of a single export invocation"""

    app: ApplicationConfig
    format: ExportFormat
    home_path: Path
    mode: ExportMode = ExportMode.OFFLINE
    state: ExportState = ExportState.PENDING
    images: List[str] = field(default_factory=list)
    dependent_images: List[str] = field(default_factory=list)
    signal_received: bool = False

    def __post_init__(self):
        """Post-initialization processing"""
        if isinstance(self.home_path, str):
            self.home_path = Path(self.home_path)
        self.home_path = self.home_path.resolve()

    @property
    def export_path(self) -> Path:
        """Directory the export is assembled in"""
        return self.home_path / EXPORT_DIR_PATTERN.format(
            app=self.app.app_name,
            version=self.app.app_version,
            suffix=self.format.suffix
        )

    @property
    def package_name(self) -> str:
        """File name of the final artifact"""
        return PACKAGE_FILE_PATTERN.format(
            app=self.app.app_name,
            version=self.app.app_version,
            suffix=self.format.suffix
        )

    @property
    def package_path(self) -> Path:
        """Path of the final artifact"""
        return self.home_path / self.package_name

    def add_images(self, images: List[str]) -> None:
        """Record referenced images, keeping first-seen order"""
        for image in images:
            if image and image not in self.images:
                self.images.append(image)


@dataclass(frozen=True)
class ExportResult:
    """Result of an export"""

    package_path: str
    package_name: str
    package_format: str
    images: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "package_path": self.package_path,
            "package_name": self.package_name,
            "package_format": self.package_format,
            "images": list(self.images),
        }


@dataclass(frozen=True)
class ImportResult:
    """Result of an import"""

    app: ApplicationConfig
    images: Tuple[str, ...] = ()
    extract_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "app_name": self.app.app_name,
            "app_version": self.app.app_version,
            "images": list(self.images),
            "extract_path": self.extract_path,
        }
