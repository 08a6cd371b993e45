"""Exporter factory"""

from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from ..api.exceptions import UnsupportedFormatError
from ..core.signal_wait import BoundedWait
from ..models.application import ApplicationConfig
from ..models.config import PackagerConfig
from ..models.export import ExportFormat, ExportMode
from ..services.image_service import ImageService
from .base import AppExporter
from .docker_compose import DockerComposeExporter
from .helm_chart import HelmChartExporter
from .k8s_yaml import K8sYamlExporter
from .ram import RamExporter


class ExporterFactory:
    """Factory for creating exporter instances"""

    # Registry of exporters
    _backends: Dict[ExportFormat, Type[AppExporter]] = {
        ExportFormat.RAM: RamExporter,
        ExportFormat.DOCKER_COMPOSE: DockerComposeExporter,
        ExportFormat.K8S_YAML: K8sYamlExporter,
        ExportFormat.HELM_CHART: HelmChartExporter,
    }

    @classmethod
    def create(cls,
               export_format: Union[str, ExportFormat],
               app: ApplicationConfig,
               image_service: ImageService,
               home_path: Union[str, Path],
               mode: Union[str, ExportMode] = ExportMode.OFFLINE,
               signal_wait: Optional[BoundedWait] = None,
               **kwargs) -> AppExporter:
        """Create an exporter for a format

        Args:
            export_format: Format tag or enum
            app: Application to export
            image_service: Image service
            home_path: Export home directory
            mode: Export mode
            signal_wait: Wait used for the manifest-dependency file
            **kwargs: Extra exporter arguments

        Returns:
            Exporter instance

        Raises:
            UnsupportedFormatError: If the format is unknown
        """
        format_enum = ExportFormat.parse(export_format)
        if format_enum not in cls._backends:
            raise UnsupportedFormatError(format_enum.value)

        exporter_class = cls._backends[format_enum]
        return exporter_class(
            app,
            image_service,
            home_path,
            mode=ExportMode(mode),
            signal_wait=signal_wait,
            **kwargs
        )

    @classmethod
    def create_from_config(cls,
                           export_format: Union[str, ExportFormat],
                           app: ApplicationConfig,
                           image_service: ImageService,
                           config: PackagerConfig,
                           mode: Optional[Union[str, ExportMode]] = None) -> AppExporter:
        """Create an exporter using packager settings

        Args:
            export_format: Format tag or enum
            app: Application to export
            image_service: Image service
            config: Packager configuration
            mode: Export mode, the configured mode if None

        Returns:
            Exporter instance
        """
        signal_wait = BoundedWait(
            poll_interval=config.signal.poll_interval,
            max_attempts=config.signal.max_attempts
        )
        return cls.create(
            export_format,
            app,
            image_service,
            config.home_path,
            mode=mode or config.mode,
            signal_wait=signal_wait,
            tar_command=config.tar_command
        )

    @classmethod
    def register_backend(cls, export_format: ExportFormat, exporter_class: Type[AppExporter]):
        """Register a new exporter

        Args:
            export_format: Format enum
            exporter_class: Exporter class
        """
        cls._backends[export_format] = exporter_class

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        """Get list of supported format tags"""
        return [f.value for f in cls._backends.keys()]

    @classmethod
    def is_supported(cls, export_format: str) -> bool:
        """Check if a format tag is supported"""
        try:
            return ExportFormat.parse(export_format) in cls._backends
        except UnsupportedFormatError:
            return False
