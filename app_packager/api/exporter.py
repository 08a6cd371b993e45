"""Exporter API for packaging applications"""

import dataclasses
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exporters import AppExporter, ExporterFactory
from ..models import ApplicationConfig, ExportResult, PackagerConfig
from ..services import ConfigService, ImageService, load_application
from ..utils.async_utils import run_async

AppSource = Union[ApplicationConfig, Dict[str, Any], str, Path]


class Exporter:
    """Exporter class for packaging operations"""

    def __init__(self,
                 config: Optional[PackagerConfig] = None,
                 image_service: Optional[ImageService] = None):
        """
        Initialize exporter

        Args:
            config: Packager configuration, loaded from settings if None
            image_service: Image service, built from config if None
        """
        self.config = config or ConfigService().config
        self._image_service = image_service

    @property
    def image_service(self) -> ImageService:
        """Image service (lazy)"""
        if self._image_service is None:
            self._image_service = ImageService.from_config(self.config)
        return self._image_service

    def create(self,
               app: AppSource,
               export_format: str,
               home_path: Optional[Union[str, Path]] = None,
               mode: Optional[str] = None) -> AppExporter:
        """
        Create the exporter for a format

        Raises:
            UnsupportedFormatError: If the format is unknown
        """
        config = self.config
        if home_path is not None:
            config = dataclasses.replace(config, home_path=Path(home_path))
        return ExporterFactory.create_from_config(
            export_format,
            _as_application(app),
            self.image_service,
            config,
            mode=mode
        )

    def export(self,
               app: AppSource,
               export_format: str,
               home_path: Optional[Union[str, Path]] = None,
               mode: Optional[str] = None) -> ExportResult:
        """
        Export an application

        Args:
            app: Application model, dictionary, or path to a JSON/YAML file
            export_format: ram, docker-compose, yaml or helm-chart
            home_path: Export home directory (overrides configuration)
            mode: offline or online (overrides configuration)

        Returns:
            ExportResult: Export result

        Raises:
            UnsupportedFormatError: If the format is unknown
            ExportError: If a stage fails
        """
        exporter = self.create(app, export_format, home_path, mode)
        return run_async(exporter.export())


def _as_application(app: AppSource) -> ApplicationConfig:
    if isinstance(app, ApplicationConfig):
        return app
    if isinstance(app, dict):
        return ApplicationConfig.from_dict(app)
    return load_application(Path(app))


def export(app: AppSource, export_format: str, **options) -> ExportResult:
    """
    Export an application (convenience function)

    Args:
        app: Application model, dictionary, or file path
        export_format: Export format tag
        **options: Options
            - home_path: Export home directory
            - mode: Export mode
            - config: PackagerConfig to use

    Returns:
        ExportResult: Export result
    """
    exporter = Exporter(config=options.get('config'))
    return exporter.export(
        app,
        export_format,
        home_path=options.get('home_path'),
        mode=options.get('mode')
    )
