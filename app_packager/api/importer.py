"""Importer API for offline application archives"""

from pathlib import Path
from typing import Optional, Union

from ..models import ImageInfo, ImportResult, PackagerConfig
from ..services import AppImporter, ConfigService, ImageService
from ..utils.async_utils import run_async


class Importer:
    """Importer class for loading archives into a hub"""

    def __init__(self,
                 config: Optional[PackagerConfig] = None,
                 image_service: Optional[ImageService] = None):
        """
        Initialize importer

        Args:
            config: Packager configuration, loaded from settings if None
            image_service: Image service, built from config if None
        """
        self.config = config or ConfigService().config
        self.image_service = image_service or ImageService.from_config(self.config)

    def import_archive(self,
                       archive: Union[str, Path],
                       hub: ImageInfo,
                       home_path: Optional[Union[str, Path]] = None) -> ImportResult:
        """
        Import an offline archive

        Args:
            archive: Archive produced by a ram export
            hub: Target hub coordinates and credentials
            home_path: Extraction home (overrides configuration)

        Returns:
            ImportResult: Rewritten application and pushed images

        Raises:
            ArchiveImportError: If the archive is missing or malformed
            ImageError: If an image operation fails
        """
        importer = AppImporter(
            self.image_service,
            home_path or self.config.home_path,
            trusted_push=self.config.registry.trusted_push
        )
        return run_async(importer.import_archive(archive, hub))


def import_archive(archive: Union[str, Path], hub: ImageInfo, **options) -> ImportResult:
    """
    Import an offline archive (convenience function)

    Args:
        archive: Archive path
        hub: Target hub
        **options: Options
            - home_path: Extraction home
            - config: PackagerConfig to use

    Returns:
        ImportResult: Import result
    """
    importer = Importer(config=options.get('config'))
    return importer.import_archive(archive, hub, home_path=options.get('home_path'))
