# app_packager/services/import_service.py
"""Import of offline application archives"""

import dataclasses
import json
import logging
import tarfile
from pathlib import Path
from typing import List, Union

import aiofiles

from ..api.exceptions import ArchiveImportError
from ..constants import COMPONENT_IMAGES_TAR, METADATA_FILE, PLUGIN_IMAGES_TAR
from ..core.reference import derive_export_name
from ..models.application import ApplicationConfig, ImageInfo
from ..models.export import ImportResult
from ..utils.async_utils import sync_to_async
from ..utils.file_utils import extract_archive, find_file, prepare_dir
from .image_service import ImageService

logger = logging.getLogger(__name__)

extract_archive_async = sync_to_async(extract_archive)


class AppImporter:
    """Load an offline archive and republish its images to a hub"""

    def __init__(self,
                 image_service: ImageService,
                 home_path: Union[str, Path],
                 trusted_push: bool = False):
        """
        Initialize importer

        Args:
            image_service: Image service
            home_path: Directory archives are extracted under
            trusted_push: Bootstrap repositories on a trusted registry before pushing
        """
        self.image_service = image_service
        self.home_path = Path(home_path).resolve()
        self.trusted_push = trusted_push

    async def import_archive(self, archive: Union[str, Path], hub: ImageInfo) -> ImportResult:
        """
        Import an offline application archive

        Args:
            archive: ``{app}-{version}-ram.tar.gz`` archive
            hub: Target hub coordinates and credentials

        Returns:
            Import result with the rewritten application

        Raises:
            ArchiveImportError: If the archive is missing or malformed
        """
        archive = Path(archive)
        if not archive.is_file():
            raise ArchiveImportError(f"Archive not found: {archive}")
        if not hub.hub_url:
            raise ArchiveImportError("Target hub url is required")

        extract_path = prepare_dir(self.home_path / _archive_stem(archive))
        logger.info(f"Extracting {archive.name} to {extract_path}")
        try:
            await extract_archive_async(archive, extract_path)
        except (OSError, tarfile.TarError, ValueError) as e:
            raise ArchiveImportError(f"Cannot extract {archive}: {e}") from e

        metadata_path = find_file(extract_path, METADATA_FILE)
        if metadata_path is None:
            raise ArchiveImportError(f"{METADATA_FILE} not found in {archive.name}")
        app = await self._read_metadata(metadata_path)

        for tar_name in (COMPONENT_IMAGES_TAR, PLUGIN_IMAGES_TAR):
            tar_path = metadata_path.parent / tar_name
            if tar_path.exists():
                await self.image_service.load(tar_path)
                logger.info(f"Loaded {tar_name}")

        images = await self._republish(app, hub)
        logger.info(f"Imported {app.app_name}:{app.app_version} with {len(images)} image(s)")
        return ImportResult(app=app, images=tuple(images), extract_path=str(extract_path))

    async def _read_metadata(self, path: Path) -> ApplicationConfig:
        async with aiofiles.open(path, 'r', encoding='utf-8') as f:
            content = await f.read()
        try:
            return ApplicationConfig.from_dict(json.loads(content))
        except (ValueError, KeyError, TypeError) as e:
            raise ArchiveImportError(f"Invalid {METADATA_FILE}: {e}") from e

    async def _republish(self, app: ApplicationConfig, hub: ImageInfo) -> List[str]:
        images = []

        for component in app.components:
            if component.share_image:
                component.share_image = await self._push_to_hub(component.share_image, hub)
                component.app_image = dataclasses.replace(hub)
                images.append(component.share_image)

        for plugin in app.plugins:
            if plugin.share_image:
                plugin.share_image = await self._push_to_hub(plugin.share_image, hub)
                plugin.plugin_image = dataclasses.replace(hub)
                images.append(plugin.share_image)

        return images

    async def _push_to_hub(self, image: str, hub: ImageInfo) -> str:
        target = derive_export_name(image, hub)
        await self.image_service.tag(image, target)
        await self.image_service.push(target, hub, trusted=self.trusted_push)
        logger.info(f"Pushed {image} as {target}")
        return target


def _archive_stem(archive: Path) -> str:
    name = archive.name
    for suffix in (".tar.gz", ".tgz", ".tar"):
        if name.endswith(suffix):
            return name[:-len(suffix)]
    return archive.stem
