# app_packager/exporters/base.py
"""Export orchestrator abstract base class"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar, Union

from ..api.exceptions import ExportError
from ..constants import (
    COMPONENT_IMAGES_TAR,
    DEFAULT_TAR_COMMAND,
    DEPENDENT_IMAGES_FILE,
    PLUGIN_IMAGES_TAR,
)
from ..core.manifest_writer import append_document
from ..core.normalizer import normalize_resource
from ..core.packaging import package_directory
from ..core.signal_wait import BoundedWait
from ..models.application import ApplicationConfig
from ..models.export import ExportFormat, ExportJob, ExportMode, ExportResult, ExportState
from ..services.image_service import ImageService
from ..utils.file_utils import prepare_dir, read_lines
from ..utils.naming import decode_escapes

logger = logging.getLogger(__name__)

T = TypeVar('T')


def unique(images: Iterable[str]) -> List[str]:
    """Drop blanks and duplicates, keeping first-seen order"""
    seen = []
    for image in images:
        if image and image not in seen:
            seen.append(image)
    return seen


class AppExporter(ABC):
    """Abstract base class for all export formats

    ``export()`` drives the job through Preparing, MaterializingImages,
    AwaitingManifestSignal (formats that need it), EmittingManifests and
    Packaging. A failing stage leaves the job in FAILED and raises
    ``ExportError``; nothing is retried or rolled back.
    """

    format: ExportFormat
    supports_online = False

    def __init__(self,
                 app: ApplicationConfig,
                 image_service: ImageService,
                 home_path: Union[str, Path],
                 mode: ExportMode = ExportMode.OFFLINE,
                 signal_wait: Optional[BoundedWait] = None,
                 tar_command: str = DEFAULT_TAR_COMMAND):
        """
        Initialize exporter

        Args:
            app: Application to export, never modified
            image_service: Image service
            home_path: Directory the export directory and package are created in
            mode: Export mode
            signal_wait: Wait used for the manifest-dependency file
            tar_command: tar-compatible executable
        """
        if mode is ExportMode.ONLINE and not self.supports_online:
            logger.warning(f"{self.format.value} export does not support online mode, exporting offline")
            mode = ExportMode.OFFLINE

        self.app = app
        self.image_service = image_service
        self.signal_wait = signal_wait or BoundedWait()
        self.tar_command = tar_command
        self.job = ExportJob(app=app, format=self.format, home_path=Path(home_path), mode=mode)
        self._component_images: List[str] = []

    @property
    def export_path(self) -> Path:
        """Export directory"""
        return self.job.export_path

    @property
    def manifest_path(self) -> Path:
        """Directory the companion process writes manifests into"""
        return self.export_path / self.app.app_name

    @property
    def offline(self) -> bool:
        """Whether images are materialized into the package"""
        return self.job.mode is ExportMode.OFFLINE

    async def export(self) -> ExportResult:
        """
        Run the export

        Returns:
            Export result

        Raises:
            ExportError: If any stage fails
        """
        logger.info(f"start export app {self.app.app_name} to {self.format.value}")

        await self._run_stage(ExportState.PREPARING, self.prepare)
        if self.offline:
            await self._run_stage(ExportState.MATERIALIZING_IMAGES, self.materialize_images)
        if self.format.awaits_manifest_signal:
            await self._run_stage(ExportState.AWAITING_MANIFEST_SIGNAL, self.await_manifest_signal)
        await self._run_stage(ExportState.EMITTING_MANIFESTS, self.emit_manifests)
        package_path = await self._run_stage(ExportState.PACKAGING, self.package)

        self.job.state = ExportState.DONE
        logger.info(f"success export app {self.app.app_name}")
        return ExportResult(
            package_path=str(package_path),
            package_name=self.job.package_name,
            package_format=self.format.value,
            images=tuple(self.job.images)
        )

    async def _run_stage(self, state: ExportState, step: Callable[[], Awaitable[T]]) -> T:
        self.job.state = state
        logger.debug(f"{self.app.app_name}: {state.value}")
        try:
            return await step()
        except asyncio.CancelledError:
            self.job.state = ExportState.FAILED
            raise
        except Exception as e:
            self.job.state = ExportState.FAILED
            logger.error(f"{self.format.value} export of {self.app.app_name} failed during {state.value}: {e}")
            raise ExportError(state.value, e) from e

    async def prepare(self) -> None:
        """Recreate an empty export directory"""
        prepare_dir(self.export_path)
        logger.info("success prepare export dir")

    async def materialize_images(self) -> None:
        """Pull and save component and plugin images"""
        await self.save_components()
        logger.info("success save components")
        await self.save_plugins()
        logger.info("success save plugins")

    async def save_components(self) -> Path:
        """Pull every component image and save them to one archive"""
        for component in self.app.components:
            if component.share_image:
                await self.image_service.pull(component.share_image, component.app_image)
                logger.info(f"pull component {decode_escapes(component.service_cname)} image success")

        self._component_images = unique(self.app.component_images)
        self.job.add_images(self._component_images)
        return await self._save(self._component_images, COMPONENT_IMAGES_TAR)

    async def save_plugins(self) -> Path:
        """Pull every plugin image and save them to one archive"""
        for plugin in self.app.plugins:
            if plugin.share_image:
                await self.image_service.pull(plugin.share_image, plugin.plugin_image)
                logger.info(f"pull plugin {plugin.plugin_name} image success")

        images = unique(self.app.plugin_images)
        self.job.add_images(images)
        return await self._save(images, PLUGIN_IMAGES_TAR)

    async def _save(self, images: List[str], file_name: str) -> Path:
        start = time.monotonic()
        destination = await self.image_service.save(images, self.export_path / file_name)
        logger.info(f"save {file_name} success, took {time.monotonic() - start:.1f}s")
        return destination

    async def await_manifest_signal(self) -> None:
        """Wait for the manifest-dependency file and materialize what it lists

        The wait is soft: when the file never appears the export continues
        without manifest-dependent images.
        """
        signal_path = self.manifest_path / DEPENDENT_IMAGES_FILE
        self.job.signal_received = await self.signal_wait.for_file(signal_path)
        if not self.job.signal_received:
            logger.warning(
                f"{DEPENDENT_IMAGES_FILE} did not appear after "
                f"{self.signal_wait.max_attempts} attempts, continuing without it"
            )
            return

        logger.info(f"{DEPENDENT_IMAGES_FILE} create success")
        self.job.dependent_images = unique(read_lines(signal_path))

        missing = [image for image in self.job.dependent_images if image not in self.job.images]
        self.job.add_images(self.job.dependent_images)
        if not missing or not self.offline:
            return

        for image in missing:
            await self.image_service.pull(image)
            logger.info(f"pull dependent image {image} success")
        self._component_images = unique(self._component_images + missing)
        await self._save(self._component_images, COMPONENT_IMAGES_TAR)

    @abstractmethod
    async def emit_manifests(self) -> None:
        """Write the format's manifests into the export directory"""
        pass

    async def write_resources(self, target_dir: Path) -> int:
        """Normalize every Kubernetes resource and append it to ``{Kind}.yaml``

        Args:
            target_dir: Directory receiving the kind files

        Returns:
            Number of resources written
        """
        target_dir.mkdir(parents=True, exist_ok=True)
        for resource in self.app.k8s_resources:
            kind, content = normalize_resource(resource.content)
            await append_document(target_dir / f"{kind}.yaml", content)
        return len(self.app.k8s_resources)

    async def package(self) -> Path:
        """Archive the export directory"""
        return await package_directory(
            self.export_path,
            self.job.package_name,
            self.job.home_path,
            self.tar_command
        )
