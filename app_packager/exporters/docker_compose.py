# app_packager/exporters/docker_compose.py
"""Docker Compose bundle export"""

import logging
from typing import Any, Dict

import aiofiles
import yaml

from ..constants import COMPOSE_FILE
from ..models.application import Component
from ..models.export import ExportFormat
from ..utils.file_utils import write_volume_file
from ..utils.naming import compose_name, get_memory_type
from .base import AppExporter

logger = logging.getLogger(__name__)

COMPOSE_VERSION = "2.1"


class DockerComposeExporter(AppExporter):
    """Exports images plus a ``docker-compose.yaml`` with one service per component"""

    format = ExportFormat.DOCKER_COMPOSE

    def build_service(self, component: Component) -> Dict[str, Any]:
        """
        Build the compose service for a component

        File-backed volumes are written under the export directory and
        bind-mounted read from there.

        Args:
            component: Component with a share image

        Returns:
            Compose service definition
        """
        name = compose_name(component.service_alias or component.service_cname)
        service: Dict[str, Any] = {
            "image": component.share_image,
            "container_name": name,
            "restart": "always",
            "labels": {"memory_type": get_memory_type(component.memory)},
        }

        volumes = []
        for volume in component.volumes:
            mount_path = "/" + volume.volume_mount_path.lstrip("/")
            write_volume_file(self.export_path / name, mount_path, volume.file_content)
            volumes.append(f"./{name}{mount_path}:{mount_path}")
        if volumes:
            service["volumes"] = volumes

        return service

    def build_document(self) -> Dict[str, Any]:
        """Build the whole compose document"""
        services = {}
        for component in self.app.components:
            if not component.share_image:
                logger.debug(f"component {component.service_cname} has no image, skipped")
                continue
            service = self.build_service(component)
            services[service["container_name"]] = service
        return {"version": COMPOSE_VERSION, "services": services}

    async def emit_manifests(self) -> None:
        content = yaml.safe_dump(
            self.build_document(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True
        )
        async with aiofiles.open(self.export_path / COMPOSE_FILE, 'w', encoding='utf-8') as f:
            await f.write(content)
        logger.info(f"success write {COMPOSE_FILE}")
