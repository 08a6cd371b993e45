# app_packager/exporters/k8s_yaml.py
"""Raw Kubernetes YAML export"""

import logging

from ..models.export import ExportFormat
from .base import AppExporter

logger = logging.getLogger(__name__)


class K8sYamlExporter(AppExporter):
    """Exports images plus one ``{Kind}.yaml`` per resource kind"""

    format = ExportFormat.K8S_YAML

    async def prepare(self) -> None:
        await super().prepare()
        self.manifest_path.mkdir(parents=True, exist_ok=True)

    async def emit_manifests(self) -> None:
        count = await self.write_resources(self.manifest_path)
        logger.info(f"wrote {count} kubernetes resource(s)")
