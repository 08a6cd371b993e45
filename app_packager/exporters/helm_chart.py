# app_packager/exporters/helm_chart.py
"""Helm chart export"""

import logging
from pathlib import Path

import yaml

from ..constants import (
    CHART_FILE,
    CHART_TEMPLATES_DIR,
    HELM_CHART_API_VERSION,
    HELM_CHART_TYPE,
    VERSION_INFO_ANNOTATION,
)
from ..core.manifest_writer import append_document
from ..models.export import ExportFormat
from .base import AppExporter

logger = logging.getLogger(__name__)


class HelmChartExporter(AppExporter):
    """Exports images plus a chart whose templates are the normalized resources"""

    format = ExportFormat.HELM_CHART

    @property
    def templates_path(self) -> Path:
        """Chart templates directory"""
        return self.manifest_path / CHART_TEMPLATES_DIR

    async def prepare(self) -> None:
        await super().prepare()
        self.manifest_path.mkdir(parents=True, exist_ok=True)
        await self.write_chart_yaml()
        logger.info("write Chart.yaml success")

    async def write_chart_yaml(self) -> None:
        """Write Chart.yaml, omitting empty fields"""
        chart = {
            "apiVersion": HELM_CHART_API_VERSION,
            "appVersion": self.app.app_version,
            "description": self.app.annotations.get(VERSION_INFO_ANNOTATION, ""),
            "name": self.app.app_name,
            "type": HELM_CHART_TYPE,
            "version": self.app.app_version,
        }
        chart = {key: value for key, value in chart.items() if value}
        content = yaml.safe_dump(chart, sort_keys=True, default_flow_style=False, allow_unicode=True)
        await append_document(self.manifest_path / CHART_FILE, content)

    async def emit_manifests(self) -> None:
        count = await self.write_resources(self.templates_path)
        logger.info(f"wrote {count} chart template(s)")
