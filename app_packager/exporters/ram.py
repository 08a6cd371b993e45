# app_packager/exporters/ram.py
"""Offline application archive export"""

import json
import logging

import aiofiles

from ..constants import METADATA_FILE
from ..models.export import ExportFormat
from .base import AppExporter

logger = logging.getLogger(__name__)


class RamExporter(AppExporter):
    """Exports images plus a ``metadata.json`` application description

    In offline mode the metadata carries no image hub credentials. Online
    mode skips images and keeps the description as given.
    """

    format = ExportFormat.RAM
    supports_online = True

    async def emit_manifests(self) -> None:
        """Write metadata.json"""
        app = self.app.without_image_credentials() if self.offline else self.app
        meta = json.dumps(app.to_dict(), ensure_ascii=False, indent=2)

        async with aiofiles.open(self.export_path / METADATA_FILE, 'w', encoding='utf-8') as f:
            await f.write(meta)
        logger.info(f"success write {METADATA_FILE}")
