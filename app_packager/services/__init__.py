# app_packager/services/__init__.py
"""Service layer for app-packager"""

from .config_service import ConfigService, load_application
from .image_service import ImageService
from .import_service import AppImporter

__all__ = [
    "ConfigService",
    "load_application",
    "ImageService",
    "AppImporter",
]
