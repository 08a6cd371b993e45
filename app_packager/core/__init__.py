# app_packager/core/__init__.py
"""Core image transfer and manifest handling"""

from .image_client import ImageClient, clamp_timeout, make_auth_config
from .manifest_writer import append_document
from .normalizer import normalize_resource
from .packaging import package_directory
from .progress import Deadline, decode_progress, iter_records
from .reference import (
    ImageReference,
    derive_export_name,
    parse_any_reference,
    parse_normalized_named,
)
from .signal_wait import BoundedWait
from .trusted_registry import Repository, TrustedRegistryBootstrapper, TrustedRegistryClient

__all__ = [
    "ImageClient",
    "clamp_timeout",
    "make_auth_config",
    "append_document",
    "normalize_resource",
    "package_directory",
    "Deadline",
    "decode_progress",
    "iter_records",
    "ImageReference",
    "derive_export_name",
    "parse_any_reference",
    "parse_normalized_named",
    "BoundedWait",
    "Repository",
    "TrustedRegistryBootstrapper",
    "TrustedRegistryClient",
]
