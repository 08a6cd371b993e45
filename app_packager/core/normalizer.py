"""Kubernetes resource normalization"""

import re
from typing import Any, Dict, Tuple

import yaml

from ..api.exceptions import ManifestError
from ..constants import SERVER_ASSIGNED_METADATA

KIND_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def strip_server_fields(resource: Dict[str, Any]) -> Dict[str, Any]:
    """Remove fields the API server assigns to a live object

    Args:
        resource: Parsed resource, modified in place

    Returns:
        The same resource
    """
    metadata = resource.get("metadata")
    if isinstance(metadata, dict):
        for key in SERVER_ASSIGNED_METADATA:
            metadata.pop(key, None)
    return resource


def dump_resource(resource: Dict[str, Any]) -> str:
    """Serialize a resource with stable key order"""
    return yaml.safe_dump(
        resource,
        sort_keys=True,
        default_flow_style=False,
        allow_unicode=True
    )


def normalize_resource(content: str) -> Tuple[str, str]:
    """
    Normalize one raw resource manifest for redistribution

    Namespace, resourceVersion, creationTimestamp and uid are dropped so the
    manifest can be applied to another cluster. Normalizing an already
    normalized manifest returns the same text.

    Args:
        content: Raw YAML of a single resource

    Returns:
        Tuple of (kind, normalized YAML)

    Raises:
        ManifestError: If the content is not a mapping or has no usable kind
    """
    try:
        resource = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ManifestError(f"invalid resource yaml: {e}") from e

    if not isinstance(resource, dict):
        raise ManifestError("resource must be a YAML mapping")

    kind = resource.get("kind")
    if not isinstance(kind, str) or not KIND_PATTERN.match(kind):
        raise ManifestError(f"resource has no valid kind: {kind!r}")

    return kind, dump_resource(strip_server_fields(resource))
