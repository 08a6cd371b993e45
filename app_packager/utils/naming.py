# app_packager/utils/naming.py
"""Service naming helpers"""

import logging
import re

from ..constants import DEFAULT_MEMORY_LABEL, MEMORY_LABELS

logger = logging.getLogger(__name__)

_ESCAPE_PATTERN = re.compile(r"\\\\u([0-9a-fA-F]{4})")
_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def decode_escapes(text: str) -> str:
    """Decode literal ``\\\\uXXXX`` escapes and trim whitespace"""
    decoded = _ESCAPE_PATTERN.sub(lambda m: chr(int(m.group(1), 16)), text or "")
    return decoded.strip()


def compose_name(text: str) -> str:
    """
    Turn a display name into a service name

    Every character outside ``[a-zA-Z0-9._-]`` becomes ``_``.

    Args:
        text: Display name, possibly with escaped unicode

    Returns:
        Sanitized name
    """
    decoded = decode_escapes(text)
    name = _INVALID_CHARS.sub("_", decoded)
    logger.debug(f"convert {decoded!r} to service name {name!r}")
    return name


def get_memory_type(memory: int) -> str:
    """Map a memory size in MiB to its size label"""
    return MEMORY_LABELS.get(memory, DEFAULT_MEMORY_LABEL)
