"""Append-only YAML document writer"""

import logging
import os
from pathlib import Path
from typing import Union

import aiofiles

from ..api.exceptions import PartialWriteError
from ..constants import DOCUMENT_SEPARATOR

logger = logging.getLogger(__name__)


async def append_document(path: Union[str, Path], payload: Union[str, bytes]) -> int:
    """
    Append one YAML document to a file

    The file is created on first use. Every document is followed by the
    ``---`` separator, so several resources of the same kind accumulate in
    one file.

    Args:
        path: Target file
        payload: Document content

    Returns:
        Number of payload bytes written

    Raises:
        PartialWriteError: If the document and its separator were not fully written
    """
    path = Path(path)
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    data = payload + DOCUMENT_SEPARATOR.encode("utf-8")

    mode = "ab" if path.exists() else "wb"
    async with aiofiles.open(path, mode) as f:
        written = await f.write(data)
        if written != len(data):
            raise PartialWriteError(str(path), written, len(data))

    logger.debug(f"Wrote {len(payload)} bytes to {os.path.basename(path)}")
    return len(payload)
