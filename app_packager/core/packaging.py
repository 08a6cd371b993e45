"""Export directory packaging with an external tar tool"""

import asyncio
import logging
from pathlib import Path

from ..api.exceptions import ExternalToolError
from ..constants import DEFAULT_TAR_COMMAND

logger = logging.getLogger(__name__)


async def package_directory(export_path: Path,
                            package_name: str,
                            home_path: Path,
                            tar_command: str = DEFAULT_TAR_COMMAND) -> Path:
    """
    Create ``{home}/{package_name}`` from an export directory

    The archive holds the export directory by its base name, so extracting
    it recreates a single top-level directory.

    Args:
        export_path: Directory to archive
        package_name: Archive file name
        home_path: Working directory and archive location
        tar_command: tar-compatible executable

    Returns:
        Absolute archive path

    Raises:
        ExternalToolError: If the tool cannot be started or exits non-zero
    """
    home_path = Path(home_path).resolve()
    package_path = home_path / package_name
    args = [tar_command, "-czf", str(package_path), Path(export_path).name]

    logger.debug(f"Running {' '.join(args)} in {home_path}")
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(home_path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise ExternalToolError(tar_command, -1, str(e)) from e

    _, stderr = await process.communicate()
    if process.returncode != 0:
        raise ExternalToolError(
            tar_command,
            process.returncode,
            stderr.decode("utf-8", errors="replace")
        )

    logger.info(f"Packaged {package_path}")
    return package_path
