# app_packager/utils/file_utils.py
"""File operation utilities"""

import os
import shutil
import tarfile
from pathlib import Path
from typing import List, Union


def format_size(size: Union[int, float]) -> str:
    """
    Format file size in human-readable format

    Args:
        size: Size in bytes

    Returns:
        Formatted size string
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"


def prepare_dir(path: Path) -> Path:
    """
    Remove a directory if present and create it empty

    Args:
        path: Directory path

    Returns:
        The directory path
    """
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def write_volume_file(service_dir: Path, mount_path: str, content: str) -> Path:
    """
    Write a file-backed volume under a service directory

    ``mount_path`` is absolute inside the container; it is re-rooted at
    ``service_dir``.

    Args:
        service_dir: Service directory
        mount_path: Mount path inside the container
        content: File content

    Returns:
        Path of the written file
    """
    relative = mount_path.lstrip("/")
    target = (service_dir / relative).resolve()
    if not is_within(target, service_dir.resolve()):
        raise ValueError(f"Volume path escapes service directory: {mount_path}")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target


def read_lines(file_path: Path) -> List[str]:
    """
    Read non-blank, stripped lines of a text file

    Args:
        file_path: File path

    Returns:
        List of lines
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip()]


def is_within(path: Path, directory: Path) -> bool:
    """Check whether ``path`` is ``directory`` or lies below it"""
    try:
        path.relative_to(directory)
        return True
    except ValueError:
        return False


def extract_archive(archive_path: Path, extract_to: Path) -> Path:
    """
    Extract a tar archive, refusing members outside the target directory

    Args:
        archive_path: Archive file path
        extract_to: Extraction directory

    Returns:
        Path to extracted content

    Raises:
        ValueError: If a member would be written outside ``extract_to``
    """
    extract_to.mkdir(parents=True, exist_ok=True)
    root = extract_to.resolve()

    with tarfile.open(archive_path, "r:*") as tar:
        for member in tar.getmembers():
            target = (root / member.name).resolve()
            if not is_within(target, root):
                raise ValueError(f"Archive member escapes extraction directory: {member.name}")
            if member.issym() or member.islnk():
                link_target = (target.parent / member.linkname).resolve()
                if not is_within(link_target, root):
                    raise ValueError(f"Archive link escapes extraction directory: {member.name}")
        if hasattr(tarfile, "data_filter"):
            tar.extractall(root, filter="data")
        else:
            tar.extractall(root)

    return extract_to


def find_file(directory: Path, name: str) -> Union[Path, None]:
    """
    Find the shallowest file with a given name

    Args:
        directory: Search directory
        name: File name

    Returns:
        Matching path or None
    """
    matches = sorted(
        (p for p in directory.rglob(name) if p.is_file()),
        key=lambda p: len(p.relative_to(directory).parts)
    )
    return matches[0] if matches else None


def get_file_size(file_path: Path) -> int:
    """Get file size in bytes"""
    return os.path.getsize(file_path)
