"""Dependency path validation and search directory resolution."""

import os
from pathlib import Path
from typing import List, Optional

from .error_handling import InvalidDependencyPathError


def validate_dependency_path(path: Optional[str]) -> Optional[Path]:
    """
    Validate a dependency root path.

    Args:
        path: Path given by the caller, possibly None or empty

    Returns:
        Optional[Path]: Normalized absolute path, or None if no path was given

    Raises:
        InvalidDependencyPathError: If the path is not absolute
    """
    if path is None or str(path) == "":
        return None

    candidate = Path(path)
    if not candidate.is_absolute():
        raise InvalidDependencyPathError(f"dependency path {path} must be absolute")

    return Path(os.path.normpath(candidate))


def _contains(ancestor: Path, path: Path) -> bool:
    return path == ancestor or ancestor in path.parents


def search_directories(path: Path, search_root: Optional[Path]) -> List[Path]:
    """
    Directories to search for evidence, nearest first.

    Starts at ``path`` and walks up to ``search_root`` inclusive. When the
    search root does not contain ``path`` only ``path`` is searched.
    """
    if search_root is None or not _contains(search_root, path):
        return [path]

    directories = [path]
    current = path
    while current != search_root:
        current = current.parent
        directories.append(current)
    return directories


def source_identifier(file_path: Path, path: Path, search_root: Optional[Path]) -> str:
    """
    Format the source identifier for an evidence file.

    Files under the dependency path are named relative to it. Files found
    above it are named relative to the parent of the search root, so the
    identifier starts with the search root's directory name.
    """
    if _contains(path, file_path):
        return file_path.relative_to(path).as_posix()

    if search_root is not None and _contains(search_root, file_path):
        return file_path.relative_to(search_root.parent).as_posix()

    return file_path.as_posix()
