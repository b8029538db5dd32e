"""Read-only file access for evidence collection."""

from pathlib import Path
from typing import List, Optional

from .config import get_config
from .error_handling import log_filesystem_error


def list_files(directory: Path) -> List[Path]:
    """
    List regular files directly inside a directory, sorted by lowercase name.

    Returns an empty list when the directory cannot be read.
    """
    try:
        entries = [entry for entry in directory.iterdir() if entry.is_file()]
    except OSError as e:
        log_filesystem_error(
            f"Cannot list directory: {e}",
            "files",
            "list_files",
            file_path=str(directory),
            exception=e,
        )
        return []

    return sorted(entries, key=lambda entry: (entry.name.lower(), entry.name))


def read_text_file(file_path: Path) -> Optional[str]:
    """
    Read a file as UTF-8, replacing invalid bytes.

    Args:
        file_path: File to read

    Returns:
        Optional[str]: File contents, or None if the file is too large or
        cannot be read
    """
    max_size = get_config().detection.max_file_size_bytes
    try:
        size = file_path.stat().st_size
        if size > max_size:
            log_filesystem_error(
                f"Skipping file larger than {max_size} bytes",
                "files",
                "read_text_file",
                file_path=str(file_path),
            )
            return None

        with open(file_path, encoding="utf-8", errors="replace") as f:
            content = f.read()
    except OSError as e:
        log_filesystem_error(
            f"Error reading file: {e}",
            "files",
            "read_text_file",
            file_path=str(file_path),
            exception=e,
        )
        return None

    # Strip a UTF-8 byte order mark
    return content.lstrip("\ufeff")
