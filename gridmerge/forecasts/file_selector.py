"""
Forecast file selection.

Forecast exports for a run date live in a folder named MM-DD-YYYY and each
file name starts with MM_DD_YYYY.
"""

import os
import re
from pathlib import Path
from typing import Iterator

from ..errors import MissingInputDirectory

_DATE_PATTERN = re.compile(r"([0-9]{2})-([0-9]{2})-([0-9]{4})")


def date_prefix(date: str) -> str:
    """
    Turn an MM-DD-YYYY run date into the MM_DD_YYYY file name prefix.

    Raises:
        ValueError: If the date is not in MM-DD-YYYY form
    """
    match = _DATE_PATTERN.fullmatch(date)
    if not match:
        raise ValueError(f"Expected a date in MM-DD-YYYY format, got {date!r}")
    month, day, year = match.groups()
    return f"{month}_{day}_{year}"


def select_forecast_files(directory, date: str) -> Iterator[Path]:
    """
    Lazily yield the forecast files in a directory for a run date.

    Entries are returned in directory-iteration order, which is not stable
    across filesystems; nothing downstream relies on it.

    Args:
        directory: Folder holding the forecast exports
        date: Run date as MM-DD-YYYY

    Returns:
        Iterator of paths whose file name starts with the date prefix

    Raises:
        MissingInputDirectory: If the directory does not exist
        ValueError: If the date is malformed
    """
    prefix = date_prefix(date)
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingInputDirectory(directory)

    # Checked eagerly above; the scan itself is lazy
    return _scan(directory, prefix)


def _scan(directory: Path, prefix: str) -> Iterator[Path]:
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.name.startswith(prefix) and entry.is_file():
                yield Path(entry.path)


def forecast_directory(data_root, date: str) -> Path:
    """Folder that holds the forecast exports for a run date."""
    return Path(data_root) / date
