"""Small file-system helpers used by the repository."""

from __future__ import annotations

import os
from pathlib import Path

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"

PathLike = str | os.PathLike


def write_file(path: PathLike, content: str | bytes) -> None:
    """Write *content* to *path*, creating parent directories and overwriting."""
    target = Path(path)
    parent = target.parent
    if str(parent) not in ("", ".") and not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        content = content.encode(_ENCODING, _ERRORS)
    target.write_bytes(content)


def read_file(path: PathLike) -> str:
    """Return the whole content of the regular file at *path*, unaltered.

    Bytes that are not valid UTF-8 are kept via surrogate escapes so that
    writing the text back reproduces the file exactly.
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"File does not exist: '{source}'")
    if not source.is_file():
        if source.is_dir():
            raise IsADirectoryError(f"Path is not a regular file: '{source}'")
        raise OSError(f"Path is not a regular file: '{source}'")
    return source.read_bytes().decode(_ENCODING, _ERRORS)


def directory_exists(path: PathLike) -> bool:
    """Return True if *path* is an existing directory."""
    return Path(path).is_dir()


def create_directory(path: PathLike) -> None:
    """Create *path* and any missing parents; do nothing if it already exists."""
    target = Path(path)
    if target.exists():
        return
    target.mkdir(parents=True, exist_ok=True)


def file_exists(path: PathLike) -> bool:
    """Return True if *path* is an existing regular file."""
    return Path(path).is_file()


def delete_file(path: PathLike) -> None:
    """Delete the regular file at *path*."""
    target = Path(path)
    if not target.exists():
        raise FileNotFoundError(f"File does not exist: '{target}'")
    if target.is_dir():
        raise IsADirectoryError(f"Path is not a regular file: '{target}'")
    target.unlink()