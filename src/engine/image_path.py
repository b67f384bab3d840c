"""Temporary candidate files and replacement of originals."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path


def temp_path(source: Path) -> Path:
    """Create an empty temporary file carrying the extension of ``source``."""

    fd, name = tempfile.mkstemp(prefix="image_optim-", suffix=source.suffix)
    os.close(fd)
    return Path(name)


def copy(source: Path, destination: Path) -> None:
    shutil.copyfile(source, destination)


def replace(candidate: Path, original: Path) -> None:
    """Move ``candidate`` over ``original`` keeping the original permissions."""

    mode = original.stat().st_mode
    shutil.move(str(candidate), str(original))
    os.chmod(original, mode & 0o7777)


def discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


__all__ = ["copy", "discard", "replace", "temp_path"]
