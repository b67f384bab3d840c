"""Discovery of files to optimize from command line arguments."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator, List, Sequence, Union

_LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]
Predicate = Callable[[Path], bool]


def _walk(root: Path) -> Iterator[Path]:
    """Yield ``root`` and its descendants depth first, in name order."""

    stack: List[Path] = [root]
    while stack:
        path = stack.pop()
        yield path
        if not path.is_dir() or path.is_symlink():
            continue
        try:
            children = sorted(path.iterdir())
        except PermissionError as exc:
            _LOGGER.warning("%s: %s", path, exc.strerror or exc)
            continue
        # reversed so the first child is popped first
        stack.extend(reversed(children))


def scan(paths: Sequence[PathLike], recursive: bool, is_optimizable: Predicate) -> List[Path]:
    """Resolve ``paths`` into the ordered list of files to optimize.

    Files named directly are checked against ``is_optimizable`` and reported
    when rejected.  Other arguments are traversed when ``recursive`` is set;
    descendants failing the predicate are dropped silently.  Duplicate
    arguments are not collapsed.
    """

    files: List[Path] = []
    for arg in paths:
        path = Path(arg)
        if path.is_file():
            if is_optimizable(path):
                files.append(path)
            else:
                _LOGGER.warning("%s is not an image or there is no optimizer for it", arg)
        elif not recursive:
            _LOGGER.warning("%s is not a file", arg)
        elif not path.exists():
            _LOGGER.warning("%s does not exist", arg)
        else:
            for candidate in _walk(path):
                if candidate.is_file() and is_optimizable(candidate):
                    files.append(candidate)
    return files


__all__ = ["scan"]
