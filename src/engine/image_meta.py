"""Image format detection."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

_LOGGER = logging.getLogger(__name__)

_PIL_FORMATS = {"PNG": "png", "JPEG": "jpeg", "GIF": "gif"}
_SVG_SNIFF_BYTES = 1024

_PIXEL_LIMIT_LOCK = threading.Lock()


def _looks_like_svg(path: Path) -> bool:
    with path.open("rb") as fh:
        head = fh.read(_SVG_SNIFF_BYTES).lstrip().lower()
    if head.startswith(b"<svg"):
        return True
    return head.startswith(b"<?xml") and b"<svg" in head


def _pil_format(path: Path) -> Optional[str]:
    with Image.open(path) as image:
        return _PIL_FORMATS.get(image.format or "")


def _pil_format_unlimited(path: Path) -> Optional[str]:
    # only the header is read, pixel data is never decoded
    with _PIXEL_LIMIT_LOCK:
        limit = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            return _pil_format(path)
        finally:
            Image.MAX_IMAGE_PIXELS = limit


def format_of(path: Path) -> Optional[str]:
    """Return ``png``, ``jpeg``, ``gif`` or ``svg`` for ``path``, else ``None``."""

    try:
        try:
            return _pil_format(path)
        except Image.DecompressionBombError:
            _LOGGER.debug("%s: image exceeds the pixel limit, reading header only", path)
            return _pil_format_unlimited(path)
    except UnidentifiedImageError:
        pass
    except OSError as exc:
        _LOGGER.debug("%s: cannot read image header: %s", path, exc)
        return None
    return "svg" if _looks_like_svg(path) else None


__all__ = ["format_of"]
