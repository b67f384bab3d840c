"""Command line orchestration of image optimization runs."""

__version__ = "0.1.0"

from .options import UsageError, build_surface, parse_options
from .scanner import scan
from .space import SpaceFormatter

__all__ = [
    "SpaceFormatter",
    "UsageError",
    "__version__",
    "build_surface",
    "parse_options",
    "scan",
]
