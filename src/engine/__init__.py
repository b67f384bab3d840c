"""Optimization engine running optimizer binaries over image files."""

from .image_optim import ImageOptim
from .port import ConfigurationError, Engine, EngineFactory

__all__ = ["ConfigurationError", "Engine", "EngineFactory", "ImageOptim"]
