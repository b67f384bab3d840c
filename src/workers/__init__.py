"""Catalog of optimizer workers."""

from .catalog import DESCRIPTORS
from .descriptor import OptionDefinition, OptionType, WorkerDescriptor

__all__ = [
    "DESCRIPTORS",
    "OptionDefinition",
    "OptionType",
    "WorkerDescriptor",
]
