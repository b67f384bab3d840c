"""Declarative worker metadata used to build the CLI surface and run binaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple


class OptionType(Enum):
    """Value shapes a worker option may declare."""

    BOOLEAN = "boolean"
    TRI_STATE = "tri-state"
    INTEGER = "integer"
    LIST = "list"


CommandBuilder = Callable[[Mapping[str, Any], Path, Path], List[str]]


@dataclass(frozen=True)
class OptionDefinition:
    """Single tunable of a worker.

    ``type`` is normally an :class:`OptionType`; anything else is treated as a
    catalog inconsistency by the consumers.  ``choices`` restricts integer
    values or list items and is enforced when the engine resolves options.
    """

    name: str
    type: Any
    default: Any
    description: str
    choices: Optional[Sequence[Any]] = None


@dataclass(frozen=True)
class WorkerDescriptor:
    """Metadata describing one optimizer binary."""

    binary: str
    image_formats: Tuple[str, ...]
    command: CommandBuilder
    option_definitions: Tuple[OptionDefinition, ...] = field(default_factory=tuple)
    in_place: bool = False

    def defaults(self) -> dict[str, Any]:
        return {definition.name: definition.default for definition in self.option_definitions}

    def definition(self, name: str) -> OptionDefinition | None:
        for definition in self.option_definitions:
            if definition.name == name:
                return definition
        return None


__all__ = ["CommandBuilder", "OptionDefinition", "OptionType", "WorkerDescriptor"]
