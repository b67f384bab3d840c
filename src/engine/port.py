"""Contract between the run orchestrator and an optimization engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence, TypeVar

from project_config import ConfigurationError

T = TypeVar("T")

Callback = Callable[[Path, Optional[Path]], T]


class Engine(Protocol):
    """Capability the orchestrator needs from an engine.

    ``optimize_images`` must invoke ``callback`` exactly once per input path,
    on the calling thread, passing the candidate file when the image could be
    made smaller and ``None`` otherwise.
    """

    def optimizable(self, path: Path) -> bool:
        ...

    def optimize_images(self, paths: Sequence[Path], callback: Callback[T]) -> List[T]:
        ...


EngineFactory = Callable[[Mapping[str, Any]], Engine]

__all__ = ["Callback", "ConfigurationError", "Engine", "EngineFactory"]
