"""Reference optimization engine driving external optimizer binaries."""

from __future__ import annotations

import copy
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

from project_config import ConfigurationError, get_config, merge
from workers import DESCRIPTORS, OptionType, WorkerDescriptor

from . import image_path
from .executor import make_executor
from .image_meta import format_of
from .port import Callback

_LOGGER = logging.getLogger(__name__)

DEFAULT_NICE = 10
_GLOBAL_KEYS = {"threads", "nice", "verbose"}

T = TypeVar("T")


@dataclass(frozen=True)
class Worker:
    """A descriptor bound to its resolved options and binary location."""

    descriptor: WorkerDescriptor
    options: Mapping[str, Any]
    bin_path: str

    @property
    def binary(self) -> str:
        return self.descriptor.binary


def _check_value(descriptor: WorkerDescriptor, name: str, value: Any) -> None:
    definition = descriptor.definition(name)
    if definition is None:
        raise ConfigurationError(f"Unknown option {name!r} for worker {descriptor.binary}")

    kind = definition.type
    if kind is OptionType.BOOLEAN:
        valid = isinstance(value, bool)
    elif kind is OptionType.TRI_STATE:
        valid = value is None or isinstance(value, bool)
    elif kind is OptionType.INTEGER:
        valid = isinstance(value, int) and not isinstance(value, bool)
    elif kind is OptionType.LIST:
        valid = isinstance(value, (list, tuple))
    else:
        raise ConfigurationError(f"Option {name!r} of worker {descriptor.binary} has unknown type {kind!r}")
    if not valid:
        raise ConfigurationError(
            f"Invalid value {value!r} for option {name!r} of worker {descriptor.binary}: expected {kind.value}"
        )

    if definition.choices is None:
        return
    candidates = value if kind is OptionType.LIST else [value]
    for candidate in candidates:
        if candidate not in definition.choices:
            raise ConfigurationError(
                f"Invalid value {candidate!r} for option {name!r} of worker {descriptor.binary}"
            )


def resolve_worker_options(descriptor: WorkerDescriptor, supplied: Any) -> Optional[Dict[str, Any]]:
    """Return the effective options of a worker or ``None`` when it is disabled."""

    if supplied is False:
        return None
    if supplied is None or supplied is True:
        supplied = {}
    if not isinstance(supplied, Mapping):
        raise ConfigurationError(
            f"Worker {descriptor.binary} must be configured with a boolean or a mapping, got {supplied!r}"
        )

    options = copy.deepcopy(descriptor.defaults())
    for name, value in supplied.items():
        _check_value(descriptor, name, value)
        options[name] = list(value) if isinstance(value, tuple) else value
    return options


def _resolve_threads(value: Any) -> int:
    if value is None:
        return os.cpu_count() or 1
    if value is False:
        return 1
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"threads must be a positive integer, got {value!r}")
    return value


def _resolve_nice(value: Any) -> Optional[int]:
    if value is None:
        return DEFAULT_NICE
    if value is False:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not -20 <= value <= 19:
        raise ConfigurationError(f"nice must be an integer between -20 and 19, got {value!r}")
    return value


def _release(candidate: Optional[Path]) -> None:
    if candidate is not None:
        image_path.discard(candidate)


class ImageOptim:
    """Optimize images by chaining the workers registered for their format.

    ``options`` is the configuration produced by the command line; values
    from configuration files are merged underneath it.  Passing
    ``config_paths=()`` ignores configuration files entirely.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        config_paths: Optional[Iterable[Path]] = None,
        descriptors: Sequence[WorkerDescriptor] = DESCRIPTORS,
    ) -> None:
        settings = merge(get_config(config_paths), options or {})

        known = _GLOBAL_KEYS | {descriptor.binary for descriptor in descriptors}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigurationError(f"Unknown options: {', '.join(unknown)}")

        self.threads = _resolve_threads(settings.get("threads"))
        self.nice = _resolve_nice(settings.get("nice"))
        self.verbose = bool(settings.get("verbose", False))

        self.workers: List[Worker] = []
        for descriptor in descriptors:
            worker_options = resolve_worker_options(descriptor, settings.get(descriptor.binary))
            if worker_options is None:
                _LOGGER.debug("%s worker disabled", descriptor.binary)
                continue
            bin_path = shutil.which(descriptor.binary)
            if bin_path is None:
                _LOGGER.warning("Skipping %s worker: %s not found", descriptor.binary, descriptor.binary)
                continue
            self.workers.append(Worker(descriptor, worker_options, bin_path))

        self._nice_path = shutil.which("nice") if self.nice is not None else None

    def workers_for(self, image_format: Optional[str]) -> List[Worker]:
        if image_format is None:
            return []
        return [worker for worker in self.workers if image_format in worker.descriptor.image_formats]

    def optimizable(self, path: Path) -> bool:
        """Return ``True`` when ``path`` is an image some enabled worker handles."""

        return bool(self.workers_for(format_of(Path(path))))

    def _command(self, worker: Worker, src: Path, dst: Path) -> List[str]:
        args = worker.descriptor.command(worker.options, src, dst)
        args[0] = worker.bin_path
        if self._nice_path is not None:
            args = [self._nice_path, "-n", str(self.nice), *args]
        return args

    def _run_worker(self, worker: Worker, src: Path, dst: Path) -> bool:
        if worker.descriptor.in_place:
            image_path.copy(src, dst)
        args = self._command(worker, src, dst)
        _LOGGER.debug("%s", " ".join(args))
        try:
            completed = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                check=False,
            )
        except FileNotFoundError as exc:
            _LOGGER.warning("%s worker failed on %s: %s", worker.binary, src, exc)
            return False
        if completed.returncode != 0:
            detail = completed.stderr.decode("utf-8", "replace").strip()
            _LOGGER.warning(
                "%s worker failed on %s with exit code %d%s",
                worker.binary,
                src,
                completed.returncode,
                f": {detail}" if detail else "",
            )
            return False
        return dst.exists() and dst.stat().st_size > 0

    def optimize_image(self, path: Path) -> Optional[Path]:
        """Run the worker chain on ``path`` and return the best candidate.

        Returns ``None`` when no worker produced a smaller file.  The caller
        owns the returned temporary file.
        """

        path = Path(path)
        workers = self.workers_for(format_of(path))
        best: Optional[Path] = None
        best_size = path.stat().st_size
        for worker in workers:
            candidate = image_path.temp_path(path)
            try:
                succeeded = self._run_worker(worker, best or path, candidate)
            except BaseException:
                image_path.discard(candidate)
                if best is not None:
                    image_path.discard(best)
                raise
            if succeeded and candidate.stat().st_size < best_size:
                if best is not None:
                    image_path.discard(best)
                best, best_size = candidate, candidate.stat().st_size
            else:
                image_path.discard(candidate)
        return best

    def optimize_images(
        self,
        paths: Sequence[Path],
        callback: Callback[T],
    ) -> List[T]:
        """Optimize ``paths`` and call ``callback(src, dst)`` once per file.

        Callbacks run in the calling thread, in completion order.  Errors
        from the operating system propagate and stop the run.
        """

        executor = make_executor(self.threads)
        completed = executor.run(self.optimize_image, list(paths), release=_release)
        results: List[T] = []
        try:
            for src, dst in completed:
                try:
                    results.append(callback(src, dst))
                finally:
                    if dst is not None:
                        image_path.discard(dst)
        finally:
            completed.close()
            executor.shutdown()
        return results


__all__ = ["DEFAULT_NICE", "ImageOptim", "Worker", "resolve_worker_options"]
