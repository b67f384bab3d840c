"""Command line run: parse options, discover images, optimize and report."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from tqdm import tqdm

from engine import ConfigurationError, Engine, EngineFactory, ImageOptim
from engine import image_path
from workers import DESCRIPTORS, WorkerDescriptor

from . import log
from .options import UsageError, parse_options
from .scanner import scan
from .space import EMPTY_SPACE, SpaceFormatter

_LOGGER = logging.getLogger(__name__)

NO_IMPROVEMENT_MARKER = "------"


@dataclass
class Report:
    """Per-file lines and running size totals of one run."""

    formatter: SpaceFormatter
    lines: List[str] = field(default_factory=list)
    src_total: int = 0
    dst_total: int = 0

    def add(self, line: str, src_size: int, dst_size: int) -> str:
        self.lines.append(line)
        self.src_total += src_size
        self.dst_total += dst_size
        return line

    def optimized(self, path: Path, src_size: int, dst_size: int) -> str:
        return self.add(f"{self.formatter.size_percent(src_size, dst_size)}  {path}", src_size, dst_size)

    def unchanged(self, path: Path, size: int) -> str:
        return self.add(f"{NO_IMPROVEMENT_MARKER} {EMPTY_SPACE}  {path}", size, size)

    def total_line(self) -> str:
        return f"Total: {self.formatter.size_percent(self.src_total, self.dst_total)}"


def _write_line(line: str) -> None:
    tqdm.write(line, file=sys.stdout)


def optimize_files(
    engine: Engine,
    files: Sequence[Path],
    formatter: SpaceFormatter,
    emit: Optional[Callable[[str], None]] = None,
) -> Report:
    """Optimize ``files`` with ``engine``, replacing originals with smaller candidates.

    Each report line is passed to ``emit`` as soon as its file completes.
    """

    emit = emit or _write_line
    report = Report(formatter)

    with tqdm(total=len(files), desc="optimizing", unit="file", disable=None, leave=False) as progress:

        def handle(src: Path, dst: Optional[Path]) -> str:
            if dst is not None:
                src_size, dst_size = src.stat().st_size, dst.stat().st_size
                image_path.replace(dst, src)
                line = report.optimized(src, src_size, dst_size)
            else:
                line = report.unchanged(src, src.stat().st_size)
            progress.update()
            emit(line)
            return line

        engine.optimize_images(files, handle)

    return report


def _dump_options(config: dict) -> None:
    print("Options:")
    print(json.dumps(config, indent=2, sort_keys=True, default=str))


def run(
    argv: Sequence[str],
    *,
    engine_factory: Optional[EngineFactory] = None,
    descriptors: Sequence[WorkerDescriptor] = DESCRIPTORS,
    prog: str | None = None,
) -> int:
    """Execute one optimization run and return the process exit code."""

    try:
        config, paths = parse_options(argv, descriptors, prog=prog)
    except UsageError as exc:
        print(exc, file=sys.stderr)
        return 1

    verbose = bool(config.get("verbose"))
    log.configure(verbose)
    if verbose:
        _dump_options(config)

    if not paths:
        print("no paths to optimize", file=sys.stderr)
        return 1

    recursive = bool(config.pop("recursive", False))
    formatter = SpaceFormatter(base10=bool(config.pop("base10", False)))

    factory = engine_factory or ImageOptim
    try:
        engine = factory(config)
    except ConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1

    files = scan(paths, recursive, engine.optimizable)
    _LOGGER.debug("%d file(s) to optimize", len(files))

    try:
        report = optimize_files(engine, files, formatter)
    except OSError as exc:
        print(f"optimization aborted: {exc}", file=sys.stderr)
        return 1

    if report.lines:
        print()
        print(report.total_line())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    return run(sys.argv[1:] if argv is None else argv)


__all__ = ["Report", "main", "optimize_files", "run"]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
