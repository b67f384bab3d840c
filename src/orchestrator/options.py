"""Command line surface generated from worker descriptors.

The surface is built in two steps: :func:`build_surface` turns descriptors into
plain :class:`FlagSpec` records, and :func:`build_parser` binds those records
to an :mod:`argparse` parser whose actions write straight into a configuration
mapping.
"""

from __future__ import annotations

import argparse
import textwrap
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence, Tuple

from workers import OptionType, WorkerDescriptor

from . import __version__

HELP_WIDTH = 60

Configuration = Dict[str, Any]


class UsageError(Exception):
    """Raised when the command line cannot be parsed."""


class OptionSurfaceError(RuntimeError):
    """Raised when a worker descriptor declares an unsupported option type."""


def _coerce_bool(value: str) -> Optional[bool]:
    normalised = value.strip().lower()
    if normalised in {"1", "true", "yes", "on"}:
        return True
    if normalised in {"0", "false", "no", "off"}:
        return False
    return None


def boolean(value: str) -> bool:
    parsed = _coerce_bool(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")
    return parsed


def tri_state(value: str) -> Optional[bool]:
    if value.strip().lower() in {"nil", "none"}:
        return None
    parsed = _coerce_bool(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid boolean or nil value: {value!r}")
    return parsed


def integer(value: str) -> int:
    return int(value)


def comma_list(value: str) -> List[str]:
    return value.split(",") if value else []


_SHAPES: Dict[OptionType, Tuple[str, Callable[[str], Any]]] = {
    OptionType.BOOLEAN: ("B", boolean),
    OptionType.TRI_STATE: ("B", tri_state),
    OptionType.INTEGER: ("N", integer),
    OptionType.LIST: ("a,b,c", comma_list),
}


@dataclass(frozen=True)
class FlagSpec:
    """One worker-derived flag before it is bound to a parser."""

    flag: str
    worker: str
    option: Optional[str]
    metavar: Optional[str]
    converter: Optional[Callable[[str], Any]]
    help_lines: Tuple[str, ...]


@dataclass(frozen=True)
class OptionSurface:
    disabling: Tuple[FlagSpec, ...]
    # one tuple per worker so help can separate them
    worker_options: Tuple[Tuple[FlagSpec, ...], ...]


def render_default(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def wrap_help(description: str, default: Any) -> Tuple[str, ...]:
    text = f"{description} (defaults to {render_default(default)})"
    return tuple(textwrap.wrap(text, width=HELP_WIDTH, break_on_hyphens=False)) or (text,)


def build_surface(descriptors: Sequence[WorkerDescriptor]) -> OptionSurface:
    """Classify every descriptor option into a flag specification."""

    disabling = tuple(
        FlagSpec(
            flag=f"--no-{descriptor.binary}",
            worker=descriptor.binary,
            option=None,
            metavar=None,
            converter=None,
            help_lines=(f"disable {descriptor.binary} worker",),
        )
        for descriptor in descriptors
    )

    worker_options: List[Tuple[FlagSpec, ...]] = []
    for descriptor in descriptors:
        specs: List[FlagSpec] = []
        for definition in descriptor.option_definitions:
            shape = _SHAPES.get(definition.type) if isinstance(definition.type, OptionType) else None
            if shape is None:
                raise OptionSurfaceError(
                    f"Unknown type {definition.type!r} for option "
                    f"{definition.name!r} of worker {descriptor.binary!r}"
                )
            metavar, converter = shape
            specs.append(
                FlagSpec(
                    flag=f"--{descriptor.binary}-{definition.name.replace('_', '-')}",
                    worker=descriptor.binary,
                    option=definition.name,
                    metavar=metavar,
                    converter=converter,
                    help_lines=wrap_help(definition.description, definition.default),
                )
            )
        worker_options.append(tuple(specs))

    return OptionSurface(disabling=disabling, worker_options=tuple(worker_options))


def set_worker_option(config: MutableMapping[str, Any], worker: str, option: str, value: Any) -> None:
    """Store ``value`` in the nested mapping of ``worker``, creating it if needed."""

    if not isinstance(config.get(worker), dict):
        config[worker] = {}
    config[worker][option] = value


class _ConfigAction(argparse.Action):
    def __init__(self, option_strings, dest, config, key, const=None, nargs=None, **kwargs):
        self.config = config
        self.key = key
        super().__init__(option_strings, dest, nargs=nargs, const=const, default=argparse.SUPPRESS, **kwargs)


class StoreConfig(_ConfigAction):
    """Last-write-wins assignment of a global key."""

    def __call__(self, parser, namespace, values, option_string=None):
        self.config[self.key] = self.const if self.nargs == 0 else values


class StoreWorkerOption(_ConfigAction):
    def __init__(self, option_strings, dest, config, key, option, **kwargs):
        self.option = option
        super().__init__(option_strings, dest, config, key, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        set_worker_option(self.config, self.key, self.option, values)


class _Parser(argparse.ArgumentParser):
    def error(self, message):  # type: ignore[override]
        raise UsageError(f"{message}\n\n{self.format_help()}")


_USAGE = "%(prog)s [options] image_path ..."


def build_parser(surface: OptionSurface, config: Configuration, prog: str | None = None) -> argparse.ArgumentParser:
    """Return a parser whose actions populate ``config``."""

    parser = _Parser(
        prog=prog,
        usage=_USAGE,
        description=f"%(prog)s v{__version__}",
        formatter_class=argparse.RawTextHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("paths", nargs="*", metavar="image_path", help="Images or directories to optimize")

    general = parser.add_argument_group()
    general.add_argument(
        "-r", "-R", "--recursive",
        action=StoreConfig, config=config, key="recursive", nargs=0, const=True,
        help="Recursively scan directories for images",
    )
    general.add_argument(
        "--threads",
        action=StoreConfig, config=config, key="threads", type=integer, metavar="N",
        help="Number of threads (defaults to number of processors)",
    )
    general.add_argument(
        "--no-threads",
        action=StoreConfig, config=config, key="threads", nargs=0, const=False,
        help="Disable threading",
    )
    general.add_argument(
        "--nice",
        action=StoreConfig, config=config, key="nice", type=integer, metavar="N",
        help="Nice level (defaults to 10)",
    )
    general.add_argument(
        "--no-nice",
        action=StoreConfig, config=config, key="nice", nargs=0, const=False,
        help="Do not lower process priority",
    )

    disabling = parser.add_argument_group("Disabling workers")
    for spec in surface.disabling:
        disabling.add_argument(
            spec.flag,
            action=StoreConfig, config=config, key=spec.worker, nargs=0, const=False,
            help="\n".join(spec.help_lines).replace("%", "%%"),
        )

    worker_group = parser.add_argument_group("Worker options")
    for specs in surface.worker_options:
        for spec in specs:
            worker_group.add_argument(
                spec.flag,
                action=StoreWorkerOption, config=config, key=spec.worker, option=spec.option,
                type=spec.converter, metavar=spec.metavar,
                help="\n".join(spec.help_lines).replace("%", "%%"),
            )

    common = parser.add_argument_group("Common options")
    common.add_argument(
        "--base10",
        action=StoreConfig, config=config, key="base10", nargs=0, const=True,
        help="Use 1000 instead of 1024 as the size unit denominator",
    )
    common.add_argument(
        "-v", "--verbose",
        action=StoreConfig, config=config, key="verbose", nargs=0, const=True,
        help="Verbose output",
    )
    common.add_argument("-h", "--help", action="help", help="Show full help")
    common.add_argument("--version", action="version", version=__version__, help="Show version")
    return parser


def parse_options(
    argv: Sequence[str],
    descriptors: Sequence[WorkerDescriptor],
    prog: str | None = None,
) -> Tuple[Configuration, List[str]]:
    """Parse ``argv`` into a configuration mapping and the positional paths."""

    config: Configuration = {}
    parser = build_parser(build_surface(descriptors), config, prog=prog)
    namespace = parser.parse_intermixed_args(list(argv))
    return config, list(namespace.paths)


__all__ = [
    "FlagSpec",
    "OptionSurface",
    "OptionSurfaceError",
    "UsageError",
    "build_parser",
    "build_surface",
    "parse_options",
    "set_worker_option",
]
