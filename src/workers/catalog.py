"""Descriptors for the supported optimizer binaries, in run order."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Tuple

from .descriptor import OptionDefinition, OptionType, WorkerDescriptor

_STRIP_MARKERS = ("all", "comments", "exif", "iptc", "icc")


def _pngcrush(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    args = ["pngcrush", "-reduce", "-cc", "-q"]
    for chunk in options["chunks"]:
        args.extend(["-rem", str(chunk)])
    if options["fix"]:
        args.append("-fix")
    if options["brute"]:
        args.append("-brute")
    args.extend([str(src), str(dst)])
    return args


def _optipng(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    args = ["optipng", f"-o{options['level']}", "-quiet"]
    # nil keeps whatever interlacing the source has
    if options["interlace"] is not None:
        args.append("-i1" if options["interlace"] else "-i0")
    args.extend(["--", str(dst)])
    return args


def _pngout(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    return [
        "pngout",
        "-k1" if options["copy_chunks"] else "-k0",
        f"-s{options['strategy']}",
        "-q",
        "-y",
        str(src),
        str(dst),
    ]


def _advpng(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    return ["advpng", "-z", f"-{options['level']}", "-q", "--", str(dst)]


def _jpegoptim(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    args = ["jpegoptim", "-q"]
    for marker in options["strip"]:
        args.append(f"--strip-{marker}")
    if options["max_quality"] < 100:
        args.append(f"-m{options['max_quality']}")
    args.extend(["--", str(dst)])
    return args


def _jpegtran(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    args = ["jpegtran", "-optimize", "-copy", "all" if options["copy_chunks"] else "none"]
    if options["progressive"]:
        args.append("-progressive")
    args.extend(["-outfile", str(dst), str(src)])
    return args


def _gifsicle(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    return [
        "gifsicle",
        "--careful",
        "-O3",
        "--interlace" if options["interlace"] else "--no-interlace",
        "-o",
        str(dst),
        str(src),
    ]


def _svgo(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    args = ["svgo", "--input", str(src), "--output", str(dst)]
    args.extend(f"--disable={plugin}" for plugin in options["disable_plugins"])
    args.extend(f"--enable={plugin}" for plugin in options["enable_plugins"])
    return args


DESCRIPTORS: Tuple[WorkerDescriptor, ...] = (
    WorkerDescriptor(
        binary="pngcrush",
        image_formats=("png",),
        command=_pngcrush,
        option_definitions=(
            OptionDefinition("chunks", OptionType.LIST, ["alla"], "List of chunks to remove or 'alla' - all except tRNS/transparency or 'allb' - all except tRNS and gAMA/gamma"),
            OptionDefinition("fix", OptionType.BOOLEAN, False, "Fix otherwise fatal conditions such as bad CRCs"),
            OptionDefinition("brute", OptionType.BOOLEAN, False, "Brute force try all methods, very time-consuming and generally not worthwhile"),
        ),
    ),
    WorkerDescriptor(
        binary="optipng",
        image_formats=("png",),
        command=_optipng,
        in_place=True,
        option_definitions=(
            OptionDefinition("level", OptionType.INTEGER, 6, "Optimization level preset 0 is least, 7 is best", choices=range(0, 8)),
            OptionDefinition("interlace", OptionType.TRI_STATE, False, "Interlace, true - interlace on, false - interlace off, nil - as is in original image"),
        ),
    ),
    WorkerDescriptor(
        binary="pngout",
        image_formats=("png",),
        command=_pngout,
        option_definitions=(
            OptionDefinition("copy_chunks", OptionType.BOOLEAN, False, "Copy optional chunks"),
            OptionDefinition("strategy", OptionType.INTEGER, 0, "Strategy: 0 - xtreme, 1 - intense, 2 - longest Match, 3 - huffman Only, 4 - uncompressed", choices=range(0, 5)),
        ),
    ),
    WorkerDescriptor(
        binary="advpng",
        image_formats=("png",),
        command=_advpng,
        in_place=True,
        option_definitions=(
            OptionDefinition("level", OptionType.INTEGER, 4, "Compression level: 1 - fast, 2 - normal, 3 - extra, 4 - extreme", choices=range(1, 5)),
        ),
    ),
    WorkerDescriptor(
        binary="jpegoptim",
        image_formats=("jpeg",),
        command=_jpegoptim,
        in_place=True,
        option_definitions=(
            OptionDefinition("strip", OptionType.LIST, ["all"], "List of extra markers to strip: comments, exif, iptc, icc or all", choices=_STRIP_MARKERS),
            OptionDefinition("max_quality", OptionType.INTEGER, 100, "Maximum image quality factor 0..100", choices=range(0, 101)),
        ),
    ),
    WorkerDescriptor(
        binary="jpegtran",
        image_formats=("jpeg",),
        command=_jpegtran,
        option_definitions=(
            OptionDefinition("copy_chunks", OptionType.BOOLEAN, False, "Copy all chunks"),
            OptionDefinition("progressive", OptionType.BOOLEAN, True, "Create progressive JPEG file"),
        ),
    ),
    WorkerDescriptor(
        binary="gifsicle",
        image_formats=("gif",),
        command=_gifsicle,
        option_definitions=(
            OptionDefinition("interlace", OptionType.BOOLEAN, False, "Turn interlacing on"),
        ),
    ),
    WorkerDescriptor(
        binary="svgo",
        image_formats=("svg",),
        command=_svgo,
        option_definitions=(
            OptionDefinition("disable_plugins", OptionType.LIST, [], "List of plugins to disable"),
            OptionDefinition("enable_plugins", OptionType.LIST, [], "List of plugins to enable"),
        ),
    ),
)

__all__ = ["DESCRIPTORS"]
