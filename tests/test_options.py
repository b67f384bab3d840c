from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping

import pytest

from orchestrator.options import (
    HELP_WIDTH,
    OptionSurfaceError,
    UsageError,
    build_surface,
    parse_options,
    set_worker_option,
)
from workers import DESCRIPTORS, OptionDefinition, OptionType, WorkerDescriptor


def _noop(options: Mapping[str, Any], src: Path, dst: Path) -> List[str]:
    return ["true"]


FOO = WorkerDescriptor(
    binary="fooworker",
    image_formats=("png",),
    command=_noop,
    option_definitions=(
        OptionDefinition("alpha", OptionType.INTEGER, 0, "First knob"),
        OptionDefinition("beta", OptionType.INTEGER, 0, "Second knob"),
        OptionDefinition("strip_all", OptionType.BOOLEAN, False, "Strip everything"),
        OptionDefinition("mode", OptionType.TRI_STATE, None, "Keep, force or drop"),
        OptionDefinition("chunks", OptionType.LIST, ["alla"], "Chunks to remove"),
    ),
)


def _parse(*argv: str):
    return parse_options(list(argv), [FOO])


def test_repeated_worker_options_merge_into_one_mapping() -> None:
    config, _ = _parse("--fooworker-alpha", "1", "--fooworker-beta", "2")
    assert config == {"fooworker": {"alpha": 1, "beta": 2}}


def test_option_flag_keeps_original_identifier() -> None:
    config, _ = _parse("--fooworker-strip-all", "yes")
    assert config == {"fooworker": {"strip_all": True}}


def test_disabling_flag_stores_false() -> None:
    config, _ = _parse("--no-fooworker")
    assert config == {"fooworker": False}


def test_worker_option_after_disable_replaces_boolean_with_mapping() -> None:
    config, _ = _parse("--no-fooworker", "--fooworker-alpha", "3")
    assert config == {"fooworker": {"alpha": 3}}


def test_absent_worker_is_not_configured() -> None:
    config, paths = _parse("a.png")
    assert config == {}
    assert paths == ["a.png"]


def test_tri_state_and_list_values() -> None:
    config, _ = _parse("--fooworker-mode", "nil", "--fooworker-chunks", "gAMA,tEXt")
    assert config == {"fooworker": {"mode": None, "chunks": ["gAMA", "tEXt"]}}


def test_global_flags_last_write_wins() -> None:
    config, _ = _parse("--threads", "2", "--no-threads", "--nice", "5", "--nice", "7", "-R", "-v")
    assert config == {"threads": False, "nice": 7, "recursive": True, "verbose": True}


def test_paths_may_be_mixed_with_flags() -> None:
    config, paths = _parse("a.png", "--threads", "4", "b.png", "--base10")
    assert paths == ["a.png", "b.png"]
    assert config == {"threads": 4, "base10": True}


def test_malformed_integer_aborts_with_help() -> None:
    with pytest.raises(UsageError) as excinfo:
        _parse("--fooworker-alpha", "many")
    message = str(excinfo.value)
    assert "--fooworker-alpha" in message
    assert "Worker options" in message


def test_malformed_boolean_aborts() -> None:
    with pytest.raises(UsageError):
        _parse("--fooworker-strip-all", "perhaps")


def test_unknown_flag_aborts() -> None:
    with pytest.raises(UsageError):
        _parse("--bogus", "a.png")


def test_unknown_option_type_fails_at_build_time() -> None:
    broken = WorkerDescriptor(
        binary="broken",
        image_formats=("png",),
        command=_noop,
        option_definitions=(OptionDefinition("ratio", "float", 0.5, "Unsupported"),),
    )
    with pytest.raises(OptionSurfaceError):
        build_surface([broken])


def test_surface_flags_and_placeholders() -> None:
    surface = build_surface([FOO])
    assert [spec.flag for spec in surface.disabling] == ["--no-fooworker"]
    specs = {spec.flag: spec for spec in surface.worker_options[0]}
    assert specs["--fooworker-alpha"].metavar == "N"
    assert specs["--fooworker-strip-all"].metavar == "B"
    assert specs["--fooworker-mode"].metavar == "B"
    assert specs["--fooworker-chunks"].metavar == "a,b,c"
    assert specs["--fooworker-chunks"].help_lines == ("Chunks to remove (defaults to alla)",)
    assert specs["--fooworker-mode"].help_lines == ("Keep, force or drop (defaults to nil)",)


def test_help_lines_are_wrapped() -> None:
    surface = build_surface(DESCRIPTORS)
    lines = [line for specs in surface.worker_options for spec in specs for line in spec.help_lines]
    assert all(len(line) <= HELP_WIDTH for line in lines)
    chunks = next(spec for spec in surface.worker_options[0] if spec.option == "chunks")
    assert len(chunks.help_lines) > 1
    assert " ".join(chunks.help_lines).endswith("(defaults to alla)")


def test_catalog_exposes_every_worker() -> None:
    surface = build_surface(DESCRIPTORS)
    assert [spec.flag for spec in surface.disabling] == [
        "--no-pngcrush",
        "--no-optipng",
        "--no-pngout",
        "--no-advpng",
        "--no-jpegoptim",
        "--no-jpegtran",
        "--no-gifsicle",
        "--no-svgo",
    ]
    config, _ = parse_options(["--optipng-level", "2", "--jpegoptim-max-quality", "80"], DESCRIPTORS)
    assert config == {"optipng": {"level": 2}, "jpegoptim": {"max_quality": 80}}


def test_set_worker_option_merges() -> None:
    config: dict = {"fooworker": True}
    set_worker_option(config, "fooworker", "alpha", 1)
    set_worker_option(config, "fooworker", "beta", 2)
    assert config == {"fooworker": {"alpha": 1, "beta": 2}}


def test_help_exits_cleanly(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _parse("--help")
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "--no-fooworker" in out
    assert "--fooworker-alpha N" in out
