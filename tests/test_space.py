from __future__ import annotations

from orchestrator.space import EMPTY_SPACE, LENGTH, NOT_COUNTED_SPACE, SpaceFormatter


def test_zero_and_none_render_blank() -> None:
    formatter = SpaceFormatter()
    assert formatter.space(0) == EMPTY_SPACE
    assert formatter.space(None) == EMPTY_SPACE
    assert len(EMPTY_SPACE) == LENGTH == 6


def test_false_renders_not_counted_marker() -> None:
    assert SpaceFormatter().space(False) == NOT_COUNTED_SPACE == "!!!!!!"
    assert len(SpaceFormatter().space(1234)) == len(NOT_COUNTED_SPACE)


def test_small_sizes_stay_in_bytes() -> None:
    formatter = SpaceFormatter()
    assert formatter.space(1) == "    1B"
    assert formatter.space(999) == "  999B"


def test_binary_scaling() -> None:
    formatter = SpaceFormatter()
    assert formatter.space(1000) == "  1.0K"
    assert formatter.space(1536) == "  1.5K"
    assert formatter.space(1_048_576) == "  1.0M"
    assert formatter.space(1024**3) == "  1.0G"


def test_decimal_scaling() -> None:
    formatter = SpaceFormatter(base10=True)
    assert formatter.denominator == 1000
    assert formatter.space(1_000_000) == "  1.0M"
    assert formatter.space(1_500) == "  1.5K"


def test_sign_is_preserved() -> None:
    formatter = SpaceFormatter()
    assert formatter.space(-10) == "  -10B"
    assert formatter.space(-1536) == " -1.5K"


def test_largest_unit_is_not_exceeded() -> None:
    formatter = SpaceFormatter(base10=True)
    assert formatter.space(10**26) == "100.0Y"
    assert formatter.space(10**27) == "1000.0Y"


def test_size_percent() -> None:
    formatter = SpaceFormatter()
    assert formatter.size_percent(1000, 800) == "20.00%   200B"
    assert formatter.size_percent(3000, 2600) == "13.33%   400B"
    assert formatter.size_percent(100, 100) == " 0.00% " + EMPTY_SPACE


def test_size_percent_of_empty_source() -> None:
    assert SpaceFormatter().size_percent(0, 0) == " 0.00% " + EMPTY_SPACE
