"""Fixed-width human readable byte sizes for report columns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

SIZE_SYMBOLS = ("B", "K", "M", "G", "T", "P", "E", "Z", "Y")
PRECISION = 1
LENGTH = 4 + PRECISION + 1

EMPTY_SPACE = " " * LENGTH
NOT_COUNTED_SPACE = "!" * LENGTH

BINARY_DENOMINATOR = 1024
DECIMAL_DENOMINATOR = 1000


@dataclass(frozen=True)
class SpaceFormatter:
    """Render byte counts as ``LENGTH`` wide, right-aligned strings.

    The denominator is chosen once per formatter: 1024 by default, 1000 when
    ``base10`` is set.  ``False`` marks a size excluded from accounting, while
    ``0`` and ``None`` render as an empty column.
    """

    base10: bool = False

    @property
    def denominator(self) -> int:
        return DECIMAL_DENOMINATOR if self.base10 else BINARY_DENOMINATOR

    def space(self, size: Optional[Union[int, bool]]) -> str:
        if size is False:
            return NOT_COUNTED_SPACE
        if size is None or size == 0:
            return EMPTY_SPACE

        number: float = size
        degree = 0
        while abs(number) >= 1000 and degree < len(SIZE_SYMBOLS) - 1:
            number /= self.denominator
            degree += 1

        text = str(size) if degree == 0 else f"{number:.{PRECISION}f}"
        return f"{text}{SIZE_SYMBOLS[degree]}".rjust(LENGTH)

    def size_percent(self, src_size: int, dst_size: int) -> str:
        """Return ``"<percent>% <delta>"`` for a source/destination pair."""

        percent = 100 - 100.0 * dst_size / src_size if src_size else 0.0
        return "%5.2f%% %s" % (percent, self.space(src_size - dst_size))


__all__ = [
    "EMPTY_SPACE",
    "LENGTH",
    "NOT_COUNTED_SPACE",
    "SIZE_SYMBOLS",
    "SpaceFormatter",
]
