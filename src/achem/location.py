"""Grid coordinates.

A location is an immutable value with equality and hashing. Each grid
topology gets its own variant; the square grid is the only one so far.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class SquareLocation:
    """Integer (x, y) cell on a square grid."""

    x: int
    y: int

    def __post_init__(self) -> None:
        for name in ("x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(
                    f"{name} must be an int, got {type(value).__name__} {value!r}"
                )

    def offset(self, dx: int, dy: int) -> SquareLocation:
        return SquareLocation(self.x + dx, self.y + dy)

    def __repr__(self) -> str:
        return f"({self.x},{self.y})"


Location: TypeAlias = SquareLocation
