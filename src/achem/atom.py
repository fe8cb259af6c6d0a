"""Atoms: typed particles with integer state and bonds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from achem.location import Location

if TYPE_CHECKING:
    from achem.reaction import ReactionData


class AtomType(Enum):
    """Atom type tag with its rendering color.

    ``X`` and ``Y`` are wildcards. They only appear in reaction rules and
    never label an atom on the grid.
    """

    A = ("a", (220, 60, 60))
    B = ("b", (60, 160, 60))
    C = ("c", (60, 90, 220))
    D = ("d", (220, 180, 40))
    E = ("e", (160, 60, 200))
    F = ("f", (40, 190, 190))
    X = ("x", None)
    Y = ("y", None)

    def __init__(self, symbol: str, color: tuple[int, int, int] | None) -> None:
        self.symbol = symbol
        self.color = color

    @property
    def is_wildcard(self) -> bool:
        return self.color is None

    @classmethod
    def concrete(cls) -> tuple[AtomType, ...]:
        return tuple(t for t in cls if not t.is_wildcard)

    @classmethod
    def from_symbol(cls, symbol: str) -> AtomType:
        for t in cls:
            if t.symbol == symbol.lower():
                return t
        raise ValueError(f"Unknown atom type symbol {symbol!r}")


@dataclass(eq=False)
class Atom:
    """A particle occupying one grid cell.

    Bonds are stored as the integer handles (``atom_id``) of the partner
    atoms. The grid hands out the handle when the atom is added and
    resolves handles back to atoms. ``location`` is owned by the grid and
    is only set through ``SquareGrid.add_atom`` and ``SquareGrid.move``.
    """

    type: AtomType
    state: int = 0
    enzyme: bool = False
    reactions: list[ReactionData | None] = field(default_factory=list)
    location: Location | None = field(default=None, init=False)
    bonds: set[int] = field(default_factory=set, init=False)
    atom_id: int | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.type.is_wildcard:
            raise ValueError(f"Atom cannot have wildcard type {self.type.name}")

    def is_bonded_to(self, other: Atom) -> bool:
        return other.atom_id in self.bonds

    @property
    def active_reactions(self) -> list[ReactionData]:
        return [r for r in self.reactions if r is not None]

    def __repr__(self) -> str:
        tag = "*" if self.enzyme else ""
        return f"Atom({self.type.symbol}{self.state}{tag}@{self.location})"
