"""Square grid: occupancy, geometry queries, bonds and the enzyme index.

The grid is the only place that changes where an atom is. The occupancy
table is copy-on-write: every change builds a new dict and swaps it in
with a single assignment, so a renderer reading ``occupancy()`` from
another thread sees either the old or the new table, never a half-moved
atom.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from fractions import Fraction
from itertools import count
from types import MappingProxyType
from typing import Protocol

from achem.atom import Atom
from achem.location import Location, SquareLocation
from achem.reaction import ReactionData

# W, E, N, S, NW, SE, NE, SW
_NEIGHBOUR_OFFSETS = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (1, 1),
    (1, -1),
    (-1, 1),
)

MAX_BOND_LENGTH = 2


class _Vertical:
    """Slope of a segment with no horizontal extent."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "VERTICAL"


VERTICAL = _Vertical()


class Renderer(Protocol):
    """Read-only consumer notified once per tick."""

    def refresh(self, grid: SquareGrid) -> None: ...


class SquareGrid:
    """A size x size bounded grid of cells holding at most one atom each."""

    def __init__(
        self,
        size: int,
        *,
        enzyme_capacity: int = 8,
        renderer: Renderer | None = None,
    ) -> None:
        if size < 1:
            raise ValueError(f"size must be >= 1, got {size}")
        if enzyme_capacity < 1:
            raise ValueError(f"enzyme_capacity must be >= 1, got {enzyme_capacity}")
        self.size = size
        self.enzyme_capacity = enzyme_capacity
        self.renderer = renderer
        self._occupancy: dict[SquareLocation, Atom] = {}
        self._atoms: dict[int, Atom] = {}
        self._next_id = count()
        self._enzyme_index: dict[ReactionData, set[int]] = {}

    # ---------- Geometry ----------

    def is_on_grid(self, location: Location) -> bool:
        _check_location(location)
        return 0 <= location.x < self.size and 0 <= location.y < self.size

    def adjacent_locations(self, location: Location) -> list[SquareLocation]:
        """Moore neighbourhood of *location*, clipped to the grid."""
        _check_location(location)
        result = []
        for dx, dy in _NEIGHBOUR_OFFSETS:
            loc = location.offset(dx, dy)
            if self.is_on_grid(loc):
                result.append(loc)
        return result

    def adjacent_atoms(self, location: Location) -> list[Atom]:
        table = self._occupancy
        return [
            table[loc] for loc in self.adjacent_locations(location) if loc in table
        ]

    def distance(self, loc1: Location, loc2: Location) -> int:
        """Chebyshev distance: diagonal steps count as one."""
        _check_location(loc1)
        _check_location(loc2)
        return max(abs(loc1.x - loc2.x), abs(loc1.y - loc2.y))

    def crossed(
        self,
        a1: Location,
        a2: Location,
        b1: Location,
        b2: Location,
    ) -> bool:
        """Whether segment a1-a2 crosses segment b1-b2.

        Two segments cross when their extents interleave on both axes and
        their slopes differ. This is only accurate for short grid-aligned
        segments such as bonds.
        """
        for loc in (a1, a2, b1, b2):
            _check_location(loc)
        if not _ranges_overlap(a1.x, a2.x, b1.x, b2.x):
            return False
        if not _ranges_overlap(a1.y, a2.y, b1.y, b2.y):
            return False
        return _slope(a1, a2) != _slope(b1, b2)

    def will_cross(
        self,
        end1: Location,
        end2: Location,
        ignore: Iterable[Atom] = (),
    ) -> bool:
        """Whether a bond between end1 and end2 would cross a nearby bond.

        Only atoms adjacent to either end are examined. Bonds touching an
        atom in *ignore* are skipped.
        """
        ignored = {atom.atom_id for atom in ignore}
        seen: set[int] = set()
        for nearby in self.adjacent_atoms(end1) + self.adjacent_atoms(end2):
            if nearby.atom_id in ignored or nearby.atom_id in seen:
                continue
            seen.add(nearby.atom_id)
            for partner in self.bonded_atoms(nearby):
                if partner.atom_id in ignored:
                    continue
                if self.crossed(end1, end2, nearby.location, partner.location):
                    return True
        return False

    def newly_in_range(
        self,
        start: Location,
        end: Location,
        radius: int,
    ) -> list[SquareLocation]:
        """Cells that enter the square range of an enzyme moving start -> end.

        These are the leading column and/or row of the square of the given
        radius around *end*. A diagonal move shares one corner between the
        two edges; it is listed once.
        """
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        if self.distance(start, end) > 1:
            raise ValueError(f"expected a single-step move, got {start} -> {end}")
        dx = end.x - start.x
        dy = end.y - start.y

        cells: list[SquareLocation] = []
        if dx:
            x = end.x + dx * radius
            cells.extend(
                SquareLocation(x, end.y + k) for k in range(-radius, radius + 1)
            )
        if dy:
            y = end.y + dy * radius
            cells.extend(
                SquareLocation(end.x + k, y)
                for k in range(-radius, radius + 1)
                if not (dx and k == dx * radius)
            )
        return [loc for loc in cells if self.is_on_grid(loc)]

    # ---------- Occupancy ----------

    def atom_at(self, location: Location) -> Atom | None:
        _check_location(location)
        return self._occupancy.get(location)

    def occupancy(self) -> Mapping[SquareLocation, Atom]:
        """Read-only view of the current occupancy table."""
        return MappingProxyType(self._occupancy)

    def all_atoms(self) -> list[Atom]:
        """Atoms on the grid, in the order they were added."""
        return list(self._atoms.values())

    def get_atom(self, atom_id: int) -> Atom:
        try:
            return self._atoms[atom_id]
        except KeyError:
            raise KeyError(f"no atom with id {atom_id} on this grid") from None

    def __contains__(self, atom: object) -> bool:
        return (
            isinstance(atom, Atom)
            and atom.atom_id is not None
            and self._atoms.get(atom.atom_id) is atom
        )

    def __len__(self) -> int:
        return len(self._atoms)

    def add_atom(self, location: Location, atom: Atom) -> bool:
        """Place *atom* at *location*. Returns False if the cell is taken."""
        if not self.is_on_grid(location):
            raise ValueError(f"location {location} is off a grid of size {self.size}")
        if atom.atom_id is not None:
            raise ValueError(f"{atom!r} is already on a grid")
        rules = self._fit_to_capacity(atom.reactions) if atom.enzyme else None
        if location in self._occupancy:
            return False

        table = dict(self._occupancy)
        table[location] = atom
        atom.location = location
        atom.atom_id = next(self._next_id)
        self._occupancy = table
        self._atoms[atom.atom_id] = atom

        if rules is not None:
            atom.reactions = rules
            self._register(atom)
        return True

    def remove_atom(self, atom: Atom) -> None:
        """Take *atom* off the grid, dropping its bonds and enzyme entries."""
        if atom not in self:
            raise ValueError(f"{atom!r} is not on this grid")
        for partner in self.bonded_atoms(atom):
            self.unbond(atom, partner)
        self._unregister(atom)

        table = dict(self._occupancy)
        del table[atom.location]
        self._occupancy = table
        del self._atoms[atom.atom_id]
        atom.location = None
        atom.atom_id = None

    def move(self, atom: Atom, new_location: Location) -> bool:
        """Relocate *atom*. Returns False if another atom holds the cell."""
        if not self.is_on_grid(new_location):
            raise ValueError(f"location {new_location} is off the grid")
        if atom not in self:
            raise ValueError(f"{atom!r} is not on this grid")

        occupant = self._occupancy.get(new_location)
        if occupant is atom:
            return True
        if occupant is not None:
            return False

        table = dict(self._occupancy)
        del table[atom.location]
        table[new_location] = atom
        atom.location = new_location
        self._occupancy = table
        return True

    # ---------- Bonds ----------

    def bonded_atoms(self, atom: Atom) -> list[Atom]:
        return [self._atoms[atom_id] for atom_id in sorted(atom.bonds)]

    def bond(self, atom1: Atom, atom2: Atom) -> bool:
        """Bond two atoms. Returns False if already bonded or too far apart."""
        if atom1 is atom2:
            raise ValueError("an atom cannot bond to itself")
        if atom1 not in self or atom2 not in self:
            raise ValueError("both atoms must be on this grid")
        if atom1.is_bonded_to(atom2):
            return False
        if self.distance(atom1.location, atom2.location) > MAX_BOND_LENGTH:
            return False
        atom1.bonds.add(atom2.atom_id)
        atom2.bonds.add(atom1.atom_id)
        return True

    def unbond(self, atom1: Atom, atom2: Atom) -> bool:
        if not atom1.is_bonded_to(atom2):
            return False
        atom1.bonds.discard(atom2.atom_id)
        atom2.bonds.discard(atom1.atom_id)
        return True

    def bond_count(self) -> int:
        return sum(len(atom.bonds) for atom in self._atoms.values()) // 2

    # ---------- Enzyme index ----------

    def update_enzyme_index(
        self,
        atom: Atom,
        new_rules: Iterable[ReactionData | None],
    ) -> None:
        """Replace the rule table of *atom* and re-index it."""
        rules = self._fit_to_capacity(new_rules)
        self._unregister(atom)
        atom.reactions = rules
        if atom.enzyme and atom in self:
            self._register(atom)

    def enzymes_for(self, rule: ReactionData) -> list[Atom]:
        return [self._atoms[i] for i in sorted(self._enzyme_index.get(rule, ()))]

    def catalyzed_rules(self) -> list[ReactionData]:
        """Rules with at least one enzyme on the grid, oldest first."""
        return list(self._enzyme_index)

    def _fit_to_capacity(
        self,
        rules: Iterable[ReactionData | None],
    ) -> list[ReactionData | None]:
        active = [rule for rule in rules if rule is not None]
        if len(active) > self.enzyme_capacity:
            raise ValueError(
                f"{len(active)} rules exceed enzyme capacity {self.enzyme_capacity}"
            )
        return active + [None] * (self.enzyme_capacity - len(active))

    def _register(self, atom: Atom) -> None:
        for rule in atom.active_reactions:
            self._enzyme_index.setdefault(rule, set()).add(atom.atom_id)

    def _unregister(self, atom: Atom) -> None:
        for rule in atom.active_reactions:
            holders = self._enzyme_index.get(rule)
            if holders is None:
                continue
            holders.discard(atom.atom_id)
            if not holders:
                del self._enzyme_index[rule]

    # ---------- Rendering ----------

    def render(self) -> None:
        if self.renderer is not None:
            self.renderer.refresh(self)


def _check_location(location: object) -> None:
    if not isinstance(location, SquareLocation):
        raise TypeError(
            f"SquareGrid requires SquareLocation, got {type(location).__name__}"
        )


def _ranges_overlap(a1: int, a2: int, b1: int, b2: int) -> bool:
    lo_a, hi_a = sorted((a1, a2))
    lo_b, hi_b = sorted((b1, b2))
    return lo_b < hi_a and lo_a < hi_b


def _slope(start: SquareLocation, end: SquareLocation) -> Fraction | _Vertical:
    dx = end.x - start.x
    if dx == 0:
        return VERTICAL
    return Fraction(end.y - start.y, dx)
