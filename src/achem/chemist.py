"""Chemist module: matching and applying reaction rules between neighbours."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from achem.atom import Atom
from achem.grid import SquareGrid
from achem.reaction import ReactionData


@dataclass(frozen=True)
class ReactionEvent:
    """A single successful reaction, with atoms ordered as in the rule."""

    rule: ReactionData
    first: Atom
    second: Atom


class Chemist:
    """Applies reaction rules to pairs of adjacent atoms.

    Candidate rules are the chemist's own table, followed by every rule
    some enzyme on the grid currently carries. Rules that are not
    spontaneous only fire when an enzyme holding that rule sits within
    ``enzyme_range`` of either reactant.
    """

    def __init__(
        self,
        rules: Iterable[ReactionData] = (),
        *,
        enzyme_range: int = 3,
    ) -> None:
        if enzyme_range < 1:
            raise ValueError(f"enzyme_range must be >= 1, got {enzyme_range}")
        self.rules: list[ReactionData] = list(rules)
        self.enzyme_range = enzyme_range

    def candidate_rules(self, grid: SquareGrid) -> list[ReactionData]:
        return self.rules + grid.catalyzed_rules()

    def is_catalyzed(
        self,
        rule: ReactionData,
        atom1: Atom,
        atom2: Atom,
        grid: SquareGrid,
    ) -> bool:
        for enzyme in grid.enzymes_for(rule):
            if (
                grid.distance(enzyme.location, atom1.location) <= self.enzyme_range
                or grid.distance(enzyme.location, atom2.location) <= self.enzyme_range
            ):
                return True
        return False

    def react(
        self,
        atom1: Atom,
        atom2: Atom,
        grid: SquareGrid,
    ) -> ReactionEvent | None:
        """Apply the first applicable rule to the pair, if any."""
        for rule in self.candidate_rules(grid):
            matched = rule.match(atom1, atom2)
            if matched is None:
                continue
            if not rule.spontaneous and not self.is_catalyzed(rule, atom1, atom2, grid):
                continue
            first, second = matched
            if rule.forms_bond and grid.will_cross(
                first.location, second.location, (first, second)
            ):
                continue

            first.state = rule.post_state1
            second.state = rule.post_state2
            if rule.forms_bond:
                grid.bond(first, second)
            elif rule.breaks_bond:
                grid.unbond(first, second)
            return ReactionEvent(rule, first, second)
        return None
