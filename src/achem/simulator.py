"""Tick scheduler: reaction replay followed by random movement."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from achem.atom import Atom
from achem.chemist import Chemist
from achem.config import SimulationConfig
from achem.grid import MAX_BOND_LENGTH, SquareGrid
from achem.location import Location

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickReport:
    """What happened during one tick."""

    tick: int
    replayed: int
    moves_attempted: int
    moves_accepted: int
    reactions: int


class Simulator:
    """Advances a grid one tick at a time.

    ``updated_locations`` holds the cells to re-check for reactions on
    the next tick. Reactions found during a tick only add to it; they are
    never replayed within the same tick.
    """

    def __init__(
        self,
        grid: SquareGrid,
        config: SimulationConfig | None = None,
        rng: random.Random | None = None,
        chemist: Chemist | None = None,
    ) -> None:
        self.grid = grid
        self.config = config if config is not None else SimulationConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed_id)
        self.chemist = (
            chemist
            if chemist is not None
            else Chemist(enzyme_range=self.config.enzyme_range)
        )
        self.updated_locations: list[Location] = []
        self.tick_count = 0

    def tick(self) -> TickReport:
        pending, self.updated_locations = self.updated_locations, []
        reactions = 0
        for location in pending:
            reactions += self.react_around(location)

        attempted = 0
        accepted = 0
        for atom in self.grid.all_atoms():
            if self.rng.random() >= self.config.movement_chance:
                continue
            attempted += 1
            if self.try_move(atom):
                accepted += 1
                reactions += self.react_around(atom.location)

        self.grid.render()
        self.tick_count += 1
        report = TickReport(
            tick=self.tick_count,
            replayed=len(pending),
            moves_attempted=attempted,
            moves_accepted=accepted,
            reactions=reactions,
        )
        logger.debug("%s", report)
        return report

    def try_move(self, atom: Atom) -> bool:
        """Move *atom* to a random neighbouring cell if nothing forbids it."""
        nearby = self.grid.adjacent_locations(atom.location)
        if not nearby:
            return False
        new_location = self.rng.choice(nearby)

        if self.grid.atom_at(new_location) is not None:
            return False
        if self.will_stretch_bonds(atom, new_location):
            return False
        if self.will_cross_bonds(atom, new_location):
            return False

        # Must run before the move, while the old position is still known.
        if atom.enzyme:
            self.update_reactions(atom.location, new_location)
        return self.grid.move(atom, new_location)

    def update_reactions(self, start: Location, end: Location) -> None:
        """Queue the cells an enzyme moving start -> end newly reaches."""
        self.updated_locations.extend(
            self.grid.newly_in_range(start, end, self.config.enzyme_range)
        )

    def will_stretch_bonds(self, atom: Atom, new_location: Location) -> bool:
        return any(
            self.grid.distance(new_location, partner.location) > MAX_BOND_LENGTH
            for partner in self.grid.bonded_atoms(atom)
        )

    def will_cross_bonds(self, atom: Atom, new_location: Location) -> bool:
        return any(
            self.grid.will_cross(new_location, partner.location, (atom, partner))
            for partner in self.grid.bonded_atoms(atom)
        )

    def react_around(self, center: Location) -> int:
        """Try reactions between the atom at *center* and each neighbour.

        Returns the number of reactions. Each one queues the neighbour and
        the centre for the next tick.
        """
        central_atom = self.grid.atom_at(center)
        if central_atom is None:
            return 0

        count = 0
        for location in self.grid.adjacent_locations(center):
            atom = self.grid.atom_at(location)
            if atom is None:
                continue
            if self.chemist.react(atom, central_atom, self.grid) is not None:
                self.updated_locations.append(location)
                self.updated_locations.append(center)
                count += 1
        return count
