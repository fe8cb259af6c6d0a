"""Mutation operators over an enzyme's rule table.

Each operator is a strategy object with ``mutate``, ``weight`` and
``is_valid_mutation``. An evolutionary driver picks among the valid
operators in proportion to their weights.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from typing import Protocol, TypeAlias

from achem.atom import Atom, AtomType
from achem.grid import SquareGrid
from achem.reaction import MutableReactionData, ReactionData

logger = logging.getLogger(__name__)

RuleTable: TypeAlias = Sequence[ReactionData | None]


class Mutation(Protocol):
    def mutate(
        self,
        rules: RuleTable,
        rng: random.Random,
        atom: Atom,
        grid: SquareGrid,
    ) -> list[ReactionData | None]: ...

    def weight(self) -> int: ...

    def is_valid_mutation(self, rules: RuleTable) -> bool: ...


class InsertionMutation:
    """Split one rule into a two-step, enzyme-catalysed pathway.

    One side of the chosen rule is diverted to an intermediate state
    (its post-state plus a Gaussian offset). A second rule then carries
    that side from the intermediate state to the original post-state
    when it meets any atom in the state produced by another rule of the
    table. The catalyst side is the wildcard ``y``, or ``x`` when the
    split side is itself ``y``. The table grows by one rule.
    """

    def __init__(self, capacity: int, *, sigma: float = 5.0, weight: int = 1) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if weight < 0:
            raise ValueError(f"weight must be non-negative, got {weight}")
        self.capacity = capacity
        self.sigma = sigma
        self._weight = weight

    def weight(self) -> int:
        return self._weight

    def is_valid_mutation(self, rules: RuleTable) -> bool:
        active = sum(1 for rule in rules if rule is not None)
        return 0 < active < self.capacity

    def mutate(
        self,
        rules: RuleTable,
        rng: random.Random,
        atom: Atom,
        grid: SquareGrid,
    ) -> list[ReactionData | None]:
        reactions = [rule for rule in rules if rule is not None]
        if len(reactions) > self.capacity:
            raise ValueError(
                f"{len(reactions)} rules exceed capacity {self.capacity}"
            )
        if not self.is_valid_mutation(reactions):
            return self._pad(reactions)

        to_split = rng.choice(reactions)
        catalyst = rng.choice(reactions)
        catalyst_state = (
            catalyst.post_state1 if rng.random() < 0.5 else catalyst.post_state2
        )
        offset = int(rng.gauss(0.0, self.sigma))
        modify_second = rng.random() < 0.5

        part1 = MutableReactionData.from_reaction(to_split)
        if modify_second:
            part1.post_state2 += offset
            split_type, final_state = to_split.type2, to_split.post_state2
        else:
            part1.post_state1 += offset
            split_type, final_state = to_split.type1, to_split.post_state1
        # distinct wildcards, so the catalyst may be any type
        catalyst_type = AtomType.X if split_type is AtomType.Y else AtomType.Y
        part2 = ReactionData(
            split_type,
            catalyst_type,
            final_state + offset,
            catalyst_state,
            final_state,
            catalyst_state,
            pre_bonded=rng.random() < 0.5,
            post_bonded=rng.random() < 0.5,
            spontaneous=False,
        )

        idx = reactions.index(to_split)
        reactions[idx : idx + 1] = [part1.freeze(), part2]
        logger.debug(
            "atom %s: split %s into %s and %s", atom, to_split, reactions[idx], part2
        )
        return self._pad(reactions)

    def _pad(self, reactions: list[ReactionData]) -> list[ReactionData | None]:
        if len(reactions) > self.capacity:
            raise ValueError(
                f"mutation produced {len(reactions)} rules, capacity is {self.capacity}"
            )
        return reactions + [None] * (self.capacity - len(reactions))


def choose_mutation(
    mutations: Sequence[Mutation],
    rules: RuleTable,
    rng: random.Random,
) -> Mutation | None:
    """Weighted choice among the operators applicable to *rules*."""
    candidates = [m for m in mutations if m.weight() > 0 and m.is_valid_mutation(rules)]
    if not candidates:
        return None
    return rng.choices(candidates, weights=[m.weight() for m in candidates], k=1)[0]


def mutate_enzyme(
    atom: Atom,
    grid: SquareGrid,
    rng: random.Random,
    mutations: Sequence[Mutation],
) -> Mutation | None:
    """Apply one randomly chosen mutation to an enzyme and re-index it."""
    if not atom.enzyme:
        raise ValueError(f"{atom!r} is not an enzyme")
    mutation = choose_mutation(mutations, atom.reactions, rng)
    if mutation is None:
        return None
    grid.update_enzyme_index(atom, mutation.mutate(atom.reactions, rng, atom, grid))
    return mutation
