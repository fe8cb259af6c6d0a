"""Tests for mutation.py - rule insertion and operator selection."""

import random

import pytest

from achem.atom import Atom, AtomType
from achem.grid import SquareGrid
from achem.location import SquareLocation
from achem.mutation import InsertionMutation, choose_mutation, mutate_enzyme
from achem.reaction import ReactionData

RULE = ReactionData.parse("a1 + b0 -> a2b3")
OTHER = ReactionData.parse("c0 + d0 -> c1 + d1")


class StubRng:
    """First element for every choice, scripted floats, fixed Gaussian."""

    def __init__(self, randoms, gauss=3.7):
        self._randoms = list(randoms)
        self._gauss = gauss

    def choice(self, seq):
        return seq[0]

    def choices(self, population, weights=None, k=1):
        return [population[0]] * k

    def random(self):
        return self._randoms.pop(0)

    def gauss(self, mu, sigma):
        return self._gauss


def _enzyme_on_grid(rules, capacity=4):
    grid = SquareGrid(5, enzyme_capacity=capacity)
    atom = Atom(AtomType.E, enzyme=True, reactions=list(rules))
    grid.add_atom(SquareLocation(2, 2), atom)
    return grid, atom


class TestValidity:
    def test_needs_at_least_one_rule(self):
        assert not InsertionMutation(4).is_valid_mutation([None, None, None, None])

    def test_needs_a_free_slot(self):
        assert not InsertionMutation(2).is_valid_mutation([RULE, OTHER])

    def test_partial_table_is_valid(self):
        assert InsertionMutation(4).is_valid_mutation([RULE, None, None, None])

    def test_weight(self):
        assert InsertionMutation(4).weight() == 1
        assert InsertionMutation(4, weight=5).weight() == 5


class TestInsertion:
    def test_splits_second_side_through_intermediate_state(self):
        grid, atom = _enzyme_on_grid([RULE])
        # catalyst side 1, split side 2, pre-bonded, not post-bonded
        rng = StubRng([0.2, 0.3, 0.1, 0.9])

        result = InsertionMutation(4).mutate(atom.reactions, rng, atom, grid)

        part1 = ReactionData(
            AtomType.A, AtomType.B, 1, 0, 2, 6, pre_bonded=False, post_bonded=True
        )
        part2 = ReactionData(
            AtomType.B, AtomType.Y, 6, 2, 3, 2, pre_bonded=True, post_bonded=False
        )
        assert result == [part1, part2, None, None]

    def test_splits_first_side(self):
        grid, atom = _enzyme_on_grid([RULE])
        # catalyst side 2, split side 1, unbonded before and after
        rng = StubRng([0.8, 0.7, 0.9, 0.9], gauss=-2.2)

        part1, part2, *rest = InsertionMutation(4).mutate(
            atom.reactions, rng, atom, grid
        )

        assert part1.post_state1 == 0
        assert part1.post_state2 == 3
        assert (part2.type1, part2.type2) == (AtomType.A, AtomType.Y)
        assert (part2.pre_state1, part2.post_state1) == (0, 2)
        assert part2.pre_state2 == part2.post_state2 == 3
        assert not part2.spontaneous
        assert rest == [None, None]

    def test_split_wildcard_side_accepts_any_catalyst_type(self):
        rule = ReactionData.parse("x2 + y0 -> x3y1")
        grid, atom = _enzyme_on_grid([rule])
        # catalyst side 1, split side 2, pre-bonded, not post-bonded
        rng = StubRng([0.2, 0.3, 0.1, 0.9])

        _, part2, *_ = InsertionMutation(4).mutate(atom.reactions, rng, atom, grid)

        assert (part2.type1, part2.type2) == (AtomType.Y, AtomType.X)
        split = Atom(AtomType.A, state=4)
        catalyst = Atom(AtomType.C, state=3)
        grid.add_atom(SquareLocation(0, 0), split)
        grid.add_atom(SquareLocation(1, 0), catalyst)
        grid.bond(split, catalyst)
        assert part2.match(split, catalyst) == (split, catalyst)
        assert part2.match(catalyst, split) == (split, catalyst)

    def test_does_not_touch_input(self):
        grid, atom = _enzyme_on_grid([RULE, OTHER])
        before = list(atom.reactions)
        InsertionMutation(4).mutate(atom.reactions, random.Random(0), atom, grid)
        assert atom.reactions == before

    def test_invalid_table_returned_unchanged(self):
        grid, atom = _enzyme_on_grid([RULE, OTHER], capacity=2)
        rng = random.Random(0)
        result = InsertionMutation(2).mutate(atom.reactions, rng, atom, grid)
        assert result == [RULE, OTHER]

    def test_over_capacity_input_fails_fast(self):
        grid, atom = _enzyme_on_grid([RULE])
        with pytest.raises(ValueError, match="exceed capacity"):
            InsertionMutation(1).mutate([RULE, OTHER], random.Random(0), atom, grid)

    def test_never_exceeds_capacity(self):
        capacity = 5
        grid, atom = _enzyme_on_grid([RULE, OTHER], capacity=capacity)
        mutation = InsertionMutation(capacity)
        rng = random.Random(11)
        rules = atom.reactions
        for _ in range(20):
            rules = mutation.mutate(rules, rng, atom, grid)
            assert len(rules) == capacity
            assert sum(rule is not None for rule in rules) <= capacity
        assert sum(rule is not None for rule in rules) == capacity


class TestSelection:
    def test_no_valid_operator(self):
        full = [RULE, OTHER]
        assert choose_mutation([InsertionMutation(2)], full, random.Random(0)) is None

    def test_zero_weight_is_never_chosen(self):
        silent = InsertionMutation(4, weight=0)
        assert choose_mutation([silent], [RULE], random.Random(0)) is None

    def test_picks_valid_operator(self):
        invalid = InsertionMutation(1)
        valid = InsertionMutation(4, weight=3)
        for seed in range(10):
            chosen = choose_mutation([invalid, valid], [RULE], random.Random(seed))
            assert chosen is valid


class TestMutateEnzyme:
    def test_reindexes_enzyme(self):
        grid, atom = _enzyme_on_grid([RULE])
        mutation = InsertionMutation(4)
        rng = StubRng([0.2, 0.7, 0.1, 0.9])

        applied = mutate_enzyme(atom, grid, rng, [mutation])

        assert applied is mutation
        assert grid.enzymes_for(RULE) == []
        for rule in atom.active_reactions:
            assert grid.enzymes_for(rule) == [atom]
        assert len(atom.active_reactions) == 2

    def test_returns_none_when_table_full(self):
        grid, atom = _enzyme_on_grid([RULE, OTHER], capacity=2)
        full = [InsertionMutation(2)]
        assert mutate_enzyme(atom, grid, random.Random(0), full) is None
        assert atom.reactions == [RULE, OTHER]

    def test_rejects_non_enzyme(self):
        grid = SquareGrid(5)
        atom = Atom(AtomType.A)
        grid.add_atom(SquareLocation(0, 0), atom)
        with pytest.raises(ValueError, match="not an enzyme"):
            mutate_enzyme(atom, grid, random.Random(0), [InsertionMutation(4)])
