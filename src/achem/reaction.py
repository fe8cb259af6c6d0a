"""Reaction rules.

A rule is written in the usual artificial-chemistry notation, e.g.
``a1 + b0 -> a2b3``: an unbonded ``a`` in state 1 next to a ``b`` in
state 0 becomes a bonded pair in states 2 and 3. Omitting the ``+``
means the pair must be (or ends up) bonded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from achem.atom import AtomType

if TYPE_CHECKING:
    from achem.atom import Atom

_SIDE = r"([a-fxy])(-?\d+)"
_RULE_RE = re.compile(
    rf"^\s*{_SIDE}\s*(\+?)\s*{_SIDE}\s*->\s*{_SIDE}\s*(\+?)\s*{_SIDE}\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ReactionData:
    """Immutable reaction rule between two adjacent atoms."""

    type1: AtomType
    type2: AtomType
    pre_state1: int
    pre_state2: int
    post_state1: int
    post_state2: int
    pre_bonded: bool = False
    post_bonded: bool = False
    spontaneous: bool = False  # False = needs an enzyme in range

    @classmethod
    def parse(cls, text: str, *, spontaneous: bool = False) -> ReactionData:
        m = _RULE_RE.match(text)
        if m is None:
            raise ValueError(f"Cannot parse reaction {text!r}")
        t1, s1, pre_plus, t2, s2, post_t1, p1, post_plus, post_t2, p2 = m.groups()
        if (post_t1.lower(), post_t2.lower()) != (t1.lower(), t2.lower()):
            raise ValueError(f"Reaction cannot change atom types: {text!r}")
        return cls(
            AtomType.from_symbol(t1),
            AtomType.from_symbol(t2),
            int(s1),
            int(s2),
            int(p1),
            int(p2),
            pre_bonded=not pre_plus,
            post_bonded=not post_plus,
            spontaneous=spontaneous,
        )

    @property
    def forms_bond(self) -> bool:
        return self.post_bonded and not self.pre_bonded

    @property
    def breaks_bond(self) -> bool:
        return self.pre_bonded and not self.post_bonded

    def match(self, first: Atom, second: Atom) -> tuple[Atom, Atom] | None:
        """Return the atoms ordered as (side 1, side 2), or None.

        Both orientations are tried, first then second.
        """
        if first.is_bonded_to(second) != self.pre_bonded:
            return None
        if self._matches_sides(first, second):
            return first, second
        if self._matches_sides(second, first):
            return second, first
        return None

    def _matches_sides(self, one: Atom, two: Atom) -> bool:
        return (
            one.state == self.pre_state1
            and two.state == self.pre_state2
            and types_match(self.type1, self.type2, one.type, two.type)
        )

    def __str__(self) -> str:
        pre = "" if self.pre_bonded else " + "
        post = "" if self.post_bonded else " + "
        a, b = self.type1.symbol, self.type2.symbol
        return (
            f"{a}{self.pre_state1}{pre}{b}{self.pre_state2} -> "
            f"{a}{self.post_state1}{post}{b}{self.post_state2}"
        )


@dataclass
class MutableReactionData:
    """Editable copy of a rule, used while building mutated rule tables."""

    type1: AtomType
    type2: AtomType
    pre_state1: int
    pre_state2: int
    post_state1: int
    post_state2: int
    pre_bonded: bool = False
    post_bonded: bool = False
    spontaneous: bool = False

    @classmethod
    def from_reaction(cls, rule: ReactionData) -> MutableReactionData:
        return cls(**{f.name: getattr(rule, f.name) for f in fields(rule)})

    def freeze(self) -> ReactionData:
        return ReactionData(**{f.name: getattr(self, f.name) for f in fields(self)})


def types_match(
    rule_type1: AtomType,
    rule_type2: AtomType,
    type1: AtomType,
    type2: AtomType,
) -> bool:
    """Check concrete types against a rule's (possibly wildcard) types.

    A wildcard binds to any concrete type, but the same wildcard used on
    both sides must bind to the same type.
    """
    if not _binds(rule_type1, type1) or not _binds(rule_type2, type2):
        return False
    if rule_type1.is_wildcard and rule_type1 is rule_type2:
        return type1 is type2
    return True


def _binds(rule_type: AtomType, atom_type: AtomType) -> bool:
    return rule_type.is_wildcard or rule_type is atom_type
