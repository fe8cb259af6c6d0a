"""Macroreactions: reactions composed recursively of sub-reactions."""

from __future__ import annotations

from collections.abc import Iterator


class Macroreaction:
    """Base class for all macroreactions (leaves and composites)."""

    __slots__ = ()

    def get_subreactions(self) -> list[Macroreaction]:
        raise NotImplementedError

    @property
    def is_leaf(self) -> bool:
        return not self.get_subreactions()


class EmptyMacroreaction(Macroreaction):
    """Leaf with no further composition."""

    __slots__ = ()

    def get_subreactions(self) -> list[Macroreaction]:
        return []

    def __repr__(self) -> str:
        return "EmptyMacroreaction()"


class CompositeMacroreaction(Macroreaction):
    """Ordered composition of sub-reactions."""

    __slots__ = ("_children",)

    def __init__(self, *children: Macroreaction) -> None:
        self._children = tuple(children)

    def get_subreactions(self) -> list[Macroreaction]:
        return list(self._children)

    def __repr__(self) -> str:
        inner = ", ".join(repr(child) for child in self._children)
        return f"CompositeMacroreaction({inner})"


def iter_macroreactions(root: Macroreaction) -> Iterator[Macroreaction]:
    """Walk the tree in pre-order, root first."""
    yield root
    for child in root.get_subreactions():
        yield from iter_macroreactions(child)
