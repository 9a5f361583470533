from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Union

__all__ = [
    "Leaf",
    "Branch",
    "Token",
    "TokenTree",
    "iter_leaves",
    "serialize_token_tree",
]


@dataclass
class Leaf:
    """
    A contiguous span of text inside the partition tree.

    Unsolved leaves are literal input that later patterns may still split.
    Solved leaves hold replacement text and are never scanned again.
    """

    text: str
    solved: bool = False


@dataclass
class Branch:
    """A former leaf that has been split into ordered children."""

    children: list[Token] = field(default_factory=list)


Token = Union[Leaf, Branch]


def _split_leaf(leaf: Leaf, search: str, replacement: str) -> tuple[Token, int]:
    text = leaf.text
    pos = text.find(search)
    if pos < 0:
        return leaf, 0
    step = len(search)
    children: list[Token] = []
    run = 0
    hits = 0
    while pos >= 0:
        if pos > run:
            children.append(Leaf(text[run:pos]))
        children.append(Leaf(replacement, solved=True))
        hits += 1
        run = pos + step
        pos = text.find(search, run)
    if run < len(text):
        children.append(Leaf(text[run:]))
    if len(children) == 1:
        # the whole leaf matched; no gap siblings to hold
        return children[0], hits
    return Branch(children), hits


class TokenTree:
    """
    Ordered partition of a string into literal and solved spans.

    The tree starts as a single unsolved leaf. Each call to :meth:`apply`
    splits unsolved leaves around the occurrences of one search term, and
    :meth:`compose` concatenates the leaves back into a single string. The
    tree is consumed by :meth:`compose`; it cannot be used afterwards.
    """

    def __init__(self, text: str) -> None:
        self._root: Token | None = Leaf(text)

    @property
    def root(self) -> Token:
        if self._root is None:
            raise RuntimeError("Token tree has already been composed.")
        return self._root

    @property
    def consumed(self) -> bool:
        return self._root is None

    def apply(self, search: str, replacement: str) -> int:
        """Replace every occurrence of ``search`` in unsolved leaves.

        Returns the number of occurrences replaced. The tree is left
        untouched when nothing matches.
        """
        if not search:
            raise ValueError("Search term must not be empty.")
        root = self.root
        if isinstance(root, Leaf):
            if root.solved:
                return 0
            self._root, hits = _split_leaf(root, search, replacement)
            return hits
        total = 0
        stack: list[Branch] = [root]
        while stack:
            branch = stack.pop()
            children = branch.children
            for index, child in enumerate(children):
                if isinstance(child, Branch):
                    stack.append(child)
                    continue
                if child.solved:
                    continue
                node, hits = _split_leaf(child, search, replacement)
                if hits:
                    children[index] = node
                    total += hits
        return total

    def leaf_count(self) -> int:
        return sum(1 for _ in iter_leaves(self))

    def compose(self) -> str:
        """Concatenate all leaves in order and tear the tree down."""
        root = self.root
        self._root = None
        if isinstance(root, Leaf):
            return root.text
        parts: list[str] = []
        stack: list[Token] = [root]
        while stack:
            node = stack.pop()
            if isinstance(node, Leaf):
                parts.append(node.text)
                continue
            children = node.children
            node.children = []
            stack.extend(reversed(children))
        return "".join(parts)


def iter_leaves(tree: TokenTree) -> Iterator[tuple[int, Leaf]]:
    """Yield ``(depth, leaf)`` pairs from left to right."""
    stack: list[tuple[int, Token]] = [(0, tree.root)]
    while stack:
        depth, node = stack.pop()
        if isinstance(node, Leaf):
            yield depth, node
            continue
        for child in reversed(node.children):
            stack.append((depth + 1, child))


def serialize_token_tree(tree: TokenTree) -> list[dict[str, object]]:
    payload: list[dict[str, object]] = []
    offset = 0
    for depth, leaf in iter_leaves(tree):
        end = offset + len(leaf.text)
        payload.append(
            {
                "text": leaf.text,
                "solved": leaf.solved,
                "depth": depth,
                "start": offset,
                "end": end,
            }
        )
        offset = end
    return payload
