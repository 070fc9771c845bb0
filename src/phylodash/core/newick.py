"""
Newick tree parsing.

Turns a Newick string into a typed hierarchy of Leaf and Internal nodes.
Only bare names and branch lengths are understood:

    ((A:0.1,B:0.2)clade1:0.3,C:0.4)root;

The parser is a single left-to-right pass over an explicit cursor with a
stack of open groups instead of recursion, so nesting depth is bounded by
memory rather than the interpreter's call stack. It is lenient about
missing names and lengths (unnamed leaves become "internal", unparsable
lengths become 0) but strict about structure: unbalanced parentheses raise
NewickFormatError instead of looping.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Union

from phylodash.core.exceptions import EmptyTreeError, NewickFormatError

logger = logging.getLogger(__name__)

DEFAULT_LEAF_NAME = "internal"

# Longest leading float literal, like JavaScript's parseFloat
_LEADING_FLOAT_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_SUFFIX_TERMINATORS = frozenset(",);")


@dataclass(eq=False)
class Leaf:
    """Terminal node, joined to metadata records by name."""

    name: str = DEFAULT_LEAF_NAME
    branch_length: float = 0.0
    # Decorations written once by colour and layout passes
    color: str | None = field(default=None, compare=False)
    radius: float | None = field(default=None, compare=False)

    @property
    def is_leaf(self) -> bool:
        return True

    @property
    def children(self) -> tuple[TreeNode, ...]:
        return ()


@dataclass(eq=False)
class Internal:
    """Grouping node introduced by ``(...)``."""

    children: tuple[TreeNode, ...]
    name: str | None = None
    branch_length: float = 0.0
    color: str | None = field(default=None, compare=False)
    radius: float | None = field(default=None, compare=False)

    @property
    def is_leaf(self) -> bool:
        return False


TreeNode = Union[Leaf, Internal]


@dataclass
class ParserState:
    """Source text and cursor shared by the parsing helpers."""

    text: str
    pos: int = 0

    @classmethod
    def from_newick(cls, newick: str) -> ParserState:
        """Trim whitespace and a single trailing ';'."""
        text = newick.strip()
        if text.endswith(";"):
            text = text[:-1].rstrip()
        return cls(text=text)

    @property
    def exhausted(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str | None:
        """Current character, or None at end of input."""
        if self.exhausted:
            return None
        return self.text[self.pos]

    def advance(self) -> None:
        self.pos += 1

    def skip_whitespace(self) -> None:
        while not self.exhausted and self.text[self.pos].isspace():
            self.pos += 1


def parse_branch_length(text: str) -> float:
    """
    Parse a branch length the lenient way.

    Reads the longest leading number ("0.5abc" -> 0.5). Empty, non-numeric
    and negative values become 0.
    """
    match = _LEADING_FLOAT_RE.match(text)
    if not match:
        return 0.0
    try:
        length = float(match.group())
    except (ValueError, OverflowError):
        return 0.0
    if not math.isfinite(length) or length < 0:
        return 0.0
    return length


def parse_name_and_length(state: ParserState) -> tuple[str | None, float]:
    """
    Read a ``name:length`` suffix up to the next ',', ')', ';' or end.

    Returns:
        Tuple of (trimmed name or None when empty, branch length).
    """
    name_chars: list[str] = []
    length_chars: list[str] = []
    reading_name = True
    while not state.exhausted and state.text[state.pos] not in _SUFFIX_TERMINATORS:
        char = state.text[state.pos]
        if char == ":":
            reading_name = False
        elif reading_name:
            name_chars.append(char)
        else:
            length_chars.append(char)
        state.advance()

    name = "".join(name_chars).strip() or None
    return name, parse_branch_length("".join(length_chars))


def _close_group(state: ParserState, children: list[TreeNode]) -> TreeNode:
    """Consume ')' and the optional suffix naming the group.

    An empty group "()" has no children and becomes a leaf.
    """
    state.advance()
    name, length = parse_name_and_length(state)
    if not children:
        return Leaf(name=name or DEFAULT_LEAF_NAME, branch_length=length)
    return Internal(children=tuple(children), name=name, branch_length=length)


def parse_newick(newick: str) -> TreeNode:
    """
    Parse a Newick string into a tree.

    Args:
        newick: Newick text, optionally terminated by ';'.

    Returns:
        Root node of the tree (a Leaf for single-node trees).

    Raises:
        EmptyTreeError: If the text is empty or only ';'.
        NewickFormatError: On unbalanced parentheses, a top-level ',' or
            content after the root node.

    Example:
        >>> root = parse_newick("(A:1,B:2)C:0;")
        >>> root.name, [c.name for c in root.children]
        ('C', ['A', 'B'])
    """
    if newick is None:
        raise EmptyTreeError()
    state = ParserState.from_newick(newick)
    if state.exhausted:
        raise EmptyTreeError()

    # children collected so far for every open '('
    open_groups: list[list[TreeNode]] = []

    while True:
        state.skip_whitespace()
        char = state.peek()
        if char == "(":
            open_groups.append([])
            state.advance()
            continue

        if char == ")" and open_groups:
            # group closes right after '(' or ',' without an extra child
            node: TreeNode = _close_group(state, open_groups.pop())
        else:
            name, length = parse_name_and_length(state)
            node = Leaf(name=name or DEFAULT_LEAF_NAME, branch_length=length)

        # attach the finished subtree, closing every group it completes
        while True:
            state.skip_whitespace()
            char = state.peek()
            if char == ",":
                if not open_groups:
                    raise NewickFormatError("',' outside of any group", state.pos)
                open_groups[-1].append(node)
                state.advance()
                break
            if char == ")":
                if not open_groups:
                    raise NewickFormatError("unbalanced ')'", state.pos)
                open_groups[-1].append(node)
                node = _close_group(state, open_groups.pop())
                continue
            if open_groups:
                raise NewickFormatError(
                    f"{len(open_groups)} unterminated '(' group(s)", state.pos
                )
            if char is not None:
                raise NewickFormatError(f"unexpected {char!r} after root node", state.pos)
            logger.debug("Parsed Newick tree with %d leaves", leaf_count(node))
            return node


def iter_preorder(root: TreeNode) -> Iterator[TreeNode]:
    """Yield nodes parent-first, children in order."""
    stack: list[TreeNode] = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def iter_postorder(root: TreeNode) -> Iterator[TreeNode]:
    """Yield nodes children-first, so every child precedes its parent."""
    stack: list[tuple[TreeNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded or node.is_leaf:
            yield node
            continue
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children))


def leaves(root: TreeNode) -> list[Leaf]:
    """Leaves in left-to-right order."""
    return [node for node in iter_preorder(root) if isinstance(node, Leaf)]


def leaf_count(root: TreeNode) -> int:
    return sum(1 for node in iter_preorder(root) if node.is_leaf)


def to_hierarchy(root: TreeNode) -> dict[str, Any]:
    """
    Convert the tree to nested dicts for a renderer.

    Internal nodes carry their children under ``branchset``; leaves have no
    such key. ``color`` and ``radius`` are included once they are set.
    """
    converted: dict[int, dict[str, Any]] = {}
    for node in iter_postorder(root):
        entry = _node_fields(node)
        if isinstance(node, Internal):
            entry["branchset"] = [converted.pop(id(child)) for child in node.children]
        converted[id(node)] = entry
    return converted[id(root)]


def to_json(root: TreeNode) -> str:
    """
    Serialize ``to_hierarchy(root)`` as compact JSON text.

    Nodes are rendered children-first, so arbitrarily deep trees never reach
    the recursive ``json`` encoder as nested containers.
    """
    rendered: dict[int, str] = {}
    for node in iter_postorder(root):
        text = json.dumps(_node_fields(node), separators=(",", ":"))
        if isinstance(node, Internal):
            branchset = ",".join(rendered.pop(id(child)) for child in node.children)
            text = f'{text[:-1]},"branchset":[{branchset}]}}'
        rendered[id(node)] = text
    return rendered[id(root)]


def _node_fields(node: TreeNode) -> dict[str, Any]:
    entry: dict[str, Any] = {"length": node.branch_length}
    if node.name is not None:
        entry["name"] = node.name
    if node.color is not None:
        entry["color"] = node.color
    if node.radius is not None:
        entry["radius"] = node.radius
    return entry


def to_newick(root: TreeNode) -> str:
    """Serialize names and non-zero branch lengths back to Newick."""
    rendered: dict[int, str] = {}
    for node in iter_postorder(root):
        label = node.name or ""
        if node.branch_length:
            label += f":{node.branch_length:g}"
        if isinstance(node, Internal):
            inner = ",".join(rendered.pop(id(child)) for child in node.children)
            label = f"({inner}){label}"
        rendered[id(node)] = label
    return rendered[id(root)] + ";"
