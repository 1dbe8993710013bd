"""Classes for storing a rooted phylogenetic tree for display.

These trees can be either strictly binary, or have polytomies
(multiple children to a parent node).

The tree is supplied to the layout classes in phylolayout.draw, which read,
but never modify it. Each node may carry

    -  a branch length, the distance from its parent
    -  a name (typically only tips are named) and a support value
    -  an optional (red, green, blue) colour, each value in [0, 1]
    -  an optional list of connections to tips of another tree, used
       when drawing a tanglegram

Definition of relevant terms or abbreviations:
    -  edge: also known as a branch on a tree.
    -  node: the point at which two edges meet
    -  tip: a sequence or species
    -  height: the maximum number of edges from a node to a tip
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Generator, Iterable, Sequence

    from typing_extensions import Self

    ColorType = tuple[float, float, float]


class TreeError(Exception):
    pass


def _format_node_name(
    node: PhyloNode,
    with_node_names: bool,
    with_distances: bool,
) -> str:
    """Helper function to format node name according to parameters"""
    if node.is_root() or (not node.is_tip() and not with_node_names):
        node_name = ""
    else:
        node_name = node.name or ""

    if node_name and not (node_name.startswith("'") and node_name.endswith("'")):
        if re.search("""[]['"(),:;_]""", node_name):
            node_name = "'{}'".format(node_name.replace("'", "''"))
        else:
            node_name = node_name.replace(" ", "_")

    if with_distances and (length := node.length) is not None:
        node_name = f"{node_name}:{length}"

    return node_name


def _validated_color(value: Sequence[float] | None) -> ColorType | None:
    if value is None:
        return None

    value = tuple(value)
    if len(value) != 3:
        msg = f"color must be a (red, green, blue) triple, not {value!r}"
        raise ValueError(msg)

    for channel in value:
        if isinstance(channel, bool) or not isinstance(channel, (int, float)):
            msg = f"color values must be numbers, not {channel!r}"
            raise ValueError(msg)
        if not 0 <= channel <= 1:
            msg = f"color values must be in the range [0, 1], not {channel!r}"
            raise ValueError(msg)

    return tuple(float(v) for v in value)


class PhyloNode:
    """Store information about a tree node. Mutable.

    Parameters:
        name: label for the node.
        children: list of the node's children.
        parent: parent to this node
        length: distance from the parent, can be None
        support: bootstrap support for the clade defined by this node
        color: (red, green, blue) triple, each value in [0, 1]
        connections: tips of another tree this tip connects to
    """

    __slots__ = (
        "_color",
        "_parent",
        "children",
        "connections",
        "length",
        "name",
        "support",
    )

    def __init__(
        self,
        name: str | None = None,
        children: Iterable[Self | str] | None = None,
        parent: Self | None = None,
        length: float | str | None = None,
        support: float | None = None,
        color: Sequence[float] | None = None,
        connections: Iterable[PhyloNode] | None = None,
    ) -> None:
        """Returns new PhyloNode object."""
        self.name = name
        self.children: list[Self] = []
        if children:
            self.extend(children)

        self._parent = parent
        if parent is not None and self not in parent.children:
            parent.append(self)

        self.length = length
        self.support = support
        self._color = _validated_color(color)
        self.connections: list[PhyloNode] = list(connections or [])

    def __repr__(self) -> str:
        return f'Tree("{self.get_newick()}")'

    def __str__(self) -> str:
        """Returns Newick-format string representation of tree."""
        return self.get_newick(with_distances=True)

    @property
    def color(self) -> ColorType | None:
        """(red, green, blue) for this node, None if not set"""
        return self._color

    @color.setter
    def color(self, value: Sequence[float] | None) -> None:
        self._color = _validated_color(value)

    def _to_self_child(self, i: Self | str) -> Self:
        """Converts i to self's type, with self as its parent.

        Cleans up refs from i's original parent, but doesn't give self ref to i.
        """
        if isinstance(i, str):
            node = self.__class__(i)
        else:
            if i._parent is not None and i._parent is not self:
                i._parent.children.remove(i)
            node = i
        node._parent = self
        return node

    def append(self, i: Self | str) -> None:
        """Appends i to self.children, in-place, cleaning up refs."""
        self.children.append(self._to_self_child(i))

    def extend(self, items: Iterable[Self | str]) -> None:
        """Extends self.children by items, in-place, cleaning up refs."""
        self.children.extend(self._to_self_child(item) for item in items)

    @property
    def parent(self) -> Self | None:
        """parent of this node"""
        return self._parent

    def is_tip(self) -> bool:
        """Returns True if the current node is a tip, i.e. has no children."""
        return not self.children

    def is_root(self) -> bool:
        """Returns True if the current is a root, i.e. has no parent."""
        return self._parent is None

    def preorder(self, include_self: bool = True) -> Generator[Self]:
        """Performs preorder iteration over tree."""
        stack = [self]

        while stack:
            node = stack.pop()
            if include_self or node is not self:
                yield node

            # the stack is last-in-first-out, so we add children
            # in reverse order so they're processed left-to-right
            if node.children:
                stack.extend(node.children[::-1])

    def postorder(self, include_self: bool = True) -> Generator[Self]:
        """performs postorder iteration over tree"""
        stack = [(self, False)]

        while stack:
            node, children_done = stack.pop()
            if children_done:
                if include_self or node is not self:
                    yield node
            else:
                stack.append((node, True))
                if node.children:
                    stack.extend((child, False) for child in node.children[::-1])

    def iter_tips(self, include_self: bool = True) -> Generator[Self]:
        """Iterates over tips descended from self, left to right.

        Notes
        -----
        A tip is its own single tip by default, every tree being laid out
        has at least one tip.
        """
        if not self.children:
            if include_self:
                yield self
            return None

        stack = [self]
        while stack:
            curr = stack.pop()
            if curr.children:
                stack.extend(curr.children[::-1])
            else:
                yield curr

    def tips(self, include_self: bool = True) -> list[Self]:
        """Returns tips descended from self."""
        return list(self.iter_tips(include_self=include_self))

    def get_tip_names(self) -> list[str | None]:
        """return the list of the names of all tips contained by this node"""
        return [tip.name for tip in self.iter_tips()]

    def height(self) -> int:
        """maximum number of edges between self and any of its tips"""
        heights: dict[int, int] = {}
        for node in self.postorder():
            heights[id(node)] = (
                1 + max(heights[id(child)] for child in node.children)
                if node.children
                else 0
            )
        return heights[id(self)]

    def get_node_matching_name(self, name: str) -> Self:
        """find the node with the name

        Raises
        ------
        TreeError if no node with the name is found
        """
        for node in self.preorder(include_self=True):
            if node.name == name:
                break
        else:
            msg = f"No node named '{name}' in {self.get_tip_names()}"
            raise TreeError(msg)
        return node

    def validate(self) -> None:
        """checks self is the root of a well formed tree

        Raises
        ------
        TreeError if a node is reachable more than once (a cycle or shared
        child) or if a child does not record its parent
        """
        seen = {id(self)}
        stack = [self]
        while stack:
            node = stack.pop()
            for child in node.children:
                if not isinstance(child, PhyloNode):
                    msg = f"child of {node.name!r} is not a PhyloNode: {child!r}"
                    raise TreeError(msg)
                if id(child) in seen:
                    msg = f"node {child.name!r} is reachable more than once, tree has a cycle"
                    raise TreeError(msg)
                if child._parent is not node:
                    msg = f"node {child.name!r} does not record {node.name!r} as parent"
                    raise TreeError(msg)
                seen.add(id(child))
                stack.append(child)

    def get_newick(
        self,
        with_distances: bool = False,
        semicolon: bool = True,
        with_node_names: bool = False,
    ) -> str:
        """Return the newick string of node and its descendents

        Parameters
        ----------
        with_distances
            include value of node length attribute if present.
        semicolon
            end tree string with a semicolon
        with_node_names
            includes internal node names
        """
        node_results: dict[int, str] = {}
        for node in self.postorder():
            node_name = _format_node_name(
                node,
                with_node_names=with_node_names,
                with_distances=with_distances,
            )
            if node.is_tip() and node is not self:
                node_results[id(node)] = node_name
                continue

            children_newick = [node_results[id(child)] for child in node.children]
            if children_newick:
                node_results[id(node)] = f"({','.join(children_newick)}){node_name}"
            else:
                node_results[id(node)] = node_name or (self.name or "")

        final_result = node_results[id(self)]
        if self.is_root() and semicolon:
            final_result = f"{final_result};"

        return final_result


def branch_length(node: PhyloNode) -> float:
    """returns the usable branch length of node

    Notes
    -----
    Absent, non-numeric, non-finite and negative lengths all become 1.
    Numeric strings are honoured only when they are well formed, e.g.
    "0.25" but not "1e-3" or ".5".
    """
    value: Any = node.length
    if isinstance(value, str):
        if re.fullmatch(r"\d+(\.\d+)?", value.strip()) is None:
            return 1.0
        value = float(value)

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            return 1.0

    value = float(value)
    if not math.isfinite(value) or value < 0:
        return 1.0
    return value


def _from_nested(structure: Any) -> PhyloNode:  # noqa: ANN401
    """builds the tree bottom up from nested sequences, children must be
    created before their parents"""
    if isinstance(structure, PhyloNode):
        return structure
    if isinstance(structure, str):
        return PhyloNode(structure)
    try:
        items = list(structure)
    except TypeError as err:
        msg = f"cannot make a tree node from {structure!r}"
        raise TreeError(msg) from err
    if not items:
        msg = "nested tree structure contains an empty clade"
        raise TreeError(msg)
    return PhyloNode(children=[_from_nested(item) for item in items])


def make_tree(
    structure: Any = None,  # noqa: ANN401
    tip_names: list[str] | None = None,
) -> PhyloNode:
    """Initialises a tree.

    Parameters
    ----------
    structure
        nested sequences whose leaves are tip names or PhyloNode instances,
        e.g. ``("a", ("b", "c"))``
    tip_names
        a list of tip names, returns a "star" topology tree

    Notes
    -----
    Tip names are used exactly as given, duplicates included. Internal
    nodes are unnamed, supply PhyloNode instances for named internal
    nodes. No tree file formats are parsed.

    Returns
    -------
    PhyloNode
    """
    if tip_names:
        return PhyloNode(children=[str(tip_name) for tip_name in tip_names])

    if structure is None:
        msg = "Must provide either structure or tip_names."
        raise ValueError(msg)

    return _from_nested(structure)
