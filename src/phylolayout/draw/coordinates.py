"""read-only coordinate tables and the geometric primitives handed to
drawing backends"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Literal, NamedTuple

import numpy as np

if TYPE_CHECKING:  # pragma: no cover
    import numpy.typing as npt

    from phylolayout.core.tree import PhyloNode

    ColorType = tuple[float, float, float]


BLACK = (0.0, 0.0, 0.0)
CONNECTOR_GRAY = (0.5, 0.5, 0.5)


class Segment(NamedTuple):
    """a straight line from (x0, y0) to (x1, y1)"""

    x0: float
    y0: float
    x1: float
    y1: float
    color: ColorType | None = None


class TextAnchor(NamedTuple):
    """position of a piece of text

    anchor is 'start' when the text begins at x, 'end' when it finishes at x
    """

    node: PhyloNode
    text: str
    x: float
    y: float
    anchor: Literal["start", "end"] = "start"


class Connector(NamedTuple):
    """bent line joining a tip of tree 1 to a tip of tree 2"""

    leaf1: PhyloNode
    leaf2: PhyloNode
    points: tuple[tuple[float, float], ...]
    color: ColorType = CONNECTOR_GRAY


class CoordinateTable(Mapping):
    """(x, y) of every node of one tree, keyed by node identity

    Notes
    -----
    The underlying array is not writeable, the table cannot be changed
    after construction.
    """

    def __init__(self, coords: Mapping[PhyloNode, tuple[float, float]]) -> None:
        self._nodes = tuple(coords)
        self._index = {id(node): i for i, node in enumerate(self._nodes)}
        self._array = np.array(
            [coords[node] for node in self._nodes],
            dtype=float,
        ).reshape(len(self._nodes), 2)
        self._array.flags.writeable = False

    def __getitem__(self, node: PhyloNode) -> tuple[float, float]:
        try:
            i = self._index[id(node)]
        except KeyError:
            msg = f"node {getattr(node, 'name', node)!r} not in coordinate table"
            raise KeyError(msg) from None
        x, y = self._array[i]
        return float(x), float(y)

    def __contains__(self, node: object) -> bool:
        return id(node) in self._index

    def __iter__(self) -> Iterator[PhyloNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(num_nodes={len(self)})"

    @property
    def nodes(self) -> tuple[PhyloNode, ...]:
        return self._nodes

    @property
    def array(self) -> npt.NDArray[np.float64]:
        """read-only (num_nodes, 2) array, rows ordered as nodes"""
        return self._array

    def x(self, node: PhyloNode) -> float:
        return self[node][0]

    def y(self, node: PhyloNode) -> float:
        return self[node][1]

    def min_max(self) -> tuple[float, float, float, float]:
        """returns min_x, max_x, min_y, max_y"""
        min_x, min_y = self._array.min(axis=0)
        max_x, max_y = self._array.max(axis=0)
        return float(min_x), float(max_x), float(min_y), float(max_y)
