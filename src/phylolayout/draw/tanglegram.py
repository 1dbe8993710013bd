"""pixel layout of two trees facing each other, with lines connecting
corresponding tips

A tanglegram is roughly set as follows. The only additional setting is
column (C, length of connection lines between taxa of the two trees), but
tip (X) occurs four times, and the label widths differ for the first and
the second tree::

    ###########################################################
    #                                                         #
    #        +---------+ XXX  ----- XXXXXX +----+             #
    #        |                                  |             #
    #        |                                  +----+        #
    #   +----+                                  |    |        #
    #        |    +----+ XXXX -----    XXX +----+    |        #
    #        |    |                                  +----+   #
    #        +----+                                  |        #
    #             |                                  |        #
    #             +----+ XX   -----   XXXX +---------+        #
    #                                                         #
    ###########################################################
    # L                 X    X  C  X      X                 R #
    ###########################################################
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Union

from phylolayout.core.tree import PhyloNode, TreeError
from phylolayout.draw.cladogram import (
    Cladogram,
    TreeGeometry,
    flush_xcoords,
    internal_ycoords,
    tip_ycoords,
)
from phylolayout.draw.coordinates import Connector
from phylolayout.draw.metrics import measure_tips

if TYPE_CHECKING:  # pragma: no cover
    from scitrack import CachingLogger

    from phylolayout.draw.coordinates import ColorType, CoordinateTable
    from phylolayout.draw.layout_config import LayoutConfig
    from phylolayout.draw.metrics import LabelMetrics

TipRef = Union[PhyloNode, str]
CorrespondenceType = Union[
    Mapping[TipRef, Union[TipRef, Iterable[TipRef]]],
    Iterable[tuple[TipRef, TipRef]],
]


def _tip_lookup(tips: list[PhyloNode], which: str) -> Callable[[TipRef], PhyloNode]:
    """returns a function resolving a tip of tree from a node or a name"""
    by_id = {id(tip) for tip in tips}
    by_name: dict[str, PhyloNode] = {}
    for tip in tips:
        if tip.name is not None:
            by_name.setdefault(tip.name, tip)

    def resolve(ref: TipRef) -> PhyloNode:
        if isinstance(ref, str):
            if ref not in by_name:
                msg = f"no tip named {ref!r} in the {which} tree"
                raise TreeError(msg)
            return by_name[ref]
        if id(ref) not in by_id:
            msg = f"{getattr(ref, 'name', ref)!r} is not a tip of the {which} tree"
            raise TreeError(msg)
        return ref

    return resolve


def resolve_correspondences(
    tree1: PhyloNode,
    tree2: PhyloNode,
    correspondences: CorrespondenceType | None = None,
) -> tuple[tuple[PhyloNode, PhyloNode], ...]:
    """pairs of (tree 1 tip, tree 2 tip) to be connected

    Parameters
    ----------
    tree1, tree2
        roots of the two trees
    correspondences
        explicit relations, either a mapping of a tree 1 tip to one or more
        tree 2 tips, or a series of (tree 1 tip, tree 2 tip) pairs. Tips can
        be given as nodes or names.

    Notes
    -----
    A tree 1 tip uses, in order of precedence, its entries in
    correspondences, its connections attribute, or the first tree 2 tip
    with an identical name. The trees are not modified.
    """
    tips1 = tree1.tips()
    tips2 = tree2.tips()
    resolve1 = _tip_lookup(tips1, "first")
    resolve2 = _tip_lookup(tips2, "second")

    if correspondences is None:
        pairs = []
    elif isinstance(correspondences, Mapping):
        pairs = []
        for key, value in correspondences.items():
            values = [value] if isinstance(value, (str, PhyloNode)) else list(value)
            pairs.extend((key, v) for v in values)
    else:
        pairs = list(correspondences)

    explicit: dict[int, list[PhyloNode]] = {}
    for pair in pairs:
        try:
            ref1, ref2 = pair
        except (TypeError, ValueError) as err:
            msg = f"correspondence must be a pair of tips, not {pair!r}"
            raise TreeError(msg) from err
        explicit.setdefault(id(resolve1(ref1)), []).append(resolve2(ref2))

    for tip in tips1:
        if id(tip) not in explicit and tip.connections:
            explicit[id(tip)] = [resolve2(other) for other in tip.connections]

    first_named: dict[str, PhyloNode] = {}
    for tip in tips2:
        if tip.name is not None:
            first_named.setdefault(tip.name, tip)

    result = []
    for tip in tips1:
        if id(tip) in explicit:
            result.extend((tip, other) for other in explicit[id(tip)])
        elif tip.name is not None and tip.name in first_named:
            result.append((tip, first_named[tip.name]))

    return tuple(result)


class Tanglegram(Cladogram):
    """layout of two trees, the second a mirror image of the first

    Parameters
    ----------
    tree1, tree2
        roots of the two trees, neither is modified
    label_metrics
        callable returning the rendered width of a tip label
    config
        a LayoutConfig, defaults used if None
    correspondences
        explicit relations between tips of tree1 and tree2, see
        resolve_correspondences()
    logger
        a scitrack CachingLogger recording the settings and the result
    **kwargs
        override settings of config

    Notes
    -----
    The first tree is laid out as a Cladogram. Tips of the second tree are
    aligned, facing the label column of the first tree, and branch lengths
    of the second tree are not used.
    """

    def __init__(
        self,
        tree1: PhyloNode,
        tree2: PhyloNode,
        label_metrics: LabelMetrics,
        config: LayoutConfig | None = None,
        correspondences: CorrespondenceType | None = None,
        logger: CachingLogger | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        self._tree2 = tree2
        self._explicit = correspondences
        super().__init__(tree1, label_metrics, config=config, logger=logger, **kwargs)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(num_tips=({self.leaf_count}, {self.leaf_count2}), "
            f"width={self.width}, height={self.height}, "
            f"num_connections={len(self._correspondences)})"
        )

    def _validate_trees(self, tree: PhyloNode) -> None:
        super()._validate_trees(tree)
        if not isinstance(self._tree2, PhyloNode):
            msg = f"second tree must be a PhyloNode, not {type(self._tree2).__name__}"
            raise TypeError(msg)
        self._tree2.validate()

    def _prepare(self, label_metrics: LabelMetrics) -> None:
        self._tip_widths2, _ = measure_tips(self._tree2, label_metrics)
        self._correspondences = resolve_correspondences(
            self._tree, self._tree2, self._explicit
        )

    def _max_leaf_count(self) -> int:
        return max(len(self._tip_widths), len(self._tip_widths2))

    def _layout_other_trees(self) -> None:
        config = self._config
        tree = self._tree2
        tips = tree.tips()
        ystep = self._height / len(tips)
        ys = tip_ycoords(tips, ystep, config.bottom)
        internal_ycoords(tree, ys)

        tip_width2 = max(self._tip_widths2.values())
        tip_x = (
            self._label_column_edge()
            + config.tip
            + config.column
            + config.tip
            + tip_width2
            + config.tip
        )
        xs = flush_xcoords(tree, tip_x, config.xstep, direction=-1)
        self._geometry2 = TreeGeometry(
            tree, xs, ys, ystep, self._tip_widths2, config, direction=-1
        )

    def _compute_width(self) -> float:
        root_x = self._geometry2.coords.x(self._tree2)
        return root_x + self._config.xstep + self._config.right

    def _log_layout(self, logger: CachingLogger) -> None:
        super()._log_layout(logger)
        names = [[a.name, b.name] for a, b in self._correspondences]
        logger.log_message(json.dumps(names), label="connections")

    def _geometries(self) -> Iterable[TreeGeometry]:
        return (self._geometry, self._geometry2)

    @property
    def tree2(self) -> PhyloNode:
        return self._tree2

    @property
    def geometry2(self) -> TreeGeometry:
        return self._geometry2

    @property
    def coords2(self) -> CoordinateTable:
        """(x, y) of every node of the second tree"""
        return self._geometry2.coords

    @property
    def ystep2(self) -> float:
        return self._geometry2.ystep

    @property
    def leaf_count2(self) -> int:
        return len(self._tip_widths2)

    @property
    def tip_width2(self) -> float:
        return self._geometry2.tip_width

    @property
    def tip_widths2(self) -> dict[PhyloNode, float]:
        return dict(self._geometry2.tip_widths)

    @property
    def colors2(self) -> dict[PhyloNode, ColorType] | None:
        colors = self._geometry2.colors
        return None if colors is None else dict(colors)

    @property
    def correspondences(self) -> tuple[tuple[PhyloNode, PhyloNode], ...]:
        """(tree 1 tip, tree 2 tip) pairs that are connected"""
        return self._correspondences

    def get_ycoordinates(self, tree: int = 1) -> dict[PhyloNode, float]:
        """y coordinate of every node of the first (tree=1) or second tree"""
        if tree not in (1, 2):
            msg = f"tree must be 1 or 2, not {tree!r}"
            raise ValueError(msg)
        coords = self.coords if tree == 1 else self.coords2
        return {node: y for node, (_, y) in coords.items()}

    def connectors(self) -> list[Connector]:
        """bent lines from just after a tree 1 label, across the column, to
        just before the tree 2 label"""
        tip = self._config.tip
        geom1, geom2 = self._geometry, self._geometry2
        result = []
        for leaf1, leaf2 in self._correspondences:
            leaf1_x, y1 = geom1.coords[leaf1]
            leaf2_x, y2 = geom2.coords[leaf2]
            x0 = leaf1_x + tip + geom1.tip_widths[leaf1] + tip
            x1 = leaf1_x + tip + geom1.tip_width + tip
            x2 = leaf2_x - tip - geom2.tip_width - tip
            x3 = leaf2_x - tip - geom2.tip_widths[leaf2] - tip
            result.append(
                Connector(leaf1, leaf2, ((x0, y1), (x1, y1), (x2, y2), (x3, y2)))
            )
        return result
