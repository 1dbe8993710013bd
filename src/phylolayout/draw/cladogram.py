"""pixel layout of a single rooted tree drawn as a rectangular cladogram

Coordinates follow the PostScript convention, the origin is the bottom
left corner of the canvas and y increases upwards. The first tip of the
tree (in traversal order) is placed at the top.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from scitrack import CachingLogger

from phylolayout.core.tree import PhyloNode, branch_length
from phylolayout.draw.coordinates import (
    BLACK,
    CoordinateTable,
    Segment,
    TextAnchor,
)
from phylolayout.draw.layout_config import LayoutConfig
from phylolayout.draw.metrics import measure_tips

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from phylolayout.draw.coordinates import ColorType
    from phylolayout.draw.metrics import LabelMetrics

_log = logging.getLogger(__name__)


def canvas_height(config: LayoutConfig, leaf_count: int) -> float:
    """height of the drawing for the given number of tips"""
    return float(config.bottom + config.tax_space * (leaf_count - 1) + config.top)


def tip_ycoords(tips: list[PhyloNode], ystep: float, bottom: float) -> dict[PhyloNode, float]:
    """tips are stacked upwards from bottom, the last tip is the lowest"""
    return {tip: bottom + i * ystep for i, tip in enumerate(reversed(tips))}


def internal_ycoords(tree: PhyloNode, ys: dict[PhyloNode, float]) -> None:
    """an internal node is centred between the extremes of its children"""
    for node in tree.postorder():
        if node.is_tip():
            continue
        child_ys = [ys[child] for child in node.children]
        ys[node] = (min(child_ys) + max(child_ys)) / 2


def compact_xcoords(
    tree: PhyloNode,
    root_x: float,
    xstep: float,
    direction: int = 1,
) -> dict[PhyloNode, float]:
    """every edge is xstep long, tips are ragged"""
    xs = {tree: root_x}
    for node in tree.preorder(include_self=False):
        xs[node] = xs[node.parent] + direction * xstep
    return xs


def proportional_scale(tree: PhyloNode, leaf_count: int, config: LayoutConfig) -> float:
    """drawing units per unit of branch length

    Notes
    -----
    Scaled so a tree of unit branch lengths has the configured aspect
    ratio. A tree consisting of only its root has scale 0.
    """
    height = tree.height()
    if height == 0:
        return 0.0
    return (leaf_count - 1) * config.tax_space * config.ratio / height


def proportional_xcoords(
    tree: PhyloNode,
    root_x: float,
    scale: float,
    direction: int = 1,
) -> dict[PhyloNode, float]:
    """edge lengths proportional to branch lengths"""
    xs = {tree: root_x}
    for node in tree.preorder(include_self=False):
        xs[node] = xs[node.parent] + direction * branch_length(node) * scale
    return xs


def flush_xcoords(
    tree: PhyloNode,
    tip_x: float,
    xstep: float,
    direction: int = 1,
) -> dict[PhyloNode, float]:
    """tips aligned at tip_x, each internal node is one xstep beyond its
    outermost child"""
    xs: dict[PhyloNode, float] = {}
    for node in tree.postorder():
        if node.is_tip():
            xs[node] = tip_x
            continue
        child_xs = [xs[child] for child in node.children]
        outer = min(child_xs) if direction > 0 else max(child_xs)
        xs[node] = outer - direction * xstep
    return xs


def resolve_colors(tree: PhyloNode) -> dict[PhyloNode, ColorType]:
    """colour of every node, black when not set"""
    return {node: node.color or BLACK for node in tree.preorder()}


def format_support(value: float) -> str:
    if value > 1:
        # assuming we have support as a percentage
        return f"{int(round(value, 0))}"
    return f"{value:.2f}"


class TreeGeometry:
    """the laid out coordinates of one tree

    Parameters
    ----------
    tree
        root of the tree
    xs, ys
        x and y coordinate of every node
    ystep
        distance between adjacent tips
    tip_widths
        rendered width of every tip label
    config
        the layout settings
    direction
        1 when children are to the right of their parent (a left hand
        tree), -1 when they are to the left (the right hand tree of a
        tanglegram)
    """

    def __init__(
        self,
        tree: PhyloNode,
        xs: dict[PhyloNode, float],
        ys: dict[PhyloNode, float],
        ystep: float,
        tip_widths: dict[PhyloNode, float],
        config: LayoutConfig,
        direction: int = 1,
    ) -> None:
        self.tree = tree
        self.coords = CoordinateTable({node: (xs[node], ys[node]) for node in tree.preorder()})
        self.ystep = ystep
        self.tip_widths = tip_widths
        self.tip_width = max(tip_widths.values())
        self.direction = direction
        self._config = config
        self.colors = resolve_colors(tree) if config.colors else None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(num_tips={len(self.tip_widths)}, "
            f"ystep={self.ystep}, direction={self.direction})"
        )

    def _color(self, node: PhyloNode) -> ColorType | None:
        return None if self.colors is None else self.colors[node]

    def edge_segments(self) -> list[Segment]:
        """the horizontal and vertical line connecting each node to its parent"""
        coords = self.coords
        segments = []
        for node in self.tree.preorder(include_self=False):
            x, y = coords[node]
            parent_x, parent_y = coords[node.parent]
            color = self._color(node)
            segments.append(Segment(x, y, parent_x, y, color))
            segments.append(Segment(parent_x, y, parent_x, parent_y, color))
        return segments

    def root_stub(self) -> Segment:
        """short segment extending outwards from the root"""
        root = self.tree
        root_x, root_y = self.coords[root]
        ys = [root_y] + [self.coords.y(child) for child in root.children]
        y = (min(ys) + max(ys)) / 2
        return Segment(
            root_x,
            y,
            root_x - self.direction * self._config.xstep,
            y,
            self._color(root),
        )

    def tip_labels(self) -> list[TextAnchor]:
        """label positions, a left hand tree has labels starting after the
        tip, a right hand tree has labels finishing before it"""
        anchor = "start" if self.direction > 0 else "end"
        offset = self.direction * self._config.tip
        labels = []
        for tip in self.tree.iter_tips():
            x, y = self.coords[tip]
            labels.append(TextAnchor(tip, tip.name or "", x + offset, y, anchor))
        return labels

    def support_labels(self, threshold: float | None = None) -> list[TextAnchor]:
        """
        Parameters
        ----------
        threshold
            support values above this are not displayed

        Returns
        -------
        support (or the node name if it has no support) of each internal
        node, empty unless the bootstrap setting is on
        """
        if not self._config.bootstrap:
            return []

        labels = []
        for node in self.tree.preorder():
            if node.is_tip():
                continue
            if node.support is not None:
                if threshold is not None and node.support > threshold:
                    continue
                text = format_support(node.support)
            elif node.name:
                text = node.name
            else:
                continue
            x, y = self.coords[node]
            labels.append(TextAnchor(node, text, x, y))
        return labels


class Cladogram:
    """layout of a single tree

    Parameters
    ----------
    tree
        root of the tree, it is not modified
    label_metrics
        callable returning the rendered width of a tip label
    config
        a LayoutConfig, defaults used if None
    logger
        a scitrack CachingLogger recording the settings and the result
    **kwargs
        override settings of config, e.g. compact=True

    Notes
    -----
    All coordinates are computed on construction and never change. Create
    a new instance to lay out a modified tree.
    """

    def __init__(
        self,
        tree: PhyloNode,
        label_metrics: LabelMetrics,
        config: LayoutConfig | None = None,
        logger: CachingLogger | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        self._config = LayoutConfig.from_kwargs(config, **kwargs)
        if logger is not None and not isinstance(logger, CachingLogger):
            msg = f"logger must be of type CachingLogger not {type(logger)}"
            raise TypeError(msg)

        self._validate_trees(tree)
        self._tree = tree
        self._tip_widths, _ = measure_tips(tree, label_metrics)
        self._prepare(label_metrics)

        self._height = canvas_height(self._config, self._max_leaf_count())
        self._geometry = self._layout_first_tree(self._tip_widths)
        self._layout_other_trees()
        self._width = self._compute_width()

        _log.debug(
            "laid out %s of %d tips, canvas %s x %s",
            self.__class__.__name__,
            self.leaf_count,
            self._width,
            self._height,
        )
        if logger is not None:
            self._log_layout(logger)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(num_tips={self.leaf_count}, "
            f"width={self.width}, height={self.height}, compact={self._config.compact})"
        )

    def _validate_trees(self, tree: PhyloNode) -> None:
        if not isinstance(tree, PhyloNode):
            msg = f"tree must be a PhyloNode, not {type(tree).__name__}"
            raise TypeError(msg)
        tree.validate()

    def _prepare(self, label_metrics: LabelMetrics) -> None:
        """hook for measuring additional trees before any layout"""

    def _max_leaf_count(self) -> int:
        return self.leaf_count

    def _layout_other_trees(self) -> None:
        """hook for placing additional trees relative to the first"""

    def _layout_first_tree(self, tip_widths: dict[PhyloNode, float]) -> TreeGeometry:
        config = self._config
        tree = self._tree
        tips = tree.tips()
        ystep = self._height / len(tips)
        ys = tip_ycoords(tips, ystep, config.bottom)
        internal_ycoords(tree, ys)

        root_x = config.left + config.xstep
        if config.compact:
            self._scale = None
            xs = compact_xcoords(tree, root_x, config.xstep)
        else:
            self._scale = proportional_scale(tree, len(tips), config)
            xs = proportional_xcoords(tree, root_x, self._scale)

        return TreeGeometry(tree, xs, ys, ystep, tip_widths, config)

    def _label_column_edge(self) -> float:
        """x of the right edge of the widest possible tip label"""
        max_x = self._geometry.coords.min_max()[1]
        return max_x + self._config.tip + self._geometry.tip_width

    def _compute_width(self) -> float:
        config = self._config
        if config.compact:
            return self._label_column_edge() + config.right
        # height counts edges, not branch lengths
        return (
            self._tree.height() * self._scale
            + config.left
            + config.xstep
            + config.tip
            + self._geometry.tip_width
            + config.right
        )

    def _log_layout(self, logger: CachingLogger) -> None:
        logger.log_message(json.dumps(self._config.to_rich_dict()), label="layout config")
        logger.log_message(f"{self.width} x {self.height}", label="canvas size")

    @property
    def config(self) -> LayoutConfig:
        return self._config

    @property
    def tree(self) -> PhyloNode:
        return self._tree

    @property
    def geometry(self) -> TreeGeometry:
        return self._geometry

    @property
    def coords(self) -> CoordinateTable:
        """(x, y) of every node"""
        return self._geometry.coords

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def xstep(self) -> float:
        return self._config.xstep

    @property
    def ystep(self) -> float:
        return self._geometry.ystep

    @property
    def scale(self) -> float | None:
        """drawing units per unit branch length, None in compact mode"""
        return self._scale

    @property
    def leaf_count(self) -> int:
        return len(self._tip_widths)

    @property
    def tip_width(self) -> float:
        """width of the longest tip label"""
        return self._geometry.tip_width

    @property
    def tip_widths(self) -> dict[PhyloNode, float]:
        return dict(self._geometry.tip_widths)

    @property
    def colors(self) -> dict[PhyloNode, ColorType] | None:
        """colour of every node, None unless the colors setting is on"""
        colors = self._geometry.colors
        return None if colors is None else dict(colors)

    def get_ycoordinates(self) -> dict[PhyloNode, float]:
        """y coordinate of every node"""
        return {node: y for node, (_, y) in self.coords.items()}

    def _geometries(self) -> Iterable[TreeGeometry]:
        return (self._geometry,)

    def edge_segments(self) -> list[Segment]:
        """lines connecting every node to its parent"""
        return [seg for geom in self._geometries() for seg in geom.edge_segments()]

    def root_stubs(self) -> list[Segment]:
        """one stub per tree"""
        return [geom.root_stub() for geom in self._geometries()]

    def tip_labels(self) -> list[TextAnchor]:
        return [label for geom in self._geometries() for label in geom.tip_labels()]

    def support_labels(self, threshold: float | None = None) -> list[TextAnchor]:
        return [
            label
            for geom in self._geometries()
            for label in geom.support_labels(threshold=threshold)
        ]
