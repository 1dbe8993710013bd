"""label metrics, the rendered width of tip labels

A label metrics provider is any callable taking a label and returning its
rendered width in the same units as the layout margins. The layout engine
asks once per tip, backends that need the exact width of a particular label
when drawing it should ask the provider themselves.
"""

from __future__ import annotations

import math
import numbers
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:  # pragma: no cover
    from phylolayout.core.tree import PhyloNode


class LabelMetrics(Protocol):
    def __call__(self, label: str) -> float: ...


# width, height in pixels of the builtin GD fonts
GD_FONTS = {
    "gdTinyFont": (5, 8),
    "gdSmallFont": (6, 13),
    "gdMediumBoldFont": (7, 13),
    "gdLargeFont": (8, 16),
}


class MonospaceMetrics:
    """every character has the same width"""

    def __init__(self, char_width: float = 6, char_height: float = 13) -> None:
        if char_width < 0 or char_height < 0:
            msg = "character dimensions must be >= 0"
            raise ValueError(msg)
        self.char_width = char_width
        self.char_height = char_height

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(char_width={self.char_width}, char_height={self.char_height})"

    def __call__(self, label: str) -> float:
        return len(label or "") * self.char_width

    @classmethod
    def from_font(cls, name: str) -> MonospaceMetrics:
        """metrics for one of the builtin GD fonts

        Raises
        ------
        ValueError if name is not one of GD_FONTS
        """
        if name not in GD_FONTS:
            msg = f"{name!r} is not a GD font, choose from {sorted(GD_FONTS)}"
            raise ValueError(msg)
        return cls(*GD_FONTS[name])


def measure_tips(
    tree: PhyloNode,
    metrics: LabelMetrics,
) -> tuple[dict[PhyloNode, float], float]:
    """returns the width of each tip label, and the maximum

    Parameters
    ----------
    tree
        root of the tree
    metrics
        called exactly once per tip

    Raises
    ------
    TypeError if metrics is None or not callable, ValueError if it returns
    a negative or non-numeric width
    """
    if metrics is None or not callable(metrics):
        msg = f"a callable label metrics provider is required, got {metrics!r}"
        raise TypeError(msg)

    widths: dict[PhyloNode, float] = {}
    for tip in tree.iter_tips():
        width = metrics(tip.name or "")
        if isinstance(width, bool) or not isinstance(width, numbers.Real):
            msg = f"label width for {tip.name!r} is not a number: {width!r}"
            raise ValueError(msg)
        if not math.isfinite(width) or width < 0:
            msg = f"label width for {tip.name!r} must be finite and >= 0, got {width}"
            raise ValueError(msg)
        widths[tip] = float(width)

    return widths, max(widths.values())
