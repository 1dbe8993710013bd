"""settings controlling the geometry of cladograms and tanglegrams

Roughly, a cladogram is set according to the following parameters::

    #################################
    #                           # T #   top (T, top margin)
    #        +---------+ XXX    #   #   bottom (B, bottom margin)
    #        |                  #   #   left (L, left margin)
    #        |                  #   #   right (R, right margin)
    #   +----+                  #   #   tip (X, extra tip space)
    #        |    +----+ XXXX   #   #   xstep (S, stem length)
    #        |    |             #   #   tax_space (Y, space between taxa)
    #        +----+             # Y #   N, size of longest name
    #             |             #   #
    #             +----+ XX     #   #
    #                           # B #
    #################################
    # L         S       X  N  R #
    #############################

A tanglegram additionally has a column (C) between the label columns of
the two trees, where the connection lines are drawn.
"""

from __future__ import annotations

import dataclasses
import numbers
from dataclasses import dataclass
from typing import Any

GOLDEN_RATIO = (1 + 5**0.5) / 2

DEFAULTS = {
    "top": 10,
    "bottom": 10,
    "left": 10,
    "right": 10,
    "tip": 5,
    "tax_space": 20,
    "xstep": 20,
    "column": 60,
    "ratio": 1 / GOLDEN_RATIO,
}

_spacings = ("top", "bottom", "left", "right", "tip", "tax_space", "xstep", "column")


@dataclass(frozen=True)
class LayoutConfig:
    """geometry settings, all distances are in drawing units (pixels or points)

    Parameters
    ----------
    top, bottom, left, right
        margins
    tip
        space between the end of a branch and its label
    tax_space
        vertical space between adjacent tips
    xstep
        length of a branch in compact mode, and of the root stub
    column
        width of the region holding the connection lines of a tanglegram
    compact
        ignore branch lengths, every edge is one xstep and tips are
        ragged right
    ratio
        horizontal to vertical ratio used to scale branch lengths
    colors
        resolve the colour of each node
    bootstrap
        expose support values (or names) of internal nodes

    Notes
    -----
    None for any numeric setting selects its default.
    """

    top: float | None = None
    bottom: float | None = None
    left: float | None = None
    right: float | None = None
    tip: float | None = None
    tax_space: float | None = None
    xstep: float | None = None
    column: float | None = None
    compact: bool = False
    ratio: float | None = None
    colors: bool = False
    bootstrap: bool = False

    def __post_init__(self) -> None:
        for name in (*_spacings, "ratio"):
            value = getattr(self, name)
            if value is None:
                object.__setattr__(self, name, DEFAULTS[name])
                continue

            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                msg = f"{name} must be a number, not {type(value).__name__}"
                raise TypeError(msg)

            if name == "ratio" and not value > 0:
                msg = f"ratio must be > 0, got {value}"
                raise ValueError(msg)

            if not value >= 0:
                msg = f"{name} must be >= 0, got {value}"
                raise ValueError(msg)

        for name in ("compact", "colors", "bootstrap"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                msg = f"{name} must be True or False, not {value!r}"
                raise TypeError(msg)

    @classmethod
    def from_kwargs(
        cls,
        config: LayoutConfig | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> LayoutConfig:
        """returns config (or the defaults) updated by kwargs

        Raises
        ------
        TypeError for an unknown setting
        """
        config = cls() if config is None else config
        if not isinstance(config, cls):
            msg = f"config must be a {cls.__name__}, not {type(config).__name__}"
            raise TypeError(msg)

        known = {field.name for field in dataclasses.fields(cls)}
        if unknown := set(kwargs) - known:
            msg = f"unknown layout settings {sorted(unknown)}"
            raise TypeError(msg)

        return dataclasses.replace(config, **kwargs) if kwargs else config

    def to_rich_dict(self) -> dict[str, Any]:
        """returns the settings as a dict"""
        return dataclasses.asdict(self)
