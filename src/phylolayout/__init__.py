"""phylolayout: computes the pixel layout of cladograms and tanglegrams
for rooted phylogenetic trees, ready for any drawing backend."""

import logging
import os
import typing
import warnings
from importlib import import_module

from phylolayout._version import __version__

if typing.TYPE_CHECKING:  # pragma: no cover
    from phylolayout.core.tree import PhyloNode
    from phylolayout.draw.cladogram import Cladogram
    from phylolayout.draw.metrics import LabelMetrics
    from phylolayout.draw.tanglegram import Tanglegram

__license__ = "BSD-3"


def __getattr__(name: str) -> typing.Any:  # noqa: ANN401
    if (attr := globals().get(name)) is not None:
        return attr

    if name not in _import_mapping:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    module_name = _import_mapping[name]
    module = import_module(f".{module_name}", package=__name__)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


_import_mapping = {
    "make_tree": "core.tree",
    "PhyloNode": "core.tree",
    "TreeError": "core.tree",
    "Cladogram": "draw.cladogram",
    "Tanglegram": "draw.tanglegram",
    "LayoutConfig": "draw.layout_config",
    "MonospaceMetrics": "draw.metrics",
    "get_render_format": "draw.backend",
    "get_image_format": "draw.backend",
    "UnsupportedBackendError": "draw.backend",
}


def __dir__() -> list[str]:
    return list(_import_mapping.keys()) + list(globals().keys())


__all__ = [*_import_mapping.keys(), "make_layout"]

version = __version__
version_info = tuple(int(v) for v in version.split(".") if v.isdigit())


warn_env = "PHYLOLAYOUT_WARNINGS"

if warn := os.environ.get(warn_env):
    warnings.simplefilter(warn)

# library modules log at debug level only, the application decides handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())


def make_layout(
    tree: "PhyloNode",
    label_metrics: "LabelMetrics",
    second: "PhyloNode | None" = None,
    **kwargs: typing.Any,  # noqa: ANN401
) -> "Cladogram | Tanglegram":
    """
    Parameters
    ----------
    tree
        root of the (first) tree
    label_metrics
        callable returning the rendered width of a tip label
    second
        root of a second tree, if provided a tanglegram is laid out
    **kwargs
        passed on to the layout class, e.g. config=LayoutConfig(...),
        compact=True, correspondences=...

    Returns
    -------
    a Cladogram for a single tree, a Tanglegram for two
    """
    if second is None:
        from phylolayout.draw.cladogram import Cladogram

        return Cladogram(tree, label_metrics, **kwargs)

    from phylolayout.draw.tanglegram import Tanglegram

    return Tanglegram(tree, second, label_metrics, **kwargs)
