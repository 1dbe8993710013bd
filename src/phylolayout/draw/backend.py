"""contract between layouts and the drawing backends that consume them

Backends only read a laid out Cladogram or Tanglegram, they never compute
coordinates themselves.
"""

from __future__ import annotations

import enum
import typing

if typing.TYPE_CHECKING:  # pragma: no cover
    from phylolayout.draw.cladogram import Cladogram


class UnsupportedBackendError(ValueError):
    """the requested output format has no backend"""


class RenderFormat(enum.Enum):
    postscript = "postscript"
    gd = "gd"


class ImageFormat(enum.Enum):
    """raster formats of the gd backend"""

    png = "png"
    jpeg = "jpeg"
    gif = "gif"


POSTSCRIPT = RenderFormat.postscript
GD = RenderFormat.gd


def _lookup(enum_cls: type[enum.Enum], name: str | enum.Enum, kind: str) -> enum.Enum:
    if isinstance(name, enum_cls):
        return name

    if not isinstance(name, str):
        msg = f"{kind} must be a string, not {type(name).__name__}"
        raise UnsupportedBackendError(msg)

    try:
        return enum_cls(name.strip().lower())
    except ValueError:
        choices = [member.value for member in enum_cls]
        msg = f"unsupported {kind} {name!r}, choose from {choices}"
        raise UnsupportedBackendError(msg) from None


def get_render_format(name: str | RenderFormat) -> RenderFormat:
    """returns the RenderFormat matching name, case is ignored

    Raises
    ------
    UnsupportedBackendError
    """
    return _lookup(RenderFormat, name, "render format")


def get_image_format(name: str | ImageFormat) -> ImageFormat:
    """returns the ImageFormat matching name, case is ignored. 'jpg' is
    accepted for jpeg."""
    if isinstance(name, str) and name.strip().lower() == "jpg":
        name = "jpeg"
    return _lookup(ImageFormat, name, "image format")


@typing.runtime_checkable
class Renderer(typing.Protocol):  # pragma: no cover
    format: RenderFormat

    def render(self, layout: Cladogram) -> bytes: ...
