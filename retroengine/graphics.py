"""Drawing constants and small helpers shared by the renderer."""

from __future__ import annotations

import enum

SURFACE_COUNT = 32
GFXDATA_SIZE = 0x800 * 0x800
DRAWLAYER_COUNT = 8

VERTEX_COUNT = 0x4000
INDEX_COUNT = VERTEX_COUNT * 6
VERTEX3D_COUNT = 0x1904
TILEUV_SIZE = 0x1000
HW_TEXTURE_COUNT = 6
HW_TEXTURE_SIZE = 0x400
HW_TEXTURE_DATASIZE = HW_TEXTURE_SIZE * HW_TEXTURE_SIZE * 2
HW_TEXBUFFER_SIZE = HW_TEXTURE_SIZE * HW_TEXTURE_SIZE

_MIN_SURFACE_SIZE = 2
_SURFACE_SIZE_LIMIT = 2048


class FlipFlags(enum.IntFlag):
    """Sprite mirroring directions."""

    NONE = 0
    X = 1
    Y = 2
    XY = 3


class InkFlags(enum.IntEnum):
    """Blending modes used when drawing sprites."""

    NONE = 0
    BLEND = 1
    ALPHA = 2
    ADD = 3
    SUB = 4


class DrawFX(enum.IntEnum):
    """Effects that can be applied when drawing an object's sprite."""

    SCALE = 0
    ROTATE = 1
    ROTOZOOM = 2
    INK = 3
    TINT = 4
    FLIP = 5


def check_surface_size(size: int) -> bool:
    """Return True if ``size`` is a power of two usable as a surface edge.

    Valid sizes are 2, 4, 8, ... up to but not including 2048.
    """
    edge = _MIN_SURFACE_SIZE
    while edge < _SURFACE_SIZE_LIMIT:
        if edge == size:
            return True
        edge <<= 1
    return False