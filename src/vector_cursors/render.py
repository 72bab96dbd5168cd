"""Rasterize cursors into composited RGBA frames."""

import logging
import sys
from dataclasses import dataclass
from typing import List

import cairo

from .errors import PathSyntaxError, RenderError
from .pathdata import ClosePath, CubicTo, LineTo, MoveTo, QuadTo, parse
from .theme import Color, Cursor, Style
from .transform import build_transform, map_hotspot

log = logging.getLogger(__name__)


@dataclass
class RenderedImage:
    """One square cursor frame.

    `pixels` holds width * height pixels of four bytes each in R, G, B, A
    order with premultiplied alpha, as produced by the rasterizer.
    """

    pixels: bytes
    width: int
    height: int
    xhot: int
    yhot: int


def _trace(ctx, commands):
    for command in commands:
        if isinstance(command, MoveTo):
            ctx.move_to(command.x, command.y)
        elif isinstance(command, LineTo):
            ctx.line_to(command.x, command.y)
        elif isinstance(command, QuadTo):
            # Cairo doesn't have quadratic Bezier - convert to cubic
            x0, y0 = ctx.get_current_point()
            ctx.curve_to(
                x0 + 2 / 3 * (command.x1 - x0), y0 + 2 / 3 * (command.y1 - y0),
                command.x + 2 / 3 * (command.x1 - command.x), command.y + 2 / 3 * (command.y1 - command.y),
                command.x, command.y,
            )
        elif isinstance(command, CubicTo):
            ctx.curve_to(command.x1, command.y1, command.x2, command.y2, command.x, command.y)
        elif isinstance(command, ClosePath):
            ctx.close_path()


def _set_color(ctx, color: Color):
    r, g, b, a = color.to_rgba8()
    ctx.set_source_rgba(r / 255, g / 255, b / 255, a / 255)


def _coverage_mask(paths, matrix, size):
    """A8 surface holding the winding-rule coverage of every path."""
    mask = cairo.ImageSurface(cairo.FORMAT_A8, size, size)
    ctx = cairo.Context(mask)
    ctx.set_matrix(matrix)
    ctx.set_fill_rule(cairo.FILL_RULE_WINDING)
    for commands in paths:
        _trace(ctx, commands)
        ctx.fill()
    return mask


def _invert_mask(mask, size):
    inverted = cairo.ImageSurface(cairo.FORMAT_A8, size, size)
    ctx = cairo.Context(inverted)
    ctx.paint()
    # dest * (1 - coverage)
    ctx.set_operator(cairo.OPERATOR_DEST_OUT)
    ctx.set_source_surface(mask, 0, 0)
    ctx.paint()
    return inverted


def _stroke(ctx, width):
    if width > 0:
        ctx.set_line_width(width)
        ctx.stroke()
        return
    # zero width strokes are hairlines one device pixel wide
    ctx.save()
    ctx.identity_matrix()
    ctx.set_line_width(1.0)
    ctx.stroke()
    ctx.restore()


def _rgba_bytes(surface):
    """Copy an ARGB32 surface into a tightly packed R, G, B, A byte string."""
    surface.flush()
    width, height, stride = surface.get_width(), surface.get_height(), surface.get_stride()
    data = bytes(surface.get_data())
    packed = b"".join(data[row * stride:row * stride + width * 4] for row in range(height))

    out = bytearray(len(packed))
    # ARGB32 stores each pixel as a native-endian 32-bit word
    if sys.byteorder == "little":
        b, g, r, a = (packed[i::4] for i in range(4))
    else:
        a, r, g, b = (packed[i::4] for i in range(4))
    out[0::4], out[1::4], out[2::4], out[3::4] = r, g, b, a
    return bytes(out)


def render_cursor_one_size(cursor: Cursor, style: Style, size: int) -> RenderedImage:
    """Render `cursor` into a `size` x `size` frame.

    The fill is painted first, then the stroke is painted only outside the
    filled area by compositing it through the inverted fill coverage.
    """
    if size <= 0:
        raise RenderError("cannot render a cursor at a non-positive size", size=size)

    surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, size, size)
    matrix = build_transform(cursor.rotation_degrees, size)

    paths = []
    for data in cursor.paths:
        try:
            paths.append(parse(data))
        except PathSyntaxError as e:
            raise RenderError(f"invalid path data: {e}", path=data, size=size) from e

    ctx = cairo.Context(surface)
    ctx.set_matrix(matrix)
    ctx.set_fill_rule(cairo.FILL_RULE_WINDING)
    _set_color(ctx, style.fill_color)
    for commands in paths:
        _trace(ctx, commands)
        ctx.fill()

    mask = _invert_mask(_coverage_mask(paths, matrix, size), size)

    ctx.push_group()
    _set_color(ctx, style.stroke_color)
    ctx.set_line_cap(cairo.LINE_CAP_ROUND)
    ctx.set_line_join(cairo.LINE_JOIN_ROUND)
    for commands in paths:
        _trace(ctx, commands)
        _stroke(ctx, style.stroke_width)
    ctx.pop_group_to_source()
    # the mask is in device pixels
    ctx.identity_matrix()
    ctx.mask_surface(mask, 0, 0)

    xhot, yhot = map_hotspot(cursor.hot.x, cursor.hot.y, matrix, size)
    log.debug("rendered %dx%d frame, hotspot (%d, %d)", size, size, xhot, yhot)
    return RenderedImage(pixels=_rgba_bytes(surface), width=size, height=size, xhot=xhot, yhot=yhot)


def render_cursor(cursor: Cursor, style: Style) -> List[RenderedImage]:
    """Render one frame per configured size, in the order of `style.sizes`."""
    if not style.sizes:
        raise RenderError("style does not define any cursor sizes")
    return [render_cursor_one_size(cursor, style, size) for size in style.sizes]
