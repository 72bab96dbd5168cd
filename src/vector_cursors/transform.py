import math

import cairo

# All cursor geometry and hotspots are authored on a 256x256 canvas.
DESIGN_CANVAS = 256.0


def build_transform(rotation_degrees: float, nominal_size: float) -> cairo.Matrix:
    """Rotate about the design origin, then scale the design canvas to `nominal_size` pixels."""
    scale = nominal_size / DESIGN_CANVAS
    rotate = cairo.Matrix.init_rotate(math.radians(rotation_degrees))
    # a.multiply(b) applies a first, then b
    return rotate.multiply(cairo.Matrix(xx=scale, yy=scale))


def round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def map_hotspot(x: float, y: float, matrix: cairo.Matrix, size: int):
    """Map a design-space hotspot to pixel coordinates on a `size` pixel frame.

    The hotspot is taken relative to the canvas center, sent through the
    geometry matrix and re-centered on the output frame.
    """
    tx, ty = matrix.transform_point(x - DESIGN_CANVAS / 2, y - DESIGN_CANVAS / 2)
    xhot = round_half_away(tx) + size / 2
    yhot = round_half_away(ty) + size / 2
    # negative coordinates saturate at the frame edge
    return max(0, int(xhot)), max(0, int(yhot))
