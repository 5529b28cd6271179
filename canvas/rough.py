"""
canvas/rough.py

Deterministic hand-drawn shape generator.

Produces ``Drawable`` values made of op sets (``move`` / ``bcurveTo`` /
``lineTo`` ops) in element-local coordinates. Jitter comes from a
``random.Random`` seeded with the element seed, so the same element version
always yields the same strokes. The painter in ``canvas/renderer.py`` turns
op sets into QPainterPaths.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from geometry.bounds import get_arrow_points, get_diamond_points
from models import (
    Element,
    ElementType,
    UnknownElementTypeError,
    get_cached_shape,
    set_cached_shape,
)
from utils import is_transparent

Point = Sequence[float]

# Generator tuning
MAX_RANDOMNESS_OFFSET = 2.0
BOWING = 1.0
CURVE_TIGHTNESS = 0.0
CURVE_STEP_COUNT = 9


@dataclass
class Op:
    op: str
    data: List[float]


@dataclass
class OpSet:
    type: str  # "path" | "fillPath"
    ops: List[Op] = field(default_factory=list)


@dataclass
class Drawable:
    shape: str
    sets: List[OpSet] = field(default_factory=list)
    options: Dict[str, Any] = field(default_factory=dict)


class _Rough:
    """Stroke jitter helpers bound to one seeded random stream."""

    def __init__(self, seed: int, roughness: float):
        self.rng = random.Random(seed)
        self.roughness = roughness

    def offset(self, lo: float, hi: float, gain: float = 1.0) -> float:
        return self.roughness * gain * (self.rng.random() * (hi - lo) + lo)

    def offset_opt(self, x: float, gain: float = 1.0) -> float:
        return self.offset(-x, x, gain)

    # -------------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------------

    def line(self, x1: float, y1: float, x2: float, y2: float, move: bool, overlay: bool) -> List[Op]:
        length_sq = (x1 - x2) ** 2 + (y1 - y2) ** 2
        length = math.sqrt(length_sq)
        if length < 200:
            gain = 1.0
        elif length > 500:
            gain = 0.4
        else:
            gain = -0.0016668 * length + 1.233334

        offset = MAX_RANDOMNESS_OFFSET
        if offset * offset * 100 > length_sq:
            offset = length / 10
        half_offset = offset / 2
        diverge_point = 0.2 + self.rng.random() * 0.2

        mid_disp_x = BOWING * MAX_RANDOMNESS_OFFSET * (y2 - y1) / 200
        mid_disp_y = BOWING * MAX_RANDOMNESS_OFFSET * (x1 - x2) / 200
        mid_disp_x = self.offset_opt(mid_disp_x, gain)
        mid_disp_y = self.offset_opt(mid_disp_y, gain)

        jitter = half_offset if overlay else offset

        def rnd() -> float:
            return self.offset_opt(jitter, gain)

        ops: List[Op] = []
        if move:
            ops.append(Op("move", [x1 + rnd(), y1 + rnd()]))
        ops.append(Op("bcurveTo", [
            mid_disp_x + x1 + (x2 - x1) * diverge_point + rnd(),
            mid_disp_y + y1 + (y2 - y1) * diverge_point + rnd(),
            mid_disp_x + x1 + 2 * (x2 - x1) * diverge_point + rnd(),
            mid_disp_y + y1 + 2 * (y2 - y1) * diverge_point + rnd(),
            x2 + rnd(),
            y2 + rnd(),
        ]))
        return ops

    def double_line(self, x1: float, y1: float, x2: float, y2: float) -> List[Op]:
        return self.line(x1, y1, x2, y2, True, False) + self.line(x1, y1, x2, y2, True, True)

    def linear_path(self, points: Sequence[Point], close: bool) -> List[Op]:
        ops: List[Op] = []
        n = len(points)
        if n > 2:
            for i in range(n - 1):
                ops += self.double_line(points[i][0], points[i][1], points[i + 1][0], points[i + 1][1])
            if close:
                ops += self.double_line(points[-1][0], points[-1][1], points[0][0], points[0][1])
        elif n == 2:
            ops += self.double_line(points[0][0], points[0][1], points[1][0], points[1][1])
        return ops

    # -------------------------------------------------------------------------
    # Curves
    # -------------------------------------------------------------------------

    def curve_through(self, points: Sequence[Point]) -> List[Op]:
        """Catmull-Rom through ``points`` as cubic Beziers (ends are padding)."""
        n = len(points)
        ops: List[Op] = []
        if n > 3:
            s = 1 - CURVE_TIGHTNESS
            ops.append(Op("move", [points[1][0], points[1][1]]))
            i = 1
            while i + 2 < n:
                cached = points[i]
                b1 = (
                    cached[0] + (s * points[i + 1][0] - s * points[i - 1][0]) / 6,
                    cached[1] + (s * points[i + 1][1] - s * points[i - 1][1]) / 6,
                )
                b2 = (
                    points[i + 1][0] + (s * points[i][0] - s * points[i + 2][0]) / 6,
                    points[i + 1][1] + (s * points[i][1] - s * points[i + 2][1]) / 6,
                )
                b3 = points[i + 1]
                ops.append(Op("bcurveTo", [b1[0], b1[1], b2[0], b2[1], b3[0], b3[1]]))
                i += 1
        elif n == 3:
            ops.append(Op("move", [points[1][0], points[1][1]]))
            ops.append(Op("bcurveTo", [
                points[1][0], points[1][1],
                points[2][0], points[2][1],
                points[2][0], points[2][1],
            ]))
        elif n == 2:
            ops += self.double_line(points[0][0], points[0][1], points[1][0], points[1][1])
        return ops

    def _curve_with_offset(self, points: Sequence[Point], offset: float) -> List[Op]:
        ps = [
            [points[0][0] + self.offset_opt(offset), points[0][1] + self.offset_opt(offset)],
            [points[0][0] + self.offset_opt(offset), points[0][1] + self.offset_opt(offset)],
        ]
        for i in range(1, len(points)):
            ps.append([points[i][0] + self.offset_opt(offset), points[i][1] + self.offset_opt(offset)])
            if i == len(points) - 1:
                ps.append([points[i][0] + self.offset_opt(offset), points[i][1] + self.offset_opt(offset)])
        return self.curve_through(ps)

    def curve(self, points: Sequence[Point]) -> List[Op]:
        o1 = self._curve_with_offset(points, 1 * (1 + self.roughness * 0.2))
        o2 = self._curve_with_offset(points, 1.5 * (1 + self.roughness * 0.22))
        return o1 + o2

    # -------------------------------------------------------------------------
    # Ellipse
    # -------------------------------------------------------------------------

    def ellipse_points(self, increment: float, cx: float, cy: float, rx: float, ry: float,
                       offset: float, overlap: float) -> List[List[float]]:
        rad_offset = self.offset(-0.5, 0.5) - math.pi / 2
        points = [[
            self.offset_opt(offset) + cx + 0.9 * rx * math.cos(rad_offset - increment),
            self.offset_opt(offset) + cy + 0.9 * ry * math.sin(rad_offset - increment),
        ]]
        angle = rad_offset
        while angle < 2 * math.pi + rad_offset - 0.01:
            points.append([
                self.offset_opt(offset) + cx + rx * math.cos(angle),
                self.offset_opt(offset) + cy + ry * math.sin(angle),
            ])
            angle += increment
        for factor, extra in ((1.0, 2 * math.pi + overlap * 0.5), (0.98, overlap), (0.9, overlap * 0.5)):
            points.append([
                self.offset_opt(offset) + cx + factor * rx * math.cos(rad_offset + extra),
                self.offset_opt(offset) + cy + factor * ry * math.sin(rad_offset + extra),
            ])
        return points


def _fill_set(points: Sequence[Point]) -> OpSet:
    ops = [Op("move", [points[0][0], points[0][1]])]
    ops += [Op("lineTo", [p[0], p[1]]) for p in points[1:]]
    return OpSet("fillPath", ops)


def _options(element: Element) -> Dict[str, Any]:
    return {
        "stroke": element.stroke_color,
        "stroke_width": element.stroke_width,
        "fill": None if is_transparent(element.background_color) else element.background_color,
        "fill_style": element.fill_style,
        "roughness": element.roughness,
        "seed": element.seed,
    }


def _polygon(element: Element, shape: str, points: Sequence[Point]) -> Drawable:
    rough = _Rough(element.seed, element.roughness)
    options = _options(element)
    sets = [OpSet("path", rough.linear_path(points, True))]
    if options["fill"] is not None:
        sets.insert(0, _fill_set(points))
    return Drawable(shape, sets, options)


def _ellipse(element: Element) -> Drawable:
    rough = _Rough(element.seed, element.roughness)
    options = _options(element)
    cx = element.width / 2
    cy = element.height / 2
    rx = abs(element.width / 2)
    ry = abs(element.height / 2)
    rx += rough.offset_opt(rx * 0.05)
    ry += rough.offset_opt(ry * 0.05)
    increment = (2 * math.pi) / CURVE_STEP_COUNT

    ap1 = rough.ellipse_points(increment, cx, cy, rx, ry, 1, increment * rough.offset(0.1, rough.offset(0.4, 1)))
    ap2 = rough.ellipse_points(increment, cx, cy, rx, ry, 1.5, 0)
    sets = [OpSet("path", rough.curve_through(ap1) + rough.curve_through(ap2))]
    if options["fill"] is not None:
        outline = [
            [cx + rx * math.cos(a), cy + ry * math.sin(a)]
            for a in (2 * math.pi * i / 36 for i in range(36))
        ]
        sets.insert(0, _fill_set(outline))
    return Drawable("ellipse", sets, options)


def _linear(element: Element) -> List[Drawable]:
    rough = _Rough(element.seed, element.roughness)
    options = _options(element)
    options["fill"] = None
    points = element.points or [[0.0, 0.0]]

    # The curve is always the first drawable
    drawables = [Drawable("curve", [OpSet("path", rough.curve(points))], options)]
    if element.type == ElementType.ARROW and len(points) >= 2:
        x2, y2, x3, y3, x4, y4 = get_arrow_points(element)
        drawables.append(Drawable("line", [OpSet("path", rough.double_line(x3, y3, x2, y2))], options))
        drawables.append(Drawable("line", [OpSet("path", rough.double_line(x4, y4, x2, y2))], options))
    return drawables


def generate_shape(element: Element) -> List[Drawable]:
    """Generate the drawables for ``element`` in local coordinates.

    Raises:
        UnknownElementTypeError: For selection boxes and unknown types.
    """
    if element.type == ElementType.RECTANGLE:
        w, h = element.width, element.height
        return [_polygon(element, "rectangle", [[0, 0], [w, 0], [w, h], [0, h]])]
    if element.type == ElementType.DIAMOND:
        tx, ty, rx, ry, bx, by, lx, ly = get_diamond_points(element)
        return [_polygon(element, "polygon", [[tx, ty], [rx, ry], [bx, by], [lx, ly]])]
    if element.type == ElementType.ELLIPSE:
        return [_ellipse(element)]
    if element.type in ElementType.LINEAR:
        return _linear(element)
    if element.type == ElementType.TEXT:
        return []
    raise UnknownElementTypeError(element.type)


def ensure_shape(element: Element) -> List[Drawable]:
    """Return the cached shape, generating and caching it when stale."""
    shape = get_cached_shape(element)
    if shape is None:
        shape = generate_shape(element)
        set_cached_shape(element, shape)
    return shape
