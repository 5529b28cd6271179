"""
geometry/bounds.py

Absolute bounds of elements and the derived point sets used for drawing and
hit-testing (diamond vertices, arrowhead wings).

Box-like elements may carry negative width/height while a drag is running;
their bounds are returned as-is ([x, y, x + w, y + h]) and callers that need
ordered corners must normalize.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence

import numpy as np

from geometry.math2d import rotate
from models import Element, get_cached_shape, is_linear_element
from settings import get_settings

# Samples per cubic Bezier segment when measuring a rendered curve
BEZIER_SAMPLES = 11


def get_element_abs_coords(element: Element) -> List[float]:
    """Return [x1, y1, x2, y2] for an element.

    Linear elements use the control points of their rendered curve when a
    valid cached shape exists, otherwise the raw points.
    """
    if is_linear_element(element):
        return _get_linear_element_abs_bounds(element)
    return [
        element.x,
        element.y,
        element.x + element.width,
        element.y + element.height,
    ]


def _get_linear_element_abs_bounds(element: Element) -> List[float]:
    shape = get_cached_shape(element)
    if len(element.points) < 2 or not shape:
        if not element.points:
            return [element.x, element.y, element.x, element.y]
        xs = [p[0] for p in element.points]
        ys = [p[1] for p in element.points]
        return [
            min(xs) + element.x,
            min(ys) + element.y,
            max(xs) + element.x,
            max(ys) + element.y,
        ]

    # First drawable of a linear element is always the curve
    ops = shape[0].sets[0].ops
    t = np.linspace(0.0, 1.0, BEZIER_SAMPLES)
    current = (0.0, 0.0)
    xs: List[np.ndarray] = []
    ys: List[np.ndarray] = []
    for op in ops:
        if op.op == "move":
            current = (op.data[0], op.data[1])
        elif op.op == "bcurveTo":
            x1, y1, x2, y2, x3, y3 = op.data
            x0, y0 = current
            mt = 1.0 - t
            xs.append(mt ** 3 * x0 + 3 * mt ** 2 * t * x1 + 3 * mt * t ** 2 * x2 + t ** 3 * x3)
            ys.append(mt ** 3 * y0 + 3 * mt ** 2 * t * y1 + 3 * mt * t ** 2 * y2 + t ** 3 * y3)
            current = (x3, y3)

    if not xs:
        px = [p[0] for p in element.points]
        py = [p[1] for p in element.points]
        return [min(px) + element.x, min(py) + element.y, max(px) + element.x, max(py) + element.y]

    all_x = np.concatenate(xs)
    all_y = np.concatenate(ys)
    return [
        float(all_x.min()) + element.x,
        float(all_y.min()) + element.y,
        float(all_x.max()) + element.x,
        float(all_y.max()) + element.y,
    ]


def get_diamond_points(element: Element) -> List[float]:
    """Return [topX, topY, rightX, rightY, bottomX, bottomY, leftX, leftY].

    Coordinates are local to the element anchor. The offset keeps the top
    and right vertices off zero.
    """
    offset = get_settings().settings.canvas.shapes.diamond_vertex_offset
    top_x = math.floor(element.width / 2) + offset
    top_y = 0
    right_x = element.width
    right_y = math.floor(element.height / 2) + offset
    bottom_x = top_x
    bottom_y = element.height
    left_x = top_y
    left_y = right_y
    return [top_x, top_y, right_x, right_y, bottom_x, bottom_y, left_x, left_y]


def get_arrow_points(element: Element) -> List[float]:
    """Return [x2, y2, x3, y3, x4, y4]: the tip and both wing ends.

    Local coordinates. The wing length is capped by half the total path
    length so short arrows keep a proportional head.
    """
    lines = get_settings().settings.canvas.lines
    points: Sequence[Sequence[float]] = element.points
    x1, y1 = points[-2] if len(points) >= 2 else (0.0, 0.0)
    x2, y2 = points[-1]

    dist = math.hypot(x2 - x1, y2 - y1)
    arrow_length = 0.0
    for idx, (cx, cy) in enumerate(points):
        px, py = points[idx - 1] if idx > 0 else (0.0, 0.0)
        arrow_length += math.hypot(cx - px, cy - py)

    if dist == 0:
        return [x2, y2, x2, y2, x2, y2]

    min_size = min(lines.arrowhead_size, arrow_length / 2)
    xs = x2 - ((x2 - x1) / dist) * min_size
    ys = y2 - ((y2 - y1) / dist) * min_size

    angle = math.radians(lines.arrowhead_angle)
    x3, y3 = rotate(xs, ys, x2, y2, -angle)
    x4, y4 = rotate(xs, ys, x2, y2, angle)
    return [x2, y2, x3, y3, x4, y4]


def get_common_bounds(elements: Iterable[Element]) -> List[float]:
    """Union of the bounds of ``elements`` as [minX, minY, maxX, maxY].

    An empty input yields infinities.
    """
    min_x = math.inf
    min_y = math.inf
    max_x = -math.inf
    max_y = -math.inf
    for element in elements:
        x1, y1, x2, y2 = get_element_abs_coords(element)
        min_x = min(min_x, x1, x2)
        min_y = min(min_y, y1, y2)
        max_x = max(max_x, x1, x2)
        max_y = max(max_y, y1, y2)
    return [min_x, min_y, max_x, max_y]
