"""
geometry/collision.py

Point hit-testing against elements and region queries over the scene.

Shapes drawn as outlines are only hit near their strokes; filled shapes are
hit anywhere inside (with the same tolerance around the edge). All scans run
from the end of the list so the topmost element wins.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from geometry.bounds import get_arrow_points, get_diamond_points, get_element_abs_coords
from geometry.math2d import distance_between_point_and_segment
from models import Element, ElementType, UnknownElementTypeError
from settings import get_settings
from utils import is_transparent

logger = logging.getLogger(__name__)


def _normalized(x1: float, y1: float, x2: float, y2: float):
    return min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)


def hit_test(element: Element, x: float, y: float) -> bool:
    """Return True if scene point (x, y) hits ``element``.

    Raises:
        UnknownElementTypeError: For an unrecognized element type.
    """
    threshold = get_settings().settings.canvas.hit.line_threshold
    filled = not is_transparent(element.background_color)

    if element.type == ElementType.ELLIPSE:
        return _hit_ellipse(element, x, y, threshold, filled)
    if element.type == ElementType.RECTANGLE:
        return _hit_rectangle(element, x, y, threshold, filled)
    if element.type == ElementType.DIAMOND:
        return _hit_diamond(element, x, y, threshold, filled)
    if element.type in ElementType.LINEAR:
        return _hit_linear(element, x, y, threshold)
    if element.type == ElementType.TEXT:
        x1, y1, x2, y2 = _normalized(*get_element_abs_coords(element))
        return x1 <= x <= x2 and y1 <= y <= y2
    if element.type == ElementType.SELECTION:
        logger.warning("Hit test requested for selection element %s", element.id)
        return False
    raise UnknownElementTypeError(element.type)


def _hit_ellipse(element: Element, x: float, y: float, threshold: float, filled: bool) -> bool:
    # Closest point on the ellipse by fixed-point iteration on the evolute
    px = abs(x - element.x - element.width / 2)
    py = abs(y - element.y - element.height / 2)
    a = abs(element.width) / 2
    b = abs(element.height) / 2

    if a == 0 or b == 0:
        # Degenerate ellipse collapses to its axis segment
        dist = distance_between_point_and_segment(px, py, 0, 0, a, b)
        return dist < threshold

    tx = 0.707
    ty = 0.707
    for _ in range(4):
        xx = a * tx
        yy = b * ty

        ex = ((a * a - b * b) * tx ** 3) / a
        ey = ((b * b - a * a) * ty ** 3) / b

        rx = xx - ex
        ry = yy - ey

        qx = px - ex
        qy = py - ey

        r = math.hypot(ry, rx)
        q = math.hypot(qy, qx)
        if q == 0:
            break

        tx = min(1.0, max(0.0, ((qx * r) / q + ex) / a))
        ty = min(1.0, max(0.0, ((qy * r) / q + ey) / b))
        t = math.hypot(ty, tx)
        tx /= t
        ty /= t

    if filled:
        return a * tx - (px - threshold) >= 0 and b * ty - (py - threshold) >= 0
    return math.hypot(a * tx - px, b * ty - py) < threshold


def _hit_rectangle(element: Element, x: float, y: float, threshold: float, filled: bool) -> bool:
    x1, y1, x2, y2 = _normalized(*get_element_abs_coords(element))

    if filled:
        return (
            x1 - threshold < x < x2 + threshold
            and y1 - threshold < y < y2 + threshold
        )

    # (x1, y1) --A-- (x2, y1)
    #    |D             |B
    # (x1, y2) --C-- (x2, y2)
    return (
        distance_between_point_and_segment(x, y, x1, y1, x2, y1) < threshold  # A
        or distance_between_point_and_segment(x, y, x2, y1, x2, y2) < threshold  # B
        or distance_between_point_and_segment(x, y, x2, y2, x1, y2) < threshold  # C
        or distance_between_point_and_segment(x, y, x1, y2, x1, y1) < threshold  # D
    )


def _hit_diamond(element: Element, x: float, y: float, threshold: float, filled: bool) -> bool:
    x -= element.x
    y -= element.y
    top_x, top_y, right_x, right_y, bottom_x, bottom_y, left_x, left_y = get_diamond_points(element)

    if filled:
        if top_y > bottom_y:
            top_y, bottom_y = bottom_y, top_y
        if right_x < left_x:
            left_x, right_x = right_x, left_x

        top_y -= threshold
        bottom_y += threshold
        left_x -= threshold
        right_x += threshold

        # All deltas must be <= 0; a positive delta is outside that edge.
        #
        #          (top)
        #     D  /       \ A
        #  (left)         (right)
        #     C  \       / B
        #         (bottom)
        return (
            (left_x - top_x) * (y - left_y) - (left_x - x) * (top_y - left_y) <= 0
            and (top_x - right_x) * (y - right_y) - (x - right_x) * (top_y - right_y) <= 0
            and (right_x - bottom_x) * (y - bottom_y) - (x - bottom_x) * (right_y - bottom_y) <= 0
            and (bottom_x - left_x) * (y - left_y) - (x - left_x) * (bottom_y - left_y) <= 0
        )

    return (
        distance_between_point_and_segment(x, y, top_x, top_y, right_x, right_y) < threshold
        or distance_between_point_and_segment(x, y, right_x, right_y, bottom_x, bottom_y) < threshold
        or distance_between_point_and_segment(x, y, bottom_x, bottom_y, left_x, left_y) < threshold
        or distance_between_point_and_segment(x, y, left_x, left_y, top_x, top_y) < threshold
    )


def _hit_linear(element: Element, x: float, y: float, threshold: float) -> bool:
    points = element.points
    if not points:
        return False
    x -= element.x
    y -= element.y

    if len(points) == 1:
        return math.hypot(x - points[0][0], y - points[0][1]) < threshold

    for i in range(1, len(points)):
        x1, y1 = points[i - 1]
        x2, y2 = points[i]
        if distance_between_point_and_segment(x, y, x1, y1, x2, y2) < threshold:
            return True

    if element.type == ElementType.ARROW:
        tip_x, tip_y, x3, y3, x4, y4 = get_arrow_points(element)
        return (
            distance_between_point_and_segment(x, y, x3, y3, tip_x, tip_y) < threshold
            or distance_between_point_and_segment(x, y, x4, y4, tip_x, tip_y) < threshold
        )
    return False


def get_element_at_position(elements: Sequence[Element], x: float, y: float) -> Optional[Element]:
    """Topmost non-deleted element hit at (x, y), or None."""
    for element in reversed(elements):
        if element.is_deleted:
            continue
        if hit_test(element, x, y):
            return element
    return None


def get_element_containing_position(elements: Sequence[Element], x: float, y: float) -> Optional[Element]:
    """Topmost non-deleted element whose bounds strictly contain (x, y)."""
    for element in reversed(elements):
        if element.is_deleted:
            continue
        x1, y1, x2, y2 = _normalized(*get_element_abs_coords(element))
        if x1 < x < x2 and y1 < y < y2:
            return element
    return None


def get_elements_within_selection(elements: Sequence[Element], selection: Element) -> list:
    """Non-deleted elements whose bounds are fully enclosed by ``selection``."""
    sx1, sy1, sx2, sy2 = _normalized(*get_element_abs_coords(selection))
    result = []
    for element in elements:
        if element.type == ElementType.SELECTION or element.is_deleted:
            continue
        ex1, ey1, ex2, ey2 = _normalized(*get_element_abs_coords(element))
        if sx1 <= ex1 and sy1 <= ey1 and ex2 <= sx2 and ey2 <= sy2:
            result.append(element)
    return result
