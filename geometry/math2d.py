"""
geometry/math2d.py

Small 2D helpers shared by bounds, collision and resize code.
"""

from __future__ import annotations

import math
from typing import Tuple


def rotate(x1: float, y1: float, x2: float, y2: float, angle: float) -> Tuple[float, float]:
    """Rotate (x1, y1) around (x2, y2) by ``angle`` radians.

    Positive angles turn clockwise in screen coordinates (y grows downwards).
    """
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (
        (x1 - x2) * cos_a - (y1 - y2) * sin_a + x2,
        (x1 - x2) * sin_a + (y1 - y2) * cos_a + y2,
    )


def distance2d(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


def distance_between_point_and_segment(x: float, y: float,
                                       x1: float, y1: float,
                                       x2: float, y2: float) -> float:
    """Shortest distance from (x, y) to the segment (x1, y1)-(x2, y2).

    A zero-length segment degrades to the distance to its single point.
    """
    a = x - x1
    b = y - y1
    c = x2 - x1
    d = y2 - y1

    dot = a * c + b * d
    len_square = c * c + d * d
    param = -1.0
    if len_square != 0:
        param = dot / len_square

    if param < 0:
        xx, yy = x1, y1
    elif param > 1:
        xx, yy = x2, y2
    else:
        xx = x1 + param * c
        yy = y1 + param * d

    return math.hypot(x - xx, y - yy)
