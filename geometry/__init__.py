"""
geometry package

Pure 2D math, element bounds and hit-testing.
"""

from geometry.math2d import rotate, distance2d, distance_between_point_and_segment
from geometry.bounds import (
    get_element_abs_coords,
    get_diamond_points,
    get_arrow_points,
    get_common_bounds,
)
from geometry.collision import (
    hit_test,
    get_element_at_position,
    get_element_containing_position,
    get_elements_within_selection,
)

__all__ = [
    "rotate",
    "distance2d",
    "distance_between_point_and_segment",
    "get_element_abs_coords",
    "get_diamond_points",
    "get_arrow_points",
    "get_common_bounds",
    "hit_test",
    "get_element_at_position",
    "get_element_containing_position",
    "get_elements_within_selection",
]
