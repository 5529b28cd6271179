"""
transform package

Resize handles, resize arithmetic, normalization and dragging.
"""

from transform.handles import (
    ResizeHandle,
    handler_rectangles,
    resize_test,
    get_element_with_resize_handle,
    normalize_resize_handle,
    get_cursor_for_resize_handle,
)
from transform.resize import (
    resize_element,
    arrow_resize_origin,
    arrow_resize_end,
    get_perfect_element_size,
    normalize_dimensions,
    is_invisibly_small_element,
    drag_selected_elements,
)

__all__ = [
    "ResizeHandle",
    "handler_rectangles",
    "resize_test",
    "get_element_with_resize_handle",
    "normalize_resize_handle",
    "get_cursor_for_resize_handle",
    "resize_element",
    "arrow_resize_origin",
    "arrow_resize_end",
    "get_perfect_element_size",
    "normalize_dimensions",
    "is_invisibly_small_element",
    "drag_selected_elements",
]
