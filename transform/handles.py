"""
transform/handles.py

Resize handle placement and lookup.

Handles are square rectangles laid out around an element's bounds, outside
the dashed selection outline. Sizes are given in screen pixels and divided
by the zoom factor so handles keep a constant on-screen size.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from geometry.bounds import get_element_abs_coords
from models import Element, is_linear_element, is_text_element
from settings import get_settings

# (x, y, width, height) in scene coordinates
HandleRect = Tuple[float, float, float, float]


class ResizeHandle:
    """Handle names (compass directions)."""
    N = "n"
    S = "s"
    W = "w"
    E = "e"
    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"

    CORNERS = (NW, NE, SW, SE)
    EDGES = (N, S, W, E)


def _low_side(v: float, size: float, inset: float, margin: float) -> float:
    """Handle origin before the low edge of a span growing in ``size``'s direction."""
    if size >= 0:
        return v - inset - margin
    return v + inset


def _high_side(v: float, size: float, inset: float, margin: float) -> float:
    if size >= 0:
        return v + inset
    return v - inset - margin


def handler_rectangles(element: Element, zoom: float = 1.0) -> Dict[str, HandleRect]:
    """Compute the resize handles of an element.

    Args:
        element: The element to lay handles around.
        zoom: Current zoom factor; handle metrics are divided by it.

    Returns:
        Mapping of handle name to (x, y, w, h). Edge handles appear only when
        the matching dimension exceeds the configured minimum. Two-point
        linear elements expose a single diagonal pair.
    """
    cfg = get_settings().settings.canvas.handles
    handle_w = cfg.size / zoom
    handle_h = cfg.size / zoom
    margin = cfg.margin / zoom
    inset = cfg.dashed_line_margin / zoom
    min_size = cfg.min_size_for_edge_handles / zoom

    x1, y1, x2, y2 = get_element_abs_coords(element)
    width = x2 - x1
    height = y2 - y1

    left = _low_side(x1, width, inset, margin)
    right = _high_side(x2, width, inset, margin)
    top = _low_side(y1, height, inset, margin)
    bottom = _high_side(y2, height, inset, margin)

    handlers: Dict[str, HandleRect] = {
        ResizeHandle.NW: (left, top, handle_w, handle_h),
        ResizeHandle.NE: (right, top, handle_w, handle_h),
        ResizeHandle.SW: (left, bottom, handle_w, handle_h),
        ResizeHandle.SE: (right, bottom, handle_w, handle_h),
    }

    # Edge handles only when the span is wider than a few handles
    if abs(width) > min_size:
        center_x = x1 + width / 2 - handle_w / 2
        handlers[ResizeHandle.N] = (center_x, top, handle_w, handle_h)
        handlers[ResizeHandle.S] = (center_x, bottom, handle_w, handle_h)
    if abs(height) > min_size:
        center_y = y1 + height / 2 - handle_h / 2
        handlers[ResizeHandle.W] = (left, center_y, handle_w, handle_h)
        handlers[ResizeHandle.E] = (right, center_y, handle_w, handle_h)

    if is_linear_element(element) and len(element.points) == 2:
        px, py = element.points[1]
        if px == 0 or py == 0 or (px > 0) == (py > 0):
            keep = (ResizeHandle.NW, ResizeHandle.SE)
        else:
            keep = (ResizeHandle.NE, ResizeHandle.SW)
        return {k: handlers[k] for k in keep}

    return handlers


def resize_test(element: Element, x: float, y: float, zoom: float = 1.0) -> Optional[str]:
    """Return the handle of a selected element under scene point (x, y)."""
    if not element.is_selected or is_text_element(element):
        return None
    for handle, (hx, hy, hw, hh) in handler_rectangles(element, zoom).items():
        if hx <= x <= hx + hw and hy <= y <= hy + hh:
            return handle
    return None


def get_element_with_resize_handle(elements: Sequence[Element], x: float, y: float,
                                   zoom: float = 1.0) -> Optional[Tuple[Element, str]]:
    """(element, handle) when exactly one element is selected and a handle is hit."""
    selected = [e for e in elements if e.is_selected and not e.is_deleted]
    if len(selected) != 1:
        return None
    handle = resize_test(selected[0], x, y, zoom)
    if handle is None:
        return None
    return selected[0], handle


_SWAP_BOTH = {"nw": "se", "se": "nw", "ne": "sw", "sw": "ne"}
_SWAP_X = {"nw": "ne", "ne": "nw", "se": "sw", "sw": "se", "e": "w", "w": "e"}
_SWAP_Y = {"nw": "sw", "sw": "nw", "ne": "se", "se": "ne", "n": "s", "s": "n"}


def normalize_resize_handle(element: Element, handle: str) -> str:
    """Map a handle to its mirror when the element has flipped through an axis."""
    if is_linear_element(element):
        return handle
    if element.width >= 0 and element.height >= 0:
        return handle
    if element.width < 0 and element.height < 0:
        return _SWAP_BOTH.get(handle, handle)
    if element.width < 0:
        return _SWAP_X.get(handle, handle)
    return _SWAP_Y.get(handle, handle)


def get_cursor_for_resize_handle(handle: Optional[str]) -> str:
    """Cursor name for a handle: nwse-resize, nesw-resize, ns-resize or ew-resize."""
    if handle in (ResizeHandle.NW, ResizeHandle.SE):
        return "nwse-resize"
    if handle in (ResizeHandle.NE, ResizeHandle.SW):
        return "nesw-resize"
    if handle in (ResizeHandle.N, ResizeHandle.S):
        return "ns-resize"
    if handle in (ResizeHandle.W, ResizeHandle.E):
        return "ew-resize"
    return ""
