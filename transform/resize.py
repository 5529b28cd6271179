"""
transform/resize.py

Resize arithmetic for a single element driven by pointer deltas.

Every write goes through ``mutate_element``. Box-like elements are allowed to
pass through negative width/height during a gesture; ``normalize_dimensions``
folds them back after each step.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from models import Element, ElementType, is_linear_element, mutate_element
from settings import get_settings
from transform.handles import ResizeHandle
from utils import hypot_len

# arrow_fn(element, dx, dy, pointer_x, pointer_y, perfect)
ArrowResizeFn = Callable[[Element, float, float, float, float, bool], None]


def _sign(v: float) -> int:
    if v > 0:
        return 1
    if v < 0:
        return -1
    return 0


def get_perfect_element_size(element_type: str, width: float, height: float) -> Tuple[float, float]:
    """Constrain a (width, height) drag to a perfect shape.

    Linear elements snap to horizontal, vertical or 45 degrees; other shapes
    become square (circle for ellipses). Selection boxes are left alone.
    """
    abs_width = abs(width)
    abs_height = abs(height)
    if element_type in ElementType.LINEAR:
        if abs_height < abs_width / 2:
            height = 0
        elif abs_width < abs_height / 2:
            width = 0
        else:
            height = abs_width * _sign(height)
    elif element_type != ElementType.SELECTION:
        height = abs_width * _sign(height)
    return width, height


def _points_extent(points: List[List[float]]) -> Tuple[float, float]:
    if not points:
        return 0.0, 0.0
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return max(xs) - min(xs), max(ys) - min(ys)


def arrow_resize_origin(element: Element, dx: float, dy: float,
                        pointer_x: float, pointer_y: float, perfect: bool) -> None:
    """Move the first point of a two-point linear element, keeping the end fixed."""
    points = [list(p) for p in element.points]
    p1 = points[1]
    x, y = element.x, element.y
    if perfect:
        abs_px = p1[0] + x
        abs_py = p1[1] + y
        width, height = get_perfect_element_size(
            element.type, pointer_x - x - p1[0], pointer_y - y - p1[1]
        )
        x = x + width + p1[0]
        y = y + height + p1[1]
        p1[0] = abs_px - x
        p1[1] = abs_py - y
    else:
        x += dx
        y += dy
        p1[0] -= dx
        p1[1] -= dy
    width, height = _points_extent(points)
    mutate_element(element, x=x, y=y, points=points, width=width, height=height)


def arrow_resize_end(element: Element, dx: float, dy: float,
                     pointer_x: float, pointer_y: float, perfect: bool) -> None:
    """Move the second point of a two-point linear element."""
    points = [list(p) for p in element.points]
    p1 = points[1]
    if perfect:
        width, height = get_perfect_element_size(
            element.type, pointer_x - element.x, pointer_y - element.y
        )
        p1[0] = width
        p1[1] = height
    else:
        p1[0] += dx
        p1[1] += dy
    width, height = _points_extent(points)
    mutate_element(element, points=points, width=width, height=height)


def _pick_arrow_fn(handle: str, p1: List[float]) -> ArrowResizeFn:
    """Decide which endpoint a corner handle drags, from the free point's signs."""
    px, py = p1
    if handle == ResizeHandle.NW:
        end = px < 0 or py < 0
    elif handle == ResizeHandle.NE:
        end = px >= 0
    elif handle == ResizeHandle.SW:
        end = px <= 0
    else:
        end = px > 0 or py > 0
    return arrow_resize_end if end else arrow_resize_origin


def _resize_box(element: Element, handle: str, dx: float, dy: float, perfect: bool) -> None:
    x, y, w, h = element.x, element.y, element.width, element.height

    if handle == ResizeHandle.NW:
        w -= dx
        x += dx
        if perfect:
            y += h - w
            h = w
        else:
            h -= dy
            y += dy
    elif handle == ResizeHandle.NE:
        w += dx
        if perfect:
            y += h - w
            h = w
        else:
            h -= dy
            y += dy
    elif handle == ResizeHandle.SW:
        w -= dx
        x += dx
        if perfect:
            h = w
        else:
            h += dy
    elif handle == ResizeHandle.SE:
        w += dx
        if perfect:
            h = w
        else:
            h += dy
    elif handle == ResizeHandle.N:
        h -= dy
        y += dy
    elif handle == ResizeHandle.S:
        h += dy
    elif handle == ResizeHandle.W:
        w -= dx
        x += dx
    elif handle == ResizeHandle.E:
        w += dx

    mutate_element(element, x=x, y=y, width=w, height=h)


def _resize_linear_edge(element: Element, handle: str, dx: float, dy: float) -> None:
    """Stretch a polyline along one axis.

    The point nearest the dragged edge follows the pointer, the farthest one
    stays put and the ones in between move proportionally.
    """
    x, y = element.x, element.y
    points = [list(p) for p in element.points]
    n = len(points)

    if handle in (ResizeHandle.N, ResizeHandle.S):
        axis, delta = 1, dy
    else:
        axis, delta = 0, dx

    if handle == ResizeHandle.N:
        y += dy
    elif handle == ResizeHandle.W:
        x += dx

    ordered = sorted(points, key=lambda p: p[axis])
    for i in range(1, n):
        if handle in (ResizeHandle.N, ResizeHandle.W):
            ordered[i][axis] -= delta / (n - i)
        else:
            ordered[i][axis] += delta / (n - i)

    # Re-anchor so the first point is the origin again
    ox, oy = points[0]
    if ox or oy:
        x += ox
        y += oy
        points = [[px - ox, py - oy] for px, py in points]

    width, height = _points_extent(points)
    mutate_element(element, x=x, y=y, points=points, width=width, height=height)


def resize_element(element: Element, handle: str, dx: float, dy: float,
                   pointer_x: float, pointer_y: float, perfect: bool,
                   arrow_fn: Optional[ArrowResizeFn] = None) -> Optional[ArrowResizeFn]:
    """Apply one resize step to ``element``.

    Args:
        element: Element being resized.
        handle: Active handle name.
        dx: Pointer delta since the previous step (scene units).
        dy: Pointer delta since the previous step (scene units).
        pointer_x: Current pointer position, used by perfect-shape endpoints.
        pointer_y: Current pointer position.
        perfect: Shift held; constrain to a perfect shape.
        arrow_fn: Endpoint function chosen earlier in this gesture, if any.

    Returns:
        The endpoint function used for a two-point linear corner resize (to
        be passed back on the next step), otherwise ``arrow_fn`` unchanged.
    """
    if is_linear_element(element):
        if handle in ResizeHandle.CORNERS and len(element.points) == 2:
            if arrow_fn is None:
                arrow_fn = _pick_arrow_fn(handle, element.points[1])
            arrow_fn(element, dx, dy, pointer_x, pointer_y, perfect)
            return arrow_fn
        if handle in ResizeHandle.EDGES and element.points:
            _resize_linear_edge(element, handle, dx, dy)
        return arrow_fn

    _resize_box(element, handle, dx, dy, perfect)
    return arrow_fn


def normalize_dimensions(element: Optional[Element]) -> bool:
    """Make width/height non-negative by moving the anchor. True if changed."""
    if element is None or is_linear_element(element):
        return False
    if element.width >= 0 and element.height >= 0:
        return False

    x, y, w, h = element.x, element.y, element.width, element.height
    if w < 0:
        w = abs(w)
        x -= w
    if h < 0:
        h = abs(h)
        y -= h
    mutate_element(element, x=x, y=y, width=w, height=h)
    return True


def is_invisibly_small_element(element: Element) -> bool:
    """True for elements too small to see or select."""
    threshold = get_settings().settings.canvas.shapes.invisible_threshold
    if is_linear_element(element):
        return len(element.points) < 2 or hypot_len(element.points) < threshold
    return abs(element.width) < threshold and abs(element.height) < threshold


def drag_selected_elements(elements: Iterable[Element], dx: float, dy: float) -> List[Element]:
    """Translate every selected, non-deleted element. Returns those moved."""
    moved = []
    for element in elements:
        if element.is_selected and not element.is_deleted:
            mutate_element(element, x=element.x + dx, y=element.y + dy)
            moved.append(element)
    return moved
