"""
canvas/renderer.py

QPainter rendering of the scene: elements, rubber-band selection, dashed
outlines around selected elements and resize handles.

All element drawing happens in scene coordinates; ``render_scene`` applies
the view transform (zoom, then scroll) once up front.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPainterPath, QPen

from app_state import AppState
from canvas.rough import Drawable, OpSet, ensure_shape
from debug_trace import trace
from geometry.bounds import get_element_abs_coords
from models import Element, ElementType, FillStyle, UnknownElementTypeError
from settings import get_settings
from transform.handles import HandleRect, handler_rectangles
from utils import clamp, hex_to_qcolor, parse_font

_FILL_PATTERNS = {
    FillStyle.HACHURE: Qt.BrushStyle.BDiagPattern,
    FillStyle.CROSS_HATCH: Qt.BrushStyle.DiagCrossPattern,
    FillStyle.SOLID: Qt.BrushStyle.SolidPattern,
}


def op_set_to_path(op_set: OpSet) -> QPainterPath:
    """Convert an op set into a QPainterPath."""
    path = QPainterPath()
    for op in op_set.ops:
        d = op.data
        if op.op == "move":
            path.moveTo(d[0], d[1])
        elif op.op == "bcurveTo":
            path.cubicTo(d[0], d[1], d[2], d[3], d[4], d[5])
        elif op.op == "lineTo":
            path.lineTo(d[0], d[1])
    if op_set.type == "fillPath":
        path.closeSubpath()
    return path


def _draw_drawable(painter: QPainter, drawable: Drawable, element: Element) -> None:
    stroke = hex_to_qcolor(element.stroke_color, QColor("#000000"))
    for op_set in drawable.sets:
        path = op_set_to_path(op_set)
        if op_set.type == "fillPath":
            fill = hex_to_qcolor(element.background_color, QColor(0, 0, 0, 0))
            brush = QBrush(fill, _FILL_PATTERNS.get(element.fill_style, Qt.BrushStyle.BDiagPattern))
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(brush)
            painter.drawPath(path)
        else:
            pen = QPen(stroke, max(float(element.stroke_width), 0.5))
            pen.setCapStyle(Qt.PenCapStyle.RoundCap)
            pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawPath(path)


def _draw_text(painter: QPainter, element: Element) -> None:
    size, family = parse_font(element.font)
    font = QFont(family)
    font.setPixelSize(max(1, int(round(size))))
    painter.setFont(font)
    painter.setPen(hex_to_qcolor(element.stroke_color, QColor("#000000")))

    lines = element.text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    line_height = element.height / len(lines) if lines else 0
    offset = element.height - element.baseline
    for i, line in enumerate(lines):
        painter.drawText(QPointF(0, (i + 1) * line_height - offset), line)


def render_element(painter: QPainter, element: Element) -> None:
    """Draw one element. The painter must already be in scene coordinates.

    Raises:
        UnknownElementTypeError: For an unrecognized element type.
    """
    if element.type == ElementType.SELECTION:
        sel = get_settings().settings.canvas.selection
        color = QColor(sel.rubber_band_color)
        color.setAlpha(sel.rubber_band_alpha)
        painter.fillRect(QRectF(element.x, element.y, element.width, element.height).normalized(), color)
        return
    if element.type not in ElementType.ALL:
        raise UnknownElementTypeError(element.type)

    painter.save()
    painter.translate(element.x, element.y)
    painter.setOpacity(clamp(element.opacity, 0, 100) / 100.0)
    if element.type == ElementType.TEXT:
        _draw_text(painter, element)
    else:
        for drawable in ensure_shape(element):
            _draw_drawable(painter, drawable, element)
    painter.restore()


def draw_handles(painter: QPainter, handles: Dict[str, HandleRect]) -> None:
    """Draw resize handles (rectangles already in scene coordinates)."""
    cfg = get_settings().settings.canvas.handles
    # Handle colors from settings. Defaults: border=#0078D7 (blue), fill=#FFFFFF (white)
    pen = QPen(QColor(cfg.border_color), 0)
    painter.setPen(pen)
    painter.setBrush(QBrush(QColor(cfg.fill_color)))
    for x, y, w, h in handles.values():
        painter.drawRect(QRectF(x, y, w, h))


def draw_selection_outline(painter: QPainter, element: Element, zoom: float) -> None:
    """Dashed rectangle around an element's bounds."""
    cfg = get_settings().settings.canvas
    margin = cfg.handles.dashed_line_margin / zoom
    x1, y1, x2, y2 = get_element_abs_coords(element)
    rect = QRectF(QPointF(x1, y1), QPointF(x2, y2)).normalized()
    rect.adjust(-margin, -margin, margin, margin)
    pen = QPen(QColor(cfg.selection.outline_color), 0, Qt.PenStyle.DashLine)
    painter.setPen(pen)
    painter.setBrush(Qt.BrushStyle.NoBrush)
    painter.drawRect(rect)


def render_scene(painter: QPainter, elements: Sequence[Element], app_state: AppState,
                 viewport: Optional[QRectF] = None, render_selection: bool = True) -> None:
    """Paint the whole scene.

    Args:
        painter: Active painter on the target device.
        elements: Scene elements in paint order (deleted ones are skipped).
        app_state: Supplies zoom, scroll, background and the rubber band.
        viewport: Device rectangle to clear with the view background.
        render_selection: Draw selection outlines and handles.
    """
    if viewport is not None:
        painter.fillRect(viewport, hex_to_qcolor(app_state.view_background_color, QColor("#ffffff")))

    painter.save()
    painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
    painter.scale(app_state.zoom, app_state.zoom)
    painter.translate(app_state.scroll_x, app_state.scroll_y)

    visible: List[Element] = [e for e in elements if not e.is_deleted]
    for element in visible:
        render_element(painter, element)
    trace(f"painted {len(visible)} elements", "PAINT")

    if app_state.selection_element is not None:
        render_element(painter, app_state.selection_element)

    if render_selection:
        selected = [e for e in visible if e.is_selected]
        for element in selected:
            draw_selection_outline(painter, element, app_state.zoom)
        if len(selected) == 1 and selected[0].type != ElementType.TEXT:
            draw_handles(painter, handler_rectangles(selected[0], app_state.zoom))

    painter.restore()
