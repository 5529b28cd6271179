"""
canvas package

Hand-drawn shape generation, QPainter rendering and the canvas widget.
"""

from canvas.rough import Op, OpSet, Drawable, generate_shape, ensure_shape
from canvas.renderer import render_element, render_scene
from canvas.view import CanvasView, qt_measure_text

__all__ = [
    "Op",
    "OpSet",
    "Drawable",
    "generate_shape",
    "ensure_shape",
    "render_element",
    "render_scene",
    "CanvasView",
    "qt_measure_text",
]
