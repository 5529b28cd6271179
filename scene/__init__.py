"""
scene package

Element store, z-order operations and the editing session controller.
"""

from scene.store import ElementStore
from scene.zindex import move_one_left, move_one_right, move_all_left, move_all_right
from scene.controller import SceneController, DragSession, default_measure_text

__all__ = [
    "ElementStore",
    "move_one_left",
    "move_one_right",
    "move_all_left",
    "move_all_right",
    "SceneController",
    "DragSession",
    "default_measure_text",
]
