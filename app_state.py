"""
app_state.py

Editor state that is not part of the element list: current tool, gesture
references, style for new elements and the viewport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from models import Element, ElementType
from settings import get_settings


def default_project_name() -> str:
    return "roughboard-" + datetime.now().strftime("%Y%m%d-%H%M%S")


# Interchange key for each persisted field
_STATE_KEYS = {
    "element_type": "elementType",
    "element_locked": "elementLocked",
    "export_background": "exportBackground",
    "current_item_stroke_color": "currentItemStrokeColor",
    "current_item_background_color": "currentItemBackgroundColor",
    "current_item_fill_style": "currentItemFillStyle",
    "current_item_stroke_width": "currentItemStrokeWidth",
    "current_item_roughness": "currentItemRoughness",
    "current_item_opacity": "currentItemOpacity",
    "current_item_font": "currentItemFont",
    "view_background_color": "viewBackgroundColor",
    "scroll_x": "scrollX",
    "scroll_y": "scrollY",
    "cursor_x": "cursorX",
    "cursor_y": "cursorY",
    "zoom": "zoom",
    "name": "name",
}

_HISTORY_FIELDS = (
    "export_background",
    "current_item_stroke_color",
    "current_item_background_color",
    "current_item_fill_style",
    "current_item_stroke_width",
    "current_item_roughness",
    "current_item_opacity",
    "current_item_font",
    "view_background_color",
    "name",
)


@dataclass
class AppState:
    """Mutable editor state owned by the scene controller."""
    # Gesture references (never persisted)
    dragging_element: Optional[Element] = None
    resizing_element: Optional[Element] = None
    multi_element: Optional[Element] = None
    editing_element: Optional[Element] = None
    selection_element: Optional[Element] = None
    is_resizing: bool = False

    element_type: str = ElementType.SELECTION
    element_locked: bool = False
    export_background: bool = True

    current_item_stroke_color: str = "#000000"
    current_item_background_color: str = "transparent"
    current_item_fill_style: str = "hachure"
    current_item_stroke_width: float = 1
    current_item_roughness: float = 1
    current_item_opacity: int = 100
    current_item_font: str = "20px Virgil"
    view_background_color: str = "#ffffff"

    scroll_x: float = 0.0
    scroll_y: float = 0.0
    cursor_x: float = 0.0
    cursor_y: float = 0.0
    zoom: float = 1.0
    name: str = field(default_factory=default_project_name)

    def current_item_style(self) -> Dict[str, Any]:
        """Style keyword arguments for ``models.new_element``."""
        return {
            "stroke_color": self.current_item_stroke_color,
            "background_color": self.current_item_background_color,
            "fill_style": self.current_item_fill_style,
            "stroke_width": self.current_item_stroke_width,
            "roughness": self.current_item_roughness,
            "opacity": self.current_item_opacity,
        }

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        """Apply interchange keys; unknown keys are ignored."""
        for name, key in _STATE_KEYS.items():
            if key in data:
                setattr(self, name, data[key])

    def viewport_to_scene(self, x: float, y: float) -> Tuple[float, float]:
        return x / self.zoom - self.scroll_x, y / self.zoom - self.scroll_y

    def scene_to_viewport(self, x: float, y: float) -> Tuple[float, float]:
        return (x + self.scroll_x) * self.zoom, (y + self.scroll_y) * self.zoom


def get_default_app_state() -> AppState:
    """Fresh state using the default style from settings."""
    style = get_settings().settings.defaults.style
    return AppState(
        current_item_stroke_color=style.stroke_color,
        current_item_background_color=style.background_color,
        current_item_fill_style=style.fill_style,
        current_item_stroke_width=style.stroke_width,
        current_item_roughness=style.roughness,
        current_item_opacity=style.opacity,
        current_item_font=style.font,
        view_background_color=style.view_background_color,
    )


def clear_app_state_for_history(state: AppState) -> Dict[str, Any]:
    """Allow-listed fields that participate in undo/redo."""
    return {_STATE_KEYS[name]: getattr(state, name) for name in _HISTORY_FIELDS}


def clear_app_state_for_storage(state: AppState) -> Dict[str, Any]:
    """Everything except the transient gesture references."""
    return {key: getattr(state, name) for name, key in _STATE_KEYS.items()}


def clean_app_state_for_export(state: AppState) -> Dict[str, Any]:
    return {"viewBackgroundColor": state.view_background_color}
