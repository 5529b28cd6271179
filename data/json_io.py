"""
data/json_io.py

Scene JSON format and the restore step that upgrades saved scenes.

File layout::

    {
      "type": "roughboard",
      "version": 1,
      "source": "roughboard-desktop",
      "elements": [...],
      "appState": {"viewBackgroundColor": "#ffffff"}
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from app_state import AppState, clean_app_state_for_export
from geometry.bounds import get_common_bounds
from models import (
    Element,
    ElementType,
    MalformedElementError,
    UnknownElementTypeError,
    element_from_dict,
    is_text_element,
)
from transform.resize import is_invisibly_small_element, normalize_dimensions
from utils import format_font, parse_font, random_id

logger = logging.getLogger(__name__)

SCENE_TYPE = "roughboard"
SCENE_VERSION = 1
SCENE_SOURCE = "roughboard-desktop"


class SceneLoadError(ValueError):
    """Raised when scene JSON cannot be parsed into elements."""


def serialize_as_json(elements: Iterable[Element], app_state: AppState) -> str:
    """Serialize the non-deleted elements and the exported view state."""
    payload = {
        "type": SCENE_TYPE,
        "version": SCENE_VERSION,
        "source": SCENE_SOURCE,
        "elements": [e.to_dict() for e in elements if not e.is_deleted],
        "appState": clean_app_state_for_export(app_state),
    }
    return json.dumps(payload, indent=2)


def load_from_json(text: str) -> Tuple[List[Element], Dict[str, Any]]:
    """Parse scene JSON and restore it.

    Returns:
        (elements, app_state_dict)

    Raises:
        SceneLoadError: If the text is not a scene document.
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise SceneLoadError(f"Invalid scene JSON: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("elements"), list):
        raise SceneLoadError("Scene JSON must be an object with an 'elements' list")
    app_state = data.get("appState")
    if not isinstance(app_state, dict):
        app_state = {}
    return restore(data["elements"], app_state)


def save_as_json(path: Union[str, Path], elements: Iterable[Element], app_state: AppState) -> None:
    Path(path).write_text(serialize_as_json(elements, app_state), encoding="utf-8")


def load_from_file(path: Union[str, Path]) -> Tuple[List[Element], Dict[str, Any]]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SceneLoadError(f"Cannot read {path}: {e}") from e
    return load_from_json(text)


# ----------------------------
# Restore / upgrade
# ----------------------------

def _upgrade_points(d: Dict[str, Any]) -> None:
    points = d.get("points")
    width = d.get("width", 0) or 0
    height = d.get("height", 0) or 0
    if d["type"] == ElementType.ARROW:
        if isinstance(points, list):
            d["points"] = points if points else [[0, 0]]
        else:
            # Arrows used to be described by width/height only
            d["points"] = [[0, 0], [width, height]]
    elif not isinstance(points, list) or not points:
        d["points"] = [[0, 0], [width, height]]


def _upgrade_font(d: Dict[str, Any]) -> None:
    if "fontSize" in d or "fontFamily" in d:
        size, family = parse_font(d.get("font", ""))
        d["font"] = format_font(d.pop("fontSize", size) or size, d.pop("fontFamily", family) or family)
        return
    size, family = parse_font(d.get("font", ""))
    d["font"] = format_font(size, family)
    if not d.get("textAlign"):
        d["textAlign"] = "left"


def _fill_defaults(d: Dict[str, Any]) -> None:
    d["version"] = d.get("version") or 1
    d["id"] = d.get("id") or random_id()
    d["isDeleted"] = False
    d["fillStyle"] = d.get("fillStyle") or "hachure"
    d["strokeWidth"] = d.get("strokeWidth") or 1
    if d.get("roughness") is None:
        d["roughness"] = 1
    if d.get("opacity") is None:
        d["opacity"] = 100
    d["groupIds"] = d.get("groupIds") or []


def restore(saved_elements: List[Dict[str, Any]], saved_state: Optional[Dict[str, Any]],
            scroll_to_content: bool = False,
            viewport_size: Tuple[float, float] = (0.0, 0.0)) -> Tuple[List[Element], Dict[str, Any]]:
    """Upgrade saved element dicts into elements.

    Drops selection pseudo-elements and invisibly small elements, gives
    legacy linear elements points, normalizes fonts and fills defaults.

    Args:
        saved_elements: Raw element dicts.
        saved_state: Saved app state keys, or None.
        scroll_to_content: Centre the viewport on the restored content.
        viewport_size: (width, height) used when centring.

    Returns:
        (elements, app_state_dict)

    Raises:
        SceneLoadError: If an entry is not an object, has an unknown type or
            carries fields of the wrong shape.
    """
    elements: List[Element] = []
    for raw in saved_elements:
        if not isinstance(raw, dict):
            raise SceneLoadError(f"Element entry must be an object, got {type(raw).__name__}")
        d = dict(raw)
        element_type = d.get("type")
        if element_type == ElementType.SELECTION:
            continue
        try:
            if element_type in ElementType.LINEAR:
                _upgrade_points(d)
            else:
                d.pop("points", None)
                if element_type == ElementType.TEXT:
                    _upgrade_font(d)
            _fill_defaults(d)
            element = element_from_dict(d)
        except (UnknownElementTypeError, MalformedElementError) as e:
            raise SceneLoadError(str(e)) from e
        except (TypeError, ValueError) as e:
            # Legacy font or size fields of the wrong type
            raise SceneLoadError(f"Malformed {element_type} element: {e}") from e

        if is_invisibly_small_element(element):
            continue
        if not is_text_element(element):
            normalize_dimensions(element)
        elements.append(element)

    state = dict(saved_state or {})
    if scroll_to_content:
        state.update(calculate_scroll_center(elements, viewport_size))
    return elements, state


def calculate_scroll_center(elements: List[Element],
                            viewport_size: Tuple[float, float]) -> Dict[str, float]:
    """Scroll offsets placing the centre of the content in the middle of the viewport."""
    visible = [e for e in elements if not e.is_deleted]
    if not visible:
        return {"scrollX": 0.0, "scrollY": 0.0}
    x1, y1, x2, y2 = get_common_bounds(visible)
    center_x = (x1 + x2) / 2
    center_y = (y1 + y2) / 2
    return {
        "scrollX": viewport_size[0] / 2 - center_x,
        "scrollY": viewport_size[1] / 2 - center_y,
    }
