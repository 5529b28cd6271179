"""
models.py

Element data model and constants for the Roughboard application.

Elements are plain dataclasses. Code outside this module must change an
element through ``mutate_element`` so the version counter and the cached
hand-drawn shape stay in step.
"""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from settings import get_settings
from utils import random_id, random_seed


class UnknownElementTypeError(ValueError):
    """Raised when an element carries a type tag no dispatcher knows."""

    def __init__(self, element_type: Any):
        super().__init__(f"Unknown element type: {element_type!r}")
        self.element_type = element_type


class MalformedElementError(ValueError):
    """Raised when an interchange element has a field of the wrong shape."""


# ----------------------------
# Element type constants
# ----------------------------

class ElementType:
    """Element variant tags. SELECTION doubles as the select tool."""
    SELECTION = "selection"
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"
    ELLIPSE = "ellipse"
    ARROW = "arrow"
    LINE = "line"
    TEXT = "text"

    ALL = (SELECTION, RECTANGLE, DIAMOND, ELLIPSE, ARROW, LINE, TEXT)
    LINEAR = (ARROW, LINE)
    BOX = (SELECTION, RECTANGLE, DIAMOND, ELLIPSE)


class FillStyle:
    """Background fill patterns."""
    HACHURE = "hachure"
    CROSS_HATCH = "cross-hatch"
    SOLID = "solid"


class TextAlign:
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ----------------------------
# Element models
# ----------------------------

@dataclass
class Element:
    """Common fields of every scene element.

    ``x``/``y`` is the anchor. ``width``/``height`` are offsets from it and
    may be negative while a drag is in progress.
    """
    id: str = ""
    type: str = ElementType.RECTANGLE
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    stroke_color: str = "#000000"
    background_color: str = "transparent"
    fill_style: str = FillStyle.HACHURE
    stroke_width: float = 1
    roughness: float = 1
    opacity: int = 100
    seed: int = 0
    version: int = 1
    is_deleted: bool = False
    is_selected: bool = False
    group_ids: List[str] = field(default_factory=list)
    # Cached generated shape and the version it was generated for
    shape: Any = field(default=None, repr=False, compare=False)
    shape_version: int = field(default=-1, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to interchange keys (camelCase).

        The shape cache and the selection flag are not part of the
        interchange format.
        """
        d = {}
        for f in fields(self):
            key = _FIELD_TO_KEY.get(f.name)
            if key is None:
                continue
            value = getattr(self, f.name)
            if isinstance(value, list):
                value = copy.deepcopy(value)
            d[key] = value
        return d


@dataclass
class LinearElement(Element):
    """Arrow or line. ``points`` are relative to x/y; the first is [0, 0]."""
    type: str = ElementType.ARROW
    points: List[List[float]] = field(default_factory=list)


@dataclass
class TextElement(Element):
    type: str = ElementType.TEXT
    text: str = ""
    font: str = "20px Virgil"
    baseline: float = 0.0
    text_align: str = TextAlign.LEFT


# Interchange key for each dataclass field (None = not serialized)
_FIELD_TO_KEY: Dict[str, Optional[str]] = {
    "id": "id",
    "type": "type",
    "x": "x",
    "y": "y",
    "width": "width",
    "height": "height",
    "stroke_color": "strokeColor",
    "background_color": "backgroundColor",
    "fill_style": "fillStyle",
    "stroke_width": "strokeWidth",
    "roughness": "roughness",
    "opacity": "opacity",
    "seed": "seed",
    "version": "version",
    "is_deleted": "isDeleted",
    "is_selected": None,
    "group_ids": "groupIds",
    "shape": None,
    "shape_version": None,
    "points": "points",
    "text": "text",
    "font": "font",
    "baseline": "baseline",
    "text_align": "textAlign",
}
_KEY_TO_FIELD = {v: k for k, v in _FIELD_TO_KEY.items() if v is not None}
_KEY_TO_FIELD["isSelected"] = "is_selected"


def is_linear_element(element: Optional[Element]) -> bool:
    return element is not None and element.type in ElementType.LINEAR


def is_text_element(element: Optional[Element]) -> bool:
    return element is not None and element.type == ElementType.TEXT


# ----------------------------
# Construction
# ----------------------------

def _style_defaults() -> Dict[str, Any]:
    """Creation style taken from settings when the caller omits it."""
    style = get_settings().settings.defaults.style
    return {
        "stroke_color": style.stroke_color,
        "background_color": style.background_color,
        "fill_style": style.fill_style,
        "stroke_width": style.stroke_width,
        "roughness": style.roughness,
        "opacity": style.opacity,
    }


def new_element(element_type: str, x: float, y: float, width: float = 0, height: float = 0,
                **style: Any) -> Element:
    """Create a box-like element (selection, rectangle, diamond, ellipse).

    Args:
        element_type: One of ``ElementType.BOX``.
        x: Anchor x.
        y: Anchor y.
        width: Initial width.
        height: Initial height.
        **style: stroke_color, background_color, fill_style, stroke_width,
            roughness, opacity. Missing values come from settings.

    Returns:
        A new Element with a fresh id and seed.
    """
    if element_type not in ElementType.ALL:
        raise UnknownElementTypeError(element_type)
    if element_type in ElementType.LINEAR:
        return new_linear_element(element_type, x, y, **style)
    if element_type == ElementType.TEXT:
        return new_text_element(x, y, style.pop("text", ""), **style)
    kwargs = _style_defaults()
    kwargs.update(style)
    return Element(
        id=random_id(), type=element_type, x=x, y=y, width=width, height=height,
        seed=random_seed(), **kwargs,
    )


def new_linear_element(element_type: str, x: float, y: float,
                       points: Optional[List[List[float]]] = None, **style: Any) -> LinearElement:
    """Create an arrow or line anchored at (x, y)."""
    if element_type not in ElementType.LINEAR:
        raise UnknownElementTypeError(element_type)
    kwargs = _style_defaults()
    kwargs.update(style)
    return LinearElement(
        id=random_id(), type=element_type, x=x, y=y,
        points=[list(p) for p in (points or [])],
        seed=random_seed(), **kwargs,
    )


def new_text_element(x: float, y: float, text: str, font: Optional[str] = None,
                     width: float = 0, height: float = 0, baseline: float = 0,
                     text_align: str = TextAlign.LEFT, **style: Any) -> TextElement:
    """Create a text element. Size and baseline come from the caller's metrics."""
    kwargs = _style_defaults()
    kwargs.update(style)
    if font is None:
        font = get_settings().settings.defaults.style.font
    return TextElement(
        id=random_id(), x=x, y=y, width=width, height=height, text=text,
        font=font, baseline=baseline, text_align=text_align,
        seed=random_seed(), **kwargs,
    )


def clone_element(element: Element) -> Element:
    """Deep copy keeping id and version. The shape cache is dropped."""
    c = copy.deepcopy(element)
    c.shape = None
    c.shape_version = -1
    return c


def duplicate_element(element: Element) -> Element:
    """Copy an element under a fresh id and seed."""
    c = clone_element(element)
    c.id = random_id()
    c.seed = random_seed()
    return c


# ----------------------------
# Mutation
# ----------------------------

def mutate_element(element: Element, **updates: Any) -> Element:
    """Apply field updates, bump the version and invalidate the shape cache.

    Args:
        element: The element to change in place.
        **updates: Field names and their new values.

    Returns:
        The same element, for chaining.

    Raises:
        AttributeError: If a field name does not exist on the element.
    """
    for name, value in updates.items():
        if name in ("shape", "shape_version", "version") or not hasattr(element, name):
            raise AttributeError(f"{type(element).__name__} has no mutable field {name!r}")
        if name == "points":
            value = [list(p) for p in value]
        elif name == "group_ids":
            value = list(value)
        setattr(element, name, value)
    element.version += 1
    element.shape = None
    element.shape_version = -1
    return element


def get_cached_shape(element: Element) -> Any:
    """Return the cached shape, or None when it belongs to an older version."""
    if element.shape is not None and element.shape_version == element.version:
        return element.shape
    return None


def set_cached_shape(element: Element, shape: Any) -> None:
    element.shape = shape
    element.shape_version = element.version


def invalidate_shape(element: Element) -> None:
    element.shape = None
    element.shape_version = -1


# ----------------------------
# Interchange
# ----------------------------

def element_from_dict(d: Dict[str, Any]) -> Element:
    """Build an element from interchange keys.

    Unknown keys are ignored; missing keys take dataclass defaults.

    Raises:
        UnknownElementTypeError: If ``type`` is not a known variant.
        MalformedElementError: If a geometry, style or text field has the
            wrong type, or a point is not an [x, y] pair of numbers.
    """
    element_type = d.get("type")
    if element_type in ElementType.LINEAR:
        cls = LinearElement
    elif element_type == ElementType.TEXT:
        cls = TextElement
    elif element_type in ElementType.BOX:
        cls = Element
    else:
        raise UnknownElementTypeError(element_type)

    allowed = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in d.items():
        name = _KEY_TO_FIELD.get(key)
        if name is None or name not in allowed:
            continue
        if isinstance(value, list):
            value = copy.deepcopy(value)
        kwargs[name] = value
    element = cls(**kwargs)
    _check_fields(element)
    return element


_NUMBER_FIELDS = ("x", "y", "width", "height", "stroke_width", "roughness", "opacity", "seed", "version")
_STRING_FIELDS = ("id", "stroke_color", "background_color", "fill_style")


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _check_fields(element: Element) -> None:
    for name in _NUMBER_FIELDS:
        value = getattr(element, name)
        if not _is_number(value):
            raise MalformedElementError(f"{element.type}.{name} must be a number, got {value!r}")
    for name in _STRING_FIELDS:
        value = getattr(element, name)
        if not isinstance(value, str):
            raise MalformedElementError(f"{element.type}.{name} must be a string, got {value!r}")
    if not isinstance(element.group_ids, list):
        raise MalformedElementError(f"{element.type}.group_ids must be a list")

    if isinstance(element, LinearElement):
        if not isinstance(element.points, list):
            raise MalformedElementError(f"{element.type}.points must be a list")
        for point in element.points:
            if not (isinstance(point, list) and len(point) == 2 and all(_is_number(v) for v in point)):
                raise MalformedElementError(f"{element.type} point must be [x, y], got {point!r}")
    elif isinstance(element, TextElement):
        if not isinstance(element.text, str) or not isinstance(element.font, str):
            raise MalformedElementError("text and font must be strings")
        if not _is_number(element.baseline):
            raise MalformedElementError(f"text.baseline must be a number, got {element.baseline!r}")
