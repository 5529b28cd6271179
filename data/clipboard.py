"""
data/clipboard.py

Clipboard payloads for copy / cut / paste of elements.

Elements travel as a JSON array of interchange dicts. Anything else on the
clipboard is treated as plain text by the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, List, Optional

from models import (
    Element,
    ElementType,
    MalformedElementError,
    UnknownElementTypeError,
    element_from_dict,
)

logger = logging.getLogger(__name__)

CLIPBOARD_TYPE = "roughboard/clipboard"


def serialize_clipboard(elements: Iterable[Element]) -> str:
    """JSON array of the given non-deleted elements."""
    return json.dumps([e.to_dict() for e in elements if not e.is_deleted])


def looks_like_json(text: str) -> bool:
    stripped = (text or "").strip()
    return stripped.startswith("[") or stripped.startswith("{")


def parse_clipboard(text: str) -> Optional[List[Element]]:
    """Parse an element payload.

    Accepts a bare array or ``{"type": "roughboard/clipboard", "elements": [...]}``.

    Returns:
        The elements, or None when the text is not a usable element payload.
    """
    if not looks_like_json(text):
        return None
    try:
        data = json.loads(text)
    except ValueError:
        logger.warning("Ignoring clipboard content that is not valid JSON")
        return None

    if isinstance(data, dict) and data.get("type") == CLIPBOARD_TYPE:
        data = data.get("elements")
    if not isinstance(data, list) or not data:
        logger.warning("Ignoring clipboard JSON without elements")
        return None

    elements: List[Element] = []
    for entry in data:
        if not isinstance(entry, dict) or entry.get("type") == ElementType.SELECTION:
            continue
        try:
            elements.append(element_from_dict(entry))
        except (UnknownElementTypeError, MalformedElementError, TypeError) as e:
            logger.warning("Ignoring clipboard element: %s", e)
            return None
    return elements or None
