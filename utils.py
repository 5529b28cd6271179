"""
utils.py

Utility functions for the Roughboard application.
"""

from __future__ import annotations

import math
import random
import re
import string
from typing import Tuple

from PyQt6.QtGui import QColor

TRANSPARENT = "transparent"

_ID_ALPHABET = string.ascii_letters + string.digits
_FONT_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)px\s+(.+?)\s*$")


def random_id(length: int = 21) -> str:
    """Return a random element id."""
    return "".join(random.choice(_ID_ALPHABET) for _ in range(length))


def random_seed() -> int:
    """Return a random seed for the hand-drawn generator."""
    return random.randint(0, 2 ** 31 - 1)


def parse_font(font: str, fallback_size: float = 20.0, fallback_family: str = "Virgil") -> Tuple[float, str]:
    """
    Split a CSS-style font string into size and family.

    Args:
        font: Font string like "20px Virgil"
        fallback_size: Size used when the string has no pixel size
        fallback_family: Family used when the string is empty

    Returns:
        (size_px, family) tuple
    """
    m = _FONT_RE.match(font or "")
    if m:
        return float(m.group(1)), m.group(2)
    family = (font or "").strip() or fallback_family
    return fallback_size, family


def format_font(size: float, family: str) -> str:
    """Inverse of parse_font."""
    if float(size).is_integer():
        size = int(size)
    return f"{size}px {family}"


def is_transparent(color: str) -> bool:
    """True for the no-fill sentinel (or an empty colour)."""
    return not color or color.strip().lower() == TRANSPARENT


def qcolor_to_hex(c: QColor, include_alpha: bool = False) -> str:
    """
    Convert a QColor to a hex string.

    Args:
        c: The QColor to convert
        include_alpha: If True, include alpha channel as 4th byte

    Returns:
        Hex string like "#RRGGBB" or "#RRGGBBAA"
    """
    if include_alpha:
        return "#{:02X}{:02X}{:02X}{:02X}".format(c.red(), c.green(), c.blue(), c.alpha())
    return "#{:02X}{:02X}{:02X}".format(c.red(), c.green(), c.blue())


def hex_to_qcolor(s: str, fallback: QColor, opacity: int = 100) -> QColor:
    """
    Parse a hex string to a QColor.

    Args:
        s: Hex string like "#RRGGBB" or "#RRGGBBAA", or "transparent"
        fallback: Color to return if parsing fails
        opacity: Element opacity 0-100 applied on top of the colour alpha

    Returns:
        Parsed QColor or fallback. "transparent" yields a fully transparent colour.
    """
    if is_transparent(s):
        return QColor(0, 0, 0, 0)
    color = QColor(fallback)
    s = s.strip()
    if s.startswith("#"):
        s = s[1:]
    try:
        if len(s) == 3:
            color = QColor(int(s[0] * 2, 16), int(s[1] * 2, 16), int(s[2] * 2, 16))
        elif len(s) == 6:
            color = QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16))
        elif len(s) == 8:
            color = QColor(int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16), int(s[6:8], 16))
    except ValueError:
        color = QColor(fallback)
    if opacity < 100:
        color.setAlpha(int(round(color.alpha() * max(0, opacity) / 100.0)))
    return color


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def hypot_len(points) -> float:
    """Total polyline length of a sequence of [x, y] points."""
    total = 0.0
    for i in range(1, len(points)):
        total += math.hypot(points[i][0] - points[i - 1][0], points[i][1] - points[i - 1][1])
    return total
