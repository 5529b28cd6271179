"""
history.py

Snapshot-based undo/redo history.

Each entry is a JSON string holding the history-relevant app state and the
element list with selection flags cleared and shape caches stripped. The
scene controller decides when to record: it pushes a snapshot whenever
recording is on, then suppresses recording until the next committed gesture
resumes it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from debug_trace import trace
from models import Element, MalformedElementError, UnknownElementTypeError, element_from_dict
from settings import get_settings

logger = logging.getLogger(__name__)


class SceneHistory:
    """Undo and redo stacks of serialized scene snapshots.

    Args:
        max_entries: Maximum undo entries kept (0 = unlimited). Defaults to
            the ``history.max_entries`` setting.
    """

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is None:
            max_entries = get_settings().settings.history.max_entries
        self.max_entries = max_entries
        self._recording = True
        self._state_history: List[str] = []
        self._redo_stack: List[str] = []

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_entry(app_state: Dict[str, Any], elements: Iterable[Element]) -> str:
        """Serialize a snapshot.

        Args:
            app_state: Already reduced to the history allow-list.
            elements: Scene elements, deleted ones included.

        Returns:
            A JSON string. Equal scenes give equal strings.
        """
        payload = {
            "appState": app_state,
            "elements": [dict(e.to_dict(), isSelected=False) for e in elements],
        }
        return json.dumps(payload, sort_keys=True)

    def push_entry(self, entry: str) -> None:
        """Record a snapshot unless it equals the current top."""
        if self._state_history and self._state_history[-1] == entry:
            return
        self._state_history.append(entry)
        self._redo_stack.clear()
        if self.max_entries and len(self._state_history) > self.max_entries:
            del self._state_history[: len(self._state_history) - self.max_entries]
        trace(f"push entry (undo={len(self._state_history)})", "HISTORY")

    @staticmethod
    def _decode(entry: str) -> Optional[Dict[str, Any]]:
        """Parse an entry into ``{"appState": dict, "elements": [Element]}``.

        Returns None, after logging a warning, when the entry cannot be
        turned back into a scene.
        """
        try:
            data = json.loads(entry)
        except ValueError:
            logger.warning("Discarding malformed history entry")
            return None
        if not isinstance(data, dict):
            logger.warning("Discarding history entry of type %s", type(data).__name__)
            return None

        raw_elements = data.get("elements", [])
        app_state = data.get("appState", {})
        if (
            not isinstance(raw_elements, list)
            or not all(isinstance(d, dict) for d in raw_elements)
            or not isinstance(app_state, dict)
        ):
            logger.warning("Discarding malformed history entry")
            return None
        try:
            elements = [element_from_dict(d) for d in raw_elements]
        except (UnknownElementTypeError, MalformedElementError, TypeError) as e:
            logger.warning("Discarding history entry with a malformed element: %s", e)
            return None
        return {"appState": app_state, "elements": elements}

    def undo_once(self) -> Optional[Dict[str, Any]]:
        """Step back one entry.

        Returns:
            The decoded entry now on top (app state dict and rebuilt
            elements), or None if there is nothing to go
            back to. A top entry that fails to decode leaves both stacks
            untouched.
        """
        if not self._state_history:
            return None
        if len(self._state_history) == 1:
            self._redo_stack.append(self._state_history.pop())
            return None

        data = self._decode(self._state_history[-2])
        if data is None:
            return None
        self._redo_stack.append(self._state_history.pop())
        trace(f"undo (undo={len(self._state_history)}, redo={len(self._redo_stack)})", "HISTORY")
        return data

    def redo_once(self) -> Optional[Dict[str, Any]]:
        """Re-apply the most recently undone entry."""
        if not self._redo_stack:
            return None
        data = self._decode(self._redo_stack[-1])
        if data is None:
            return None
        self._state_history.append(self._redo_stack.pop())
        trace(f"redo (undo={len(self._state_history)}, redo={len(self._redo_stack)})", "HISTORY")
        return data

    def clear(self) -> None:
        self._state_history.clear()
        self._redo_stack.clear()
        self._recording = True

    def clear_redo_stack(self) -> None:
        self._redo_stack.clear()

    # -------------------------------------------------------------------------
    # Recording state
    # -------------------------------------------------------------------------

    def is_recording(self) -> bool:
        return self._recording

    def skip_recording(self) -> None:
        self._recording = False

    def resume_recording(self) -> None:
        self._recording = True

    def can_undo(self) -> bool:
        return len(self._state_history) > 1

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    @property
    def undo_depth(self) -> int:
        return len(self._state_history)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)
