"""
scene/controller.py

Editing session controller: turns pointer, keyboard and clipboard input into
element store mutations and history snapshots.

Pointer coordinates passed to the ``pointer_*`` methods are scene
coordinates; the canvas widget converts from the viewport first.

A gesture lives in a ``DragSession`` created at pointer-down and dropped at
pointer-up or cancel. Only committed gestures reach the history: ``_commit``
resumes recording and ``update`` pushes one snapshot, then suppresses
recording again until the next commit.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from app_state import AppState, clear_app_state_for_history, get_default_app_state
from data.clipboard import looks_like_json, parse_clipboard, serialize_clipboard
from data.json_io import SceneLoadError, calculate_scroll_center, load_from_json, serialize_as_json
from data.storage import LocalStorage, restore_from_local_storage, save_to_local_storage
from debug_trace import trace, trace_call
from geometry.bounds import get_common_bounds
from geometry.collision import (
    get_element_at_position,
    get_element_containing_position,
    get_elements_within_selection,
)
from geometry.math2d import distance2d
from history import SceneHistory
from models import (
    Element,
    ElementType,
    duplicate_element,
    is_linear_element,
    is_text_element,
    mutate_element,
    new_element,
    new_linear_element,
    new_text_element,
)
from scene.store import ElementStore
from scene.zindex import move_all_left, move_all_right, move_one_left, move_one_right
from settings import get_settings
from transform.handles import (
    get_cursor_for_resize_handle,
    get_element_with_resize_handle,
    normalize_resize_handle,
)
from transform.resize import (
    ArrowResizeFn,
    drag_selected_elements,
    get_perfect_element_size,
    is_invisibly_small_element,
    normalize_dimensions,
    resize_element,
)
from utils import clamp, parse_font

logger = logging.getLogger(__name__)

# measure_text(text, font) -> (width, height, baseline)
MeasureTextFn = Callable[[str, str], Tuple[float, float, float]]

_STYLE_FIELDS = (
    "stroke_color",
    "background_color",
    "fill_style",
    "stroke_width",
    "roughness",
    "opacity",
    "font",
)


def default_measure_text(text: str, font: str) -> Tuple[float, float, float]:
    """Approximate text metrics when no toolkit font metrics are available."""
    size, _family = parse_font(font)
    lines = text.replace("\r\n", "\n").split("\n")
    line_height = size * 1.25
    width = max(len(line) for line in lines) * size * 0.6
    height = line_height * len(lines)
    baseline = height - size * 0.25
    return width, height, baseline


def _set_points(element: Element, points: List[List[float]]) -> None:
    """Replace a linear element's points and keep width/height at their extent."""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    mutate_element(
        element,
        points=points,
        width=max(xs) - min(xs) if xs else 0,
        height=max(ys) - min(ys) if ys else 0,
    )


@dataclass
class DragSession:
    """State of one pointer gesture, from pointer-down to pointer-up."""
    origin_x: float
    origin_y: float
    last_x: float
    last_y: float
    element_type: str
    handle: Optional[str] = None
    arrow_fn: Optional[ArrowResizeFn] = None
    hit_element_id: Optional[str] = None
    element_added_to_selection: bool = False
    dragging_occurred: bool = False
    duplicated: bool = False
    is_resizing: bool = False
    # Pre-gesture copies for cancellation
    before: Dict[str, Element] = field(default_factory=dict, repr=False)
    before_order: List[str] = field(default_factory=list, repr=False)


@dataclass
class TextEdit:
    """Text element being typed. The finished text is centred on the anchor."""
    element: Element
    anchor_x: float
    anchor_y: float
    is_new: bool


class SceneController:
    """Orchestrates the element store, history, geometry and transforms.

    Args:
        app_state: Initial editor state (defaults from settings).
        store: Element store (empty by default).
        history: Undo history (fresh by default).
        measure_text: Text metrics provider; the canvas widget injects Qt metrics.
    """

    def __init__(self, app_state: Optional[AppState] = None,
                 store: Optional[ElementStore] = None,
                 history: Optional[SceneHistory] = None,
                 measure_text: Optional[MeasureTextFn] = None):
        self.app_state = app_state or get_default_app_state()
        self.store = store or ElementStore()
        self.history = history or SceneHistory()
        self.measure_text: MeasureTextFn = measure_text or default_measure_text
        self.session: Optional[DragSession] = None
        self.text_edit: Optional[TextEdit] = None
        self._listeners: List[Callable[[], None]] = []
        self._panning = False
        self.store.add_callback(self._notify)
        # Records the starting scene
        self.history.resume_recording()
        self.update()

    # -------------------------------------------------------------------------
    # Listeners and commit point
    # -------------------------------------------------------------------------

    def add_listener(self, cb: Callable[[], None]) -> Callable[[], None]:
        """Call ``cb`` after every visible change. Returns a remover."""
        self._listeners.append(cb)

        def remove() -> None:
            if cb in self._listeners:
                self._listeners.remove(cb)
        return remove

    def _notify(self) -> None:
        for cb in list(self._listeners):
            cb()

    def update(self) -> None:
        """Record a snapshot if recording is on, then notify listeners."""
        if self.history.is_recording():
            entry = self.history.generate_entry(
                clear_app_state_for_history(self.app_state), self.store.elements
            )
            self.history.push_entry(entry)
            self.history.skip_recording()
        self._notify()

    def _commit(self) -> None:
        self.history.resume_recording()
        self.update()

    @property
    def elements(self) -> List[Element]:
        return self.store.elements

    def is_busy(self) -> bool:
        """True while a gesture, multi-point creation or text edit is running."""
        return (
            self.session is not None
            or self.app_state.multi_element is not None
            or self.text_edit is not None
        )

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    def select_tool(self, element_type: str) -> None:
        if element_type not in ElementType.ALL:
            raise ValueError(f"Unknown tool {element_type!r}")
        if self.app_state.multi_element is not None:
            self.finalize_multi_element()
        if element_type != ElementType.SELECTION:
            self.store.clear_selection()
        self.app_state.element_type = element_type
        self._notify()

    def set_element_locked(self, locked: bool) -> None:
        self.app_state.element_locked = locked

    def _reset_tool(self) -> None:
        if not self.app_state.element_locked:
            self.app_state.element_type = ElementType.SELECTION

    # -------------------------------------------------------------------------
    # Pointer gestures
    # -------------------------------------------------------------------------

    def pointer_down(self, x: float, y: float, shift: bool = False, alt: bool = False) -> None:
        """Start a gesture at scene point (x, y)."""
        if self.session is not None or self.text_edit is not None:
            return
        state = self.app_state
        tool = state.element_type

        if tool == ElementType.TEXT:
            self.store.clear_selection()
            self.start_text(x, y, alt)
            return

        session = DragSession(
            origin_x=x, origin_y=y, last_x=x, last_y=y, element_type=tool,
            before=self.store.snapshot(),
            before_order=[e.id for e in self.store.elements],
        )
        self.session = session
        trace(f"pointer_down {tool} at ({x:.1f}, {y:.1f})", "GESTURE")

        if tool == ElementType.SELECTION:
            self._select_down(session, x, y, shift, alt)
        elif tool in ElementType.LINEAR:
            multi = state.multi_element
            if multi is not None:
                multi.is_selected = True
                points = [list(p) for p in multi.points]
                points.append([x - multi.x, y - multi.y])
                _set_points(multi, points)
            else:
                self.store.clear_selection()
                element = new_linear_element(tool, x, y, points=[[0, 0]], **state.current_item_style())
                self.store.append(element)
                state.dragging_element = element
        else:
            self.store.clear_selection()
            element = new_element(tool, x, y, **state.current_item_style())
            self.store.append(element)
            state.multi_element = None
            state.dragging_element = element
        self._notify()

    def _select_down(self, session: DragSession, x: float, y: float, shift: bool, alt: bool) -> None:
        state = self.app_state
        found = get_element_with_resize_handle(self.store.elements, x, y, state.zoom)
        if found is not None:
            element, handle = found
            state.resizing_element = element
            session.handle = handle
            session.is_resizing = True
            return

        hit = get_element_at_position(self.store.elements, x, y)
        if not (hit is not None and hit.is_selected) and not shift:
            self.store.clear_selection()

        if hit is None:
            selection = new_element(ElementType.SELECTION, x, y)
            state.selection_element = selection
            state.dragging_element = selection
            return

        session.hit_element_id = hit.id
        if not hit.is_selected:
            hit.is_selected = True
            session.element_added_to_selection = True

        if alt:
            # Duplicates take over the selection and follow the drag
            originals = self.store.selected_elements()
            copies = []
            for original in originals:
                copy = duplicate_element(original)
                copy.is_selected = True
                original.is_selected = False
                copies.append(copy)
                if original.id == hit.id:
                    session.hit_element_id = copy.id
            session.duplicated = True
            self.store.append(*copies)

    def pointer_move(self, x: float, y: float, shift: bool = False) -> None:
        """Continue the active gesture, or track the floating multi-point."""
        state = self.app_state
        state.cursor_x = x
        state.cursor_y = y
        session = self.session

        if session is None:
            multi = state.multi_element
            if multi is not None:
                points = [list(p) for p in multi.points]
                points[-1] = [x - multi.x, y - multi.y]
                _set_points(multi, points)
                self._notify()
            return

        # Linear tools only start after a small drag so clicks are not segments
        if not session.dragging_occurred and session.element_type in ElementType.LINEAR:
            threshold = get_settings().settings.canvas.lines.dragging_threshold
            if distance2d(x, y, session.origin_x, session.origin_y) < threshold:
                return

        if session.is_resizing and state.resizing_element is not None:
            state.is_resizing = True
            selected = self.store.selected_elements()
            if len(selected) == 1:
                element = selected[0]
                dx = x - session.last_x
                dy = y - session.last_y
                session.arrow_fn = resize_element(
                    element, session.handle, dx, dy, x, y, shift, session.arrow_fn
                )
                session.handle = normalize_resize_handle(element, session.handle)
                normalize_dimensions(element)
                session.last_x = x
                session.last_y = y
                self._notify()
                return

        hit = self.store.get(session.hit_element_id) if session.hit_element_id else None
        if hit is not None and hit.is_selected:
            session.dragging_occurred = True
            drag_selected_elements(self.store.elements, x - session.last_x, y - session.last_y)
            session.last_x = x
            session.last_y = y
            self._notify()
            return

        element = state.dragging_element
        if element is None:
            return

        if session.element_type in ElementType.LINEAR:
            session.dragging_occurred = True
            points = [list(p) for p in element.points]
            dx = x - element.x
            dy = y - element.y
            if shift and len(points) <= 2:
                dx, dy = get_perfect_element_size(session.element_type, dx, dy)
            if len(points) == 1:
                points.append([dx, dy])
            else:
                points[-1] = [dx, dy]
            _set_points(element, points)
        else:
            width = abs(x - session.origin_x)
            height = abs(y - session.origin_y)
            if shift and element.type != ElementType.SELECTION:
                width, height = get_perfect_element_size(element.type, width, 1)
            mutate_element(
                element,
                x=session.origin_x - width if x < session.origin_x else session.origin_x,
                y=session.origin_y - height if y < session.origin_y else session.origin_y,
                width=width,
                height=height,
            )

        if session.element_type == ElementType.SELECTION:
            if not shift and self.store.is_any_selected():
                self.store.clear_selection()
            for enclosed in get_elements_within_selection(self.store.elements, element):
                enclosed.is_selected = True
        self._notify()

    def pointer_up(self, x: float, y: float, shift: bool = False) -> None:
        """Finish the active gesture and commit it."""
        session = self.session
        if session is None:
            return
        self.session = None
        state = self.app_state
        dragging = state.dragging_element
        resizing = state.resizing_element
        multi = state.multi_element
        tool = session.element_type

        state.is_resizing = False
        state.resizing_element = None
        state.selection_element = None
        trace(f"pointer_up {tool} dragged={session.dragging_occurred}", "GESTURE")

        if tool in ElementType.LINEAR:
            self._linear_up(session, dragging, multi, x, y)
            return

        if tool != ElementType.SELECTION and dragging is not None and is_invisibly_small_element(dragging):
            # Never committed; drop it outright
            state.dragging_element = None
            self.store.discard(dragging)
            return

        if dragging is not None and dragging.type != ElementType.SELECTION:
            normalize_dimensions(dragging)

        commit = session.dragging_occurred or session.duplicated
        if resizing is not None:
            commit = True
            if is_invisibly_small_element(resizing):
                self.store.remove(lambda e: e.id == resizing.id)

        hit = self.store.get(session.hit_element_id) if session.hit_element_id else None
        if hit is not None and not session.dragging_occurred and not session.element_added_to_selection:
            if shift:
                hit.is_selected = False
            else:
                self.store.clear_selection()
                hit.is_selected = True

        if dragging is None or dragging.type == ElementType.SELECTION:
            state.dragging_element = None
            if commit:
                self._commit()
            else:
                self._notify()
            return

        if not state.element_locked:
            dragging.is_selected = True
        state.dragging_element = None
        self._reset_tool()
        self._commit()

    def _linear_up(self, session: DragSession, dragging: Optional[Element],
                   multi: Optional[Element], x: float, y: float) -> None:
        state = self.app_state
        if dragging is None:
            return
        if not session.dragging_occurred and multi is None:
            # Plain click: switch to multi-point creation with a floating end
            points = [list(p) for p in dragging.points]
            points.append([x - dragging.x, y - dragging.y])
            _set_points(dragging, points)
            state.multi_element = dragging
            self._notify()
            return
        if multi is not None:
            self._commit()
            return
        if is_invisibly_small_element(dragging):
            state.dragging_element = None
            self.store.discard(dragging)
            return
        dragging.is_selected = True
        state.dragging_element = None
        self._reset_tool()
        self._commit()

    def finalize_multi_element(self) -> None:
        """Finish multi-point creation, dropping the floating end point."""
        state = self.app_state
        multi = state.multi_element
        if multi is None:
            return
        state.multi_element = None
        state.dragging_element = None
        _set_points(multi, [list(p) for p in multi.points[:-1]])
        if is_invisibly_small_element(multi):
            self.store.discard(multi)
        else:
            self.store.clear_selection()
            multi.is_selected = True
        self._reset_tool()
        self._commit()

    def cancel(self) -> None:
        """Escape: unwind the gesture, else finish multi-point, else deselect."""
        state = self.app_state
        session = self.session
        if session is not None:
            self.session = None
            multi_id = state.multi_element.id if state.multi_element is not None else None
            state.dragging_element = None
            state.resizing_element = None
            state.selection_element = None
            state.is_resizing = False
            self.store.restore_snapshot(session.before, session.before_order)
            if multi_id is not None:
                state.multi_element = self.store.get(multi_id)
                state.dragging_element = state.multi_element
            trace("gesture cancelled", "GESTURE")
            self._notify()
            return
        if state.multi_element is not None:
            self.finalize_multi_element()
            return
        if self.text_edit is not None:
            self.cancel_text()
            return
        self.store.clear_selection()
        self._notify()

    def cursor_at(self, x: float, y: float) -> str:
        """Cursor name for hovering scene point (x, y)."""
        tool = self.app_state.element_type
        if tool == ElementType.TEXT:
            return "text"
        if tool != ElementType.SELECTION:
            return "crosshair"
        found = get_element_with_resize_handle(self.store.elements, x, y, self.app_state.zoom)
        if found is not None:
            return get_cursor_for_resize_handle(found[1])
        if get_element_at_position(self.store.elements, x, y) is not None:
            return "move"
        return ""

    # -------------------------------------------------------------------------
    # Viewport
    # -------------------------------------------------------------------------

    def start_pan(self) -> None:
        self._panning = True

    def pan_by(self, dx: float, dy: float) -> None:
        """Scroll by a viewport-pixel delta. Never recorded."""
        state = self.app_state
        state.scroll_x += dx / state.zoom
        state.scroll_y += dy / state.zoom
        self._notify()

    def end_pan(self) -> None:
        self._panning = False

    @property
    def is_panning(self) -> bool:
        return self._panning

    def zoom_at(self, factor: float, viewport_x: float, viewport_y: float) -> None:
        """Zoom by ``factor`` keeping the scene point under the viewport anchor fixed."""
        state = self.app_state
        scene_x, scene_y = state.viewport_to_scene(viewport_x, viewport_y)
        state.zoom = clamp(state.zoom * factor, 0.1, 10.0)
        state.scroll_x = viewport_x / state.zoom - scene_x
        state.scroll_y = viewport_y / state.zoom - scene_y
        self._notify()

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def _snap_to_center(self, x: float, y: float) -> Tuple[float, float]:
        container = get_element_containing_position(self.store.elements, x, y)
        if container is None:
            return x, y
        cx = container.x + container.width / 2
        cy = container.y + container.height / 2
        threshold = get_settings().settings.canvas.shapes.text_snap_threshold
        if math.hypot(x - cx, y - cy) < threshold:
            return cx, cy
        return x, y

    def start_text(self, x: float, y: float, alt: bool = False) -> Element:
        """Begin a new text element; it is centred on (x, y) when submitted."""
        state = self.app_state
        if not alt:
            x, y = self._snap_to_center(x, y)
        element = new_text_element(
            x, y, "", font=state.current_item_font, **state.current_item_style()
        )
        self.text_edit = TextEdit(element, x, y, is_new=True)
        state.editing_element = element
        state.element_type = ElementType.SELECTION
        self._notify()
        return element

    def double_click(self, x: float, y: float, alt: bool = False) -> Element:
        """Edit the text under the pointer, or start a new text element."""
        hit = get_element_at_position(self.store.elements, x, y)
        if hit is not None and is_text_element(hit):
            self.text_edit = TextEdit(hit, hit.x + hit.width / 2, hit.y + hit.height / 2, is_new=False)
            self.app_state.editing_element = hit
            self._notify()
            return hit
        return self.start_text(x, y, alt)

    def submit_text(self, text: str) -> Optional[Element]:
        """Commit the edited text. Empty text deletes an existing element."""
        edit = self.text_edit
        if edit is None:
            return None
        self.text_edit = None
        self.app_state.editing_element = None
        element = edit.element

        if not text:
            if not edit.is_new:
                self.store.remove(lambda e: e.id == element.id)
                self._commit()
            else:
                self._notify()
            return None

        width, height, baseline = self.measure_text(text, element.font)
        mutate_element(
            element,
            text=text,
            x=edit.anchor_x - width / 2,
            y=edit.anchor_y - height / 2,
            width=width,
            height=height,
            baseline=baseline,
        )
        self.store.clear_selection()
        element.is_selected = True
        if edit.is_new:
            self.store.append(element)
        self._commit()
        return element

    def cancel_text(self) -> None:
        self.text_edit = None
        self.app_state.editing_element = None
        self._notify()

    @property
    def editing_text(self) -> str:
        return self.text_edit.element.text if self.text_edit is not None else ""

    # -------------------------------------------------------------------------
    # Z-order
    # -------------------------------------------------------------------------

    def _restack(self, fn) -> None:
        if not self.store.is_any_selected():
            return
        self.store.restack(fn)
        self._commit()

    def send_backward(self) -> None:
        self._restack(move_one_left)

    def bring_forward(self) -> None:
        self._restack(move_one_right)

    def send_to_back(self) -> None:
        self._restack(move_all_left)

    def bring_to_front(self) -> None:
        self._restack(move_all_right)

    # -------------------------------------------------------------------------
    # Selection and edits
    # -------------------------------------------------------------------------

    def delete_selected(self) -> List[Element]:
        removed = self.store.remove(lambda e: e.is_selected)
        self.app_state.element_type = ElementType.SELECTION
        self.app_state.multi_element = None
        if removed:
            self._commit()
        return removed

    def select_all(self) -> None:
        self.store.select_all()
        self._notify()

    def clear_selection(self) -> None:
        self.store.clear_selection()
        self._notify()

    def nudge_selected(self, dx: float, dy: float) -> None:
        if drag_selected_elements(self.store.elements, dx, dy):
            self._commit()

    def change_style(self, **fields: Any) -> None:
        """Apply style fields to the selection and remember them for new elements.

        Raises:
            ValueError: For a field that is not a style field.
        """
        for name in fields:
            if name not in _STYLE_FIELDS:
                raise ValueError(f"Not a style field: {name!r}")
        for name, value in fields.items():
            setattr(self.app_state, f"current_item_{name}", value)

        for element in self.store.selected_elements():
            updates = {k: v for k, v in fields.items() if k != "font"}
            if "font" in fields and is_text_element(element):
                width, height, baseline = self.measure_text(element.text, fields["font"])
                updates.update(font=fields["font"], width=width, height=height, baseline=baseline)
            if updates:
                mutate_element(element, **updates)
        self._commit()

    def selected_style(self, name: str) -> Any:
        """Common value of a style field across the selection, or None if mixed.

        With nothing selected the current item style is returned.
        """
        if name not in _STYLE_FIELDS:
            raise ValueError(f"Not a style field: {name!r}")
        if not self.store.is_any_selected():
            return getattr(self.app_state, f"current_item_{name}")
        return self.store.selected_attribute(lambda e: getattr(e, name, None))

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def _apply_entry(self, data: Dict[str, Any]) -> None:
        self.store.replace_all(data["elements"])
        self.app_state.update_from_dict(data["appState"])

    @trace_call("HISTORY")
    def undo(self) -> bool:
        if self.is_busy():
            return False
        data = self.history.undo_once()
        if data is None:
            return False
        self._apply_entry(data)
        self._notify()
        return True

    @trace_call("HISTORY")
    def redo(self) -> bool:
        if self.is_busy():
            return False
        data = self.history.redo_once()
        if data is None:
            return False
        self._apply_entry(data)
        self._notify()
        return True

    # -------------------------------------------------------------------------
    # Clipboard
    # -------------------------------------------------------------------------

    def copy_selected(self) -> Optional[str]:
        selected = self.store.selected_elements()
        if not selected:
            return None
        return serialize_clipboard(selected)

    def cut_selected(self) -> Optional[str]:
        text = self.copy_selected()
        if text is not None:
            self.delete_selected()
        return text

    def paste(self, text: str, x: float, y: float) -> List[Element]:
        """Paste clipboard text centred on scene point (x, y).

        Element payloads are duplicated under fresh ids. Other JSON is
        ignored; plain text becomes a text element.

        Returns:
            The elements added.
        """
        if self.is_busy():
            return []
        clipboard_elements = parse_clipboard(text)
        if clipboard_elements is not None:
            min_x, min_y, max_x, max_y = get_common_bounds(clipboard_elements)
            dx = x - (min_x + max_x) / 2
            dy = y - (min_y + max_y) / 2
            added = []
            for element in clipboard_elements:
                copy = duplicate_element(element)
                copy.x += dx
                copy.y += dy
                copy.is_selected = True
                copy.is_deleted = False
                added.append(copy)
            self.store.clear_selection()
            self.store.append(*added)
        elif looks_like_json(text) or not text:
            return []
        else:
            state = self.app_state
            width, height, baseline = self.measure_text(text, state.current_item_font)
            element = new_text_element(
                x - width / 2, y - height / 2, text, font=state.current_item_font,
                width=width, height=height, baseline=baseline,
                **state.current_item_style(),
            )
            element.is_selected = True
            self.store.clear_selection()
            self.store.append(element)
            added = [element]
        self.app_state.element_type = ElementType.SELECTION
        self._commit()
        return added

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load_scene(self, text: str) -> bool:
        """Replace the scene with scene JSON. Malformed input leaves it unchanged."""
        try:
            elements, state = load_from_json(text)
        except SceneLoadError as e:
            logger.warning("Scene not loaded: %s", e)
            return False
        self.load_scene_elements(elements, state)
        return True

    def load_scene_elements(self, elements: List[Element], state: Dict[str, Any]) -> None:
        """Replace the scene with restored elements as one undoable step."""
        self._reset_gesture_state()
        self.store.replace_all(elements)
        self.app_state.update_from_dict(state)
        self._commit()

    def export_scene(self) -> str:
        return serialize_as_json(self.store.elements, self.app_state)

    def save_local(self, storage: LocalStorage) -> None:
        save_to_local_storage(storage, self.store.elements, self.app_state)

    def restore_local(self, storage: LocalStorage,
                      viewport_size: Optional[Tuple[float, float]] = None) -> None:
        """Load the autosaved scene and start a fresh history from it."""
        elements, state = restore_from_local_storage(storage)
        self._reset_gesture_state()
        self.store.replace_all(elements)
        self.app_state.update_from_dict(state)
        if viewport_size is not None:
            self.app_state.update_from_dict(calculate_scroll_center(elements, viewport_size))
        self.history.clear()
        self.update()

    def _reset_gesture_state(self) -> None:
        state = self.app_state
        self.session = None
        self.text_edit = None
        state.dragging_element = None
        state.resizing_element = None
        state.multi_element = None
        state.editing_element = None
        state.selection_element = None
        state.is_resizing = False
