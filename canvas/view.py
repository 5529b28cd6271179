"""
canvas/view.py

Canvas widget: paints the scene and forwards input to the scene controller.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QFont, QFontMetricsF, QPainter
from PyQt6.QtWidgets import QApplication, QLineEdit, QWidget

from canvas.renderer import render_scene
from models import ElementType
from scene.controller import SceneController
from settings import get_settings
from utils import parse_font

# Cursor names used by the controller -> Qt cursor shapes
_CURSORS = {
    "nwse-resize": Qt.CursorShape.SizeFDiagCursor,
    "nesw-resize": Qt.CursorShape.SizeBDiagCursor,
    "ns-resize": Qt.CursorShape.SizeVerCursor,
    "ew-resize": Qt.CursorShape.SizeHorCursor,
    "move": Qt.CursorShape.SizeAllCursor,
    "crosshair": Qt.CursorShape.CrossCursor,
    "text": Qt.CursorShape.IBeamCursor,
    "grab": Qt.CursorShape.ClosedHandCursor,
}

# Single-key tool shortcuts
TOOL_KEYS = {
    Qt.Key.Key_S: ElementType.SELECTION,
    Qt.Key.Key_R: ElementType.RECTANGLE,
    Qt.Key.Key_D: ElementType.DIAMOND,
    Qt.Key.Key_E: ElementType.ELLIPSE,
    Qt.Key.Key_A: ElementType.ARROW,
    Qt.Key.Key_L: ElementType.LINE,
    Qt.Key.Key_T: ElementType.TEXT,
}


def qt_measure_text(text: str, font: str) -> Tuple[float, float, float]:
    """Measure text with Qt font metrics: (width, height, baseline)."""
    size, family = parse_font(font)
    qfont = QFont(family)
    qfont.setPixelSize(max(1, int(round(size))))
    fm = QFontMetricsF(qfont)
    lines = text.replace("\r\n", "\n").split("\n")
    width = max(fm.horizontalAdvance(line) for line in lines)
    height = fm.lineSpacing() * len(lines)
    return width, height, height - fm.descent()


class CanvasView(QWidget):
    """
    Interactive canvas for a SceneController.

    Mouse:
    - Left button drives the active tool (create, select, move, resize)
    - Middle button, or left button with Space held, pans
    - Wheel scrolls; Ctrl + wheel zooms around the pointer
    - Double-click edits or creates text

    Keyboard:
    - Arrows nudge the selection (Shift for larger steps)
    - Enter finishes multi-point lines, Escape cancels
    - Delete/Backspace removes the selection
    - Ctrl+Z / Ctrl+Shift+Z undo and redo, Ctrl+A selects all
    - Ctrl+C / Ctrl+X / Ctrl+V use the system clipboard
    - Ctrl+[ / Ctrl+] restack (with Shift: to back / to front)
    """

    def __init__(self, controller: Optional[SceneController] = None, parent=None):
        super().__init__(parent)
        self.controller = controller or SceneController(measure_text=qt_measure_text)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMouseTracking(True)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent, True)

        self._space_down = False
        self._pan_last: Optional[QPointF] = None
        self._text_editor: Optional[QLineEdit] = None
        self._remove_listener: Callable[[], None] = self.controller.add_listener(self.update)

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            render_scene(
                painter,
                self.controller.elements,
                self.controller.app_state,
                viewport=QRectF(self.rect()),
            )
        finally:
            painter.end()

    # -------------------------------------------------------------------------
    # Coordinates
    # -------------------------------------------------------------------------

    def to_scene(self, pos: QPointF) -> Tuple[float, float]:
        return self.controller.app_state.viewport_to_scene(pos.x(), pos.y())

    def _apply_cursor(self, name: str) -> None:
        shape = _CURSORS.get(name)
        if shape is None:
            self.unsetCursor()
        else:
            self.setCursor(shape)

    # -------------------------------------------------------------------------
    # Mouse
    # -------------------------------------------------------------------------

    def _wants_pan(self, event) -> bool:
        if event.button() == Qt.MouseButton.MiddleButton:
            return True
        return event.button() == Qt.MouseButton.LeftButton and self._space_down

    def mousePressEvent(self, event):
        self.setFocus()
        if self._text_editor is not None:
            self._commit_text_editor()

        if self._wants_pan(event):
            self._pan_last = event.position()
            self.controller.start_pan()
            self._apply_cursor("grab")
            event.accept()
            return

        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        mods = event.modifiers()
        x, y = self.to_scene(event.position())
        self.controller.pointer_down(
            x, y,
            shift=bool(mods & Qt.KeyboardModifier.ShiftModifier),
            alt=bool(mods & Qt.KeyboardModifier.AltModifier),
        )
        if self.controller.text_edit is not None:
            self._open_text_editor()
        event.accept()

    def mouseMoveEvent(self, event):
        if self._pan_last is not None:
            pos = event.position()
            self.controller.pan_by(pos.x() - self._pan_last.x(), pos.y() - self._pan_last.y())
            self._pan_last = pos
            event.accept()
            return

        x, y = self.to_scene(event.position())
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        self.controller.pointer_move(x, y, shift=shift)
        if self.controller.session is None:
            self._apply_cursor(self.controller.cursor_at(x, y))
        event.accept()

    def mouseReleaseEvent(self, event):
        if self._pan_last is not None and event.button() in (
            Qt.MouseButton.MiddleButton, Qt.MouseButton.LeftButton
        ):
            self._pan_last = None
            self.controller.end_pan()
            self.unsetCursor()
            event.accept()
            return

        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return

        x, y = self.to_scene(event.position())
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        self.controller.pointer_up(x, y, shift=shift)
        event.accept()

    def mouseDoubleClickEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            super().mouseDoubleClickEvent(event)
            return
        x, y = self.to_scene(event.position())
        alt = bool(event.modifiers() & Qt.KeyboardModifier.AltModifier)
        self.controller.double_click(x, y, alt=alt)
        self._open_text_editor()
        event.accept()

    def wheelEvent(self, event):
        """Ctrl + wheel zooms around the pointer; the wheel alone scrolls."""
        delta = event.angleDelta()
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            # Zoom factor from settings. Default: 1.15 (15% per scroll step)
            zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
            factor = zoom_factor if delta.y() > 0 else 1 / zoom_factor
            pos = event.position()
            self.controller.zoom_at(factor, pos.x(), pos.y())
        else:
            self.controller.pan_by(delta.x() / 2, delta.y() / 2)
        event.accept()

    # -------------------------------------------------------------------------
    # Keyboard
    # -------------------------------------------------------------------------

    def keyPressEvent(self, event):
        key = event.key()
        mods = event.modifiers()
        ctrl = bool(mods & Qt.KeyboardModifier.ControlModifier)
        shift = bool(mods & Qt.KeyboardModifier.ShiftModifier)
        c = self.controller

        if key == Qt.Key.Key_Space and not event.isAutoRepeat():
            self._space_down = True
            event.accept()
            return

        if key in (Qt.Key.Key_Left, Qt.Key.Key_Right, Qt.Key.Key_Up, Qt.Key.Key_Down):
            kb = get_settings().settings.keyboard
            # Defaults: 1 unit, 5 with Shift
            step = kb.shift_translate_amount if shift else kb.translate_amount
            dx = {Qt.Key.Key_Left: -step, Qt.Key.Key_Right: step}.get(key, 0)
            dy = {Qt.Key.Key_Up: -step, Qt.Key.Key_Down: step}.get(key, 0)
            c.nudge_selected(dx, dy)
        elif key in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            c.finalize_multi_element()
        elif key == Qt.Key.Key_Escape:
            c.cancel()
        elif key in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            c.delete_selected()
        elif ctrl and key == Qt.Key.Key_Z:
            if shift:
                c.redo()
            else:
                c.undo()
        elif ctrl and key == Qt.Key.Key_Y:
            c.redo()
        elif ctrl and key == Qt.Key.Key_A:
            c.select_all()
        elif ctrl and key == Qt.Key.Key_C:
            self.copy()
        elif ctrl and key == Qt.Key.Key_X:
            self.cut()
        elif ctrl and key == Qt.Key.Key_V:
            self.paste()
        elif ctrl and key in (Qt.Key.Key_BracketLeft, Qt.Key.Key_BraceLeft):
            if shift:
                c.send_to_back()
            else:
                c.send_backward()
        elif ctrl and key in (Qt.Key.Key_BracketRight, Qt.Key.Key_BraceRight):
            if shift:
                c.bring_to_front()
            else:
                c.bring_forward()
        elif not ctrl and key in TOOL_KEYS:
            c.select_tool(TOOL_KEYS[key])
            self._apply_cursor("text" if TOOL_KEYS[key] == ElementType.TEXT else "")
        else:
            super().keyPressEvent(event)
            return
        event.accept()

    def keyReleaseEvent(self, event):
        if event.key() == Qt.Key.Key_Space and not event.isAutoRepeat():
            self._space_down = False
            event.accept()
            return
        super().keyReleaseEvent(event)

    # -------------------------------------------------------------------------
    # Clipboard
    # -------------------------------------------------------------------------

    def _pointer_scene_pos(self) -> Tuple[float, float]:
        state = self.controller.app_state
        return state.cursor_x, state.cursor_y

    def copy(self) -> None:
        text = self.controller.copy_selected()
        if text is not None:
            QApplication.clipboard().setText(text)

    def cut(self) -> None:
        text = self.controller.cut_selected()
        if text is not None:
            QApplication.clipboard().setText(text)

    def paste(self) -> None:
        text = QApplication.clipboard().text()
        if text:
            x, y = self._pointer_scene_pos()
            self.controller.paste(text, x, y)

    # -------------------------------------------------------------------------
    # Inline text editing
    # -------------------------------------------------------------------------

    def _open_text_editor(self) -> None:
        edit = self.controller.text_edit
        if edit is None or self._text_editor is not None:
            return
        state = self.controller.app_state
        size, family = parse_font(edit.element.font)
        qfont = QFont(family)
        qfont.setPixelSize(max(1, int(round(size * state.zoom))))

        editor = QLineEdit(self)
        editor.setFont(qfont)
        editor.setFrame(False)
        editor.setText(edit.element.text)
        vx, vy = state.scene_to_viewport(edit.anchor_x, edit.anchor_y)
        editor.adjustSize()
        editor.resize(max(editor.width(), 200), editor.height())
        editor.move(int(vx - editor.width() / 2), int(vy - editor.height() / 2))
        editor.returnPressed.connect(self._commit_text_editor)
        editor.installEventFilter(self)
        editor.show()
        editor.setFocus()
        self._text_editor = editor

    def _close_text_editor(self) -> Optional[str]:
        editor = self._text_editor
        if editor is None:
            return None
        self._text_editor = None
        text = editor.text()
        editor.removeEventFilter(self)
        editor.hide()
        editor.deleteLater()
        self.setFocus()
        return text

    def _commit_text_editor(self) -> None:
        text = self._close_text_editor()
        if text is not None:
            self.controller.submit_text(text)

    def _cancel_text_editor(self) -> None:
        if self._close_text_editor() is not None:
            self.controller.cancel_text()

    def eventFilter(self, obj, event):
        if obj is self._text_editor:
            if event.type() == event.Type.KeyPress and event.key() == Qt.Key.Key_Escape:
                self._cancel_text_editor()
                return True
            if event.type() == event.Type.FocusOut:
                self._commit_text_editor()
                return False
        return super().eventFilter(obj, event)

    def closeEvent(self, event):
        self._remove_listener()
        super().closeEvent(event)
