"""Tests for the canvas widget: input forwarding, shortcuts and inline text."""
from __future__ import annotations

import pytest
from PyQt6.QtCore import QEvent, QPoint, QPointF, Qt
from PyQt6.QtGui import QCloseEvent, QKeyEvent, QMouseEvent, QWheelEvent
from PyQt6.QtWidgets import QApplication

from canvas import CanvasView, qt_measure_text
from models import ElementType

NO_MODS = Qt.KeyboardModifier.NoModifier
LEFT = Qt.MouseButton.LeftButton


def mouse(kind, x, y, button=LEFT, buttons=None, mods=NO_MODS):
    if buttons is None:
        buttons = Qt.MouseButton.NoButton if kind == QEvent.Type.MouseButtonRelease else button
    pos = QPointF(x, y)
    return QMouseEvent(kind, pos, pos, button, buttons, mods)


def press(view, x, y, **kw):
    view.mousePressEvent(mouse(QEvent.Type.MouseButtonPress, x, y, **kw))


def move(view, x, y, **kw):
    kw.setdefault("button", Qt.MouseButton.NoButton)
    kw.setdefault("buttons", LEFT)
    view.mouseMoveEvent(mouse(QEvent.Type.MouseMove, x, y, **kw))


def release(view, x, y, **kw):
    view.mouseReleaseEvent(mouse(QEvent.Type.MouseButtonRelease, x, y, **kw))


def key(view, k, mods=NO_MODS):
    view.keyPressEvent(QKeyEvent(QEvent.Type.KeyPress, k, mods))


def drag(view, x1, y1, x2, y2):
    press(view, x1, y1)
    move(view, x2, y2)
    release(view, x2, y2)


@pytest.fixture()
def view(qapp):
    v = CanvasView()
    v.resize(400, 300)
    yield v
    v.deleteLater()


class TestMeasureText:
    def test_metrics(self, qapp):
        width, height, baseline = qt_measure_text("hello", "20px Virgil")
        assert width > 0 and height > 0
        assert 0 < baseline <= height

    def test_longer_and_multiline_text(self, qapp):
        w1, h1, _ = qt_measure_text("hi", "20px Virgil")
        w2, h2, _ = qt_measure_text("hi there\nhi", "20px Virgil")
        assert w2 > w1
        assert h2 == pytest.approx(2 * h1)


class TestMouse:
    def test_draw_rectangle(self, view):
        key(view, Qt.Key.Key_R)
        assert view.controller.app_state.element_type == ElementType.RECTANGLE
        drag(view, 10, 10, 60, 40)
        el = view.controller.elements[-1]
        assert (el.x, el.y, el.width, el.height) == (10, 10, 50, 30)

    def test_scrolled_view_maps_to_scene(self, view):
        view.controller.app_state.scroll_x = 100
        key(view, Qt.Key.Key_E)
        drag(view, 110, 10, 160, 40)
        el = view.controller.elements[-1]
        assert (el.x, el.y) == (10, 10)

    def test_space_drag_pans(self, view):
        key(view, Qt.Key.Key_Space)
        drag(view, 0, 0, 20, 10)
        state = view.controller.app_state
        assert (state.scroll_x, state.scroll_y) == (20, 10)
        assert view.controller.elements == []
        assert not view.controller.is_panning

    def test_middle_button_pans(self, view):
        mid = Qt.MouseButton.MiddleButton
        press(view, 0, 0, button=mid)
        move(view, 0, 30, buttons=mid)
        release(view, 0, 30, button=mid)
        assert view.controller.app_state.scroll_y == 30

    def test_ctrl_wheel_zooms(self, view):
        event = QWheelEvent(
            QPointF(100, 100), QPointF(100, 100), QPoint(0, 0), QPoint(0, 120),
            Qt.MouseButton.NoButton, Qt.KeyboardModifier.ControlModifier,
            Qt.ScrollPhase.NoScrollPhase, False,
        )
        view.wheelEvent(event)
        assert view.controller.app_state.zoom == pytest.approx(1.15)

    def test_hover_sets_cursor(self, view):
        key(view, Qt.Key.Key_R)
        drag(view, 10, 10, 110, 110)
        view.mouseMoveEvent(mouse(QEvent.Type.MouseMove, 10, 60, button=Qt.MouseButton.NoButton,
                                  buttons=Qt.MouseButton.NoButton))
        assert view.cursor().shape() == Qt.CursorShape.SizeAllCursor

    def test_paint(self, view):
        key(view, Qt.Key.Key_D)
        drag(view, 10, 10, 110, 110)
        assert not view.grab().isNull()


class TestKeyboard:
    def test_undo_redo_shortcuts(self, view):
        ctrl = Qt.KeyboardModifier.ControlModifier
        key(view, Qt.Key.Key_R)
        drag(view, 10, 10, 60, 40)
        key(view, Qt.Key.Key_Z, ctrl)
        assert view.controller.elements == []
        key(view, Qt.Key.Key_Z, ctrl | Qt.KeyboardModifier.ShiftModifier)
        assert len(view.controller.elements) == 1

    def test_arrow_nudges(self, view):
        key(view, Qt.Key.Key_R)
        drag(view, 10, 10, 60, 40)
        key(view, Qt.Key.Key_Right)
        key(view, Qt.Key.Key_Down, Qt.KeyboardModifier.ShiftModifier)
        el = view.controller.elements[-1]
        assert (el.x, el.y) == (11, 15)

    def test_delete_and_select_all(self, view):
        key(view, Qt.Key.Key_R)
        drag(view, 10, 10, 60, 40)
        key(view, Qt.Key.Key_Escape)
        assert not view.controller.store.is_any_selected()
        key(view, Qt.Key.Key_A, Qt.KeyboardModifier.ControlModifier)
        key(view, Qt.Key.Key_Delete)
        assert all(e.is_deleted for e in view.controller.elements)

    def test_enter_finishes_line(self, view):
        key(view, Qt.Key.Key_L)
        press(view, 0, 0)
        release(view, 0, 0)
        move(view, 50, 0, buttons=Qt.MouseButton.NoButton)
        press(view, 50, 0)
        release(view, 50, 0)
        key(view, Qt.Key.Key_Return)
        assert view.controller.elements[-1].points == [[0, 0], [50, 0]]

    def test_clipboard_round_trip(self, view):
        ctrl = Qt.KeyboardModifier.ControlModifier
        key(view, Qt.Key.Key_R)
        drag(view, 10, 10, 60, 40)
        key(view, Qt.Key.Key_C, ctrl)
        assert QApplication.clipboard().text().startswith("[")
        move(view, 200, 200, buttons=Qt.MouseButton.NoButton)
        key(view, Qt.Key.Key_V, ctrl)
        pasted = view.controller.elements[-1]
        assert len(view.controller.elements) == 2
        assert pasted.x + pasted.width / 2 == 200


class TestTextEditor:
    def test_type_and_commit(self, view):
        key(view, Qt.Key.Key_T)
        press(view, 100, 100)
        release(view, 100, 100)
        editor = view._text_editor
        assert editor is not None
        editor.setText("hello")
        view._commit_text_editor()
        el = view.controller.elements[-1]
        assert el.type == ElementType.TEXT and el.text == "hello"
        assert view._text_editor is None

    def test_escape_cancels(self, view):
        key(view, Qt.Key.Key_T)
        press(view, 100, 100)
        editor = view._text_editor
        editor.setText("discard me")
        QApplication.sendEvent(editor, QKeyEvent(QEvent.Type.KeyPress, Qt.Key.Key_Escape, NO_MODS))
        assert view._text_editor is None
        assert view.controller.elements == []
        assert view.controller.text_edit is None

    def test_clicking_away_commits(self, view):
        key(view, Qt.Key.Key_T)
        press(view, 100, 100)
        release(view, 100, 100)
        view._text_editor.setText("kept")
        press(view, 300, 250)
        release(view, 300, 250)
        assert [e.text for e in view.controller.elements] == ["kept"]

    def test_double_click_edits_text(self, view):
        key(view, Qt.Key.Key_T)
        press(view, 100, 100)
        view._text_editor.setText("abc")
        view._commit_text_editor()
        view.mouseDoubleClickEvent(mouse(QEvent.Type.MouseButtonDblClick, 100, 100))
        assert view._text_editor is not None
        assert view._text_editor.text() == "abc"


def test_close_removes_listener(view):
    count = len(view.controller._listeners)
    view.closeEvent(QCloseEvent())
    assert len(view.controller._listeners) == count - 1
