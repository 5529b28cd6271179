"""
main.py

Roughboard - Main Application

PyQt6 desktop shell around the canvas widget:
- Tool toolbar (select, rectangle, diamond, ellipse, arrow, line, text)
- Style actions applied to the selection
- Open/Save scene JSON in the workspace directory
- Autosave to local storage on quit, restore on start

Usage:
    python main.py

Dependencies:
    pip install PyQt6 platformdirs tomli-w numpy
"""

from __future__ import annotations

import sys
from typing import Dict

from PyQt6.QtCore import QSize
from PyQt6.QtGui import QAction, QActionGroup, QColor, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QColorDialog,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QToolBar,
)

from canvas import CanvasView, qt_measure_text
from data import LocalStorage, SceneLoadError, load_from_file, save_as_json
from debug_trace import trace, trace_exception, close_log
from models import ElementType, FillStyle
from scene import SceneController
from settings import SettingsManager, get_settings
from utils import hex_to_qcolor, qcolor_to_hex, TRANSPARENT


class MainWindow(QMainWindow):
    """Main application window for Roughboard.

    Args:
        settings_manager: The SettingsManager instance for application settings.
        storage: Local storage used for autosave (defaults to the user data dir).
    """

    def __init__(self, settings_manager: SettingsManager, storage: LocalStorage = None):
        super().__init__()
        self.settings_manager = settings_manager
        self.storage = storage or LocalStorage()
        self.setWindowTitle("Roughboard")

        self.controller = SceneController(measure_text=qt_measure_text)
        self.view = CanvasView(self.controller, self)
        self.setCentralWidget(self.view)

        self._tool_actions: Dict[str, QAction] = {}
        self._build_menus()
        self._build_toolbar()

        self.controller.add_listener(self._sync_tool_actions)

        if self.settings_manager.settings.autosave:
            size = self.view.size()
            self.controller.restore_local(self.storage, (size.width(), size.height()))
        self.statusBar().showMessage("Pick a tool and draw. Double-click to add text.")

    # -------------------------------------------------------------------------
    # UI construction
    # -------------------------------------------------------------------------

    def _build_menus(self):
        """Build the application menu bar."""
        file_menu = self.menuBar().addMenu("&File")

        open_act = QAction("&Open...", self)
        open_act.setShortcut(QKeySequence.StandardKey.Open)
        open_act.triggered.connect(self.open_scene_dialog)
        file_menu.addAction(open_act)

        save_act = QAction("&Save As...", self)
        save_act.setShortcut(QKeySequence.StandardKey.Save)
        save_act.triggered.connect(self.save_scene_dialog)
        file_menu.addAction(save_act)

        file_menu.addSeparator()
        quit_act = QAction("&Quit", self)
        quit_act.setShortcut(QKeySequence.StandardKey.Quit)
        quit_act.triggered.connect(self.close)
        file_menu.addAction(quit_act)

        edit_menu = self.menuBar().addMenu("&Edit")
        c = self.controller
        for text, slot in (
            ("Undo", c.undo),
            ("Redo", c.redo),
            (None, None),
            ("Cut", self.view.cut),
            ("Copy", self.view.copy),
            ("Paste", self.view.paste),
            ("Delete", c.delete_selected),
            ("Select All", c.select_all),
            (None, None),
            ("Send Backward", c.send_backward),
            ("Bring Forward", c.bring_forward),
            ("Send to Back", c.send_to_back),
            ("Bring to Front", c.bring_to_front),
        ):
            if text is None:
                edit_menu.addSeparator()
                continue
            act = QAction(text, self)
            # Shortcuts are handled by the canvas widget
            act.triggered.connect(lambda checked=False, s=slot: s())
            edit_menu.addAction(act)

        style_menu = self.menuBar().addMenu("&Style")
        stroke_act = QAction("Stroke Color...", self)
        stroke_act.triggered.connect(lambda: self._pick_color("stroke_color"))
        style_menu.addAction(stroke_act)
        bg_act = QAction("Background Color...", self)
        bg_act.triggered.connect(lambda: self._pick_color("background_color"))
        style_menu.addAction(bg_act)
        clear_bg_act = QAction("No Background", self)
        clear_bg_act.triggered.connect(lambda: c.change_style(background_color=TRANSPARENT))
        style_menu.addAction(clear_bg_act)

        fill_menu = style_menu.addMenu("Fill")
        for label, fill in (("Hachure", FillStyle.HACHURE),
                            ("Cross-hatch", FillStyle.CROSS_HATCH),
                            ("Solid", FillStyle.SOLID)):
            act = QAction(label, self)
            act.triggered.connect(lambda checked=False, f=fill: c.change_style(fill_style=f))
            fill_menu.addAction(act)

        width_menu = style_menu.addMenu("Stroke Width")
        for label, width in (("Thin", 1), ("Bold", 2), ("Extra bold", 4)):
            act = QAction(label, self)
            act.triggered.connect(lambda checked=False, w=width: c.change_style(stroke_width=w))
            width_menu.addAction(act)

        rough_menu = style_menu.addMenu("Sloppiness")
        for label, roughness in (("Architect", 0), ("Artist", 1), ("Cartoonist", 2)):
            act = QAction(label, self)
            act.triggered.connect(lambda checked=False, r=roughness: c.change_style(roughness=r))
            rough_menu.addAction(act)

    def _build_toolbar(self):
        """Build the tool toolbar."""
        tb = QToolBar("Tools")
        tb.setIconSize(QSize(18, 18))
        self.addToolBar(tb)
        group = QActionGroup(self)
        group.setExclusive(True)

        def add_tool_action(text: str, element_type: str, key: str, tooltip: str):
            act = QAction(text, self)
            act.setCheckable(True)
            act.setToolTip(f"{tooltip} ({key})")
            act.setStatusTip(tooltip)
            act.triggered.connect(lambda checked, t=element_type: self._on_tool_triggered(t))
            group.addAction(act)
            tb.addAction(act)
            self._tool_actions[element_type] = act
            return act

        add_tool_action("Select", ElementType.SELECTION, "S", "Select, move and resize elements")
        add_tool_action("Rectangle", ElementType.RECTANGLE, "R", "Draw a rectangle")
        add_tool_action("Diamond", ElementType.DIAMOND, "D", "Draw a diamond")
        add_tool_action("Ellipse", ElementType.ELLIPSE, "E", "Draw an ellipse")
        add_tool_action("Arrow", ElementType.ARROW, "A", "Draw an arrow (click to add points)")
        add_tool_action("Line", ElementType.LINE, "L", "Draw a line (click to add points)")
        add_tool_action("Text", ElementType.TEXT, "T", "Place text")
        self._tool_actions[ElementType.SELECTION].setChecked(True)

        tb.addSeparator()
        lock_act = QAction("Lock Tool", self)
        lock_act.setCheckable(True)
        lock_act.setToolTip("Keep the current tool after drawing")
        lock_act.toggled.connect(self.controller.set_element_locked)
        tb.addAction(lock_act)

    def _on_tool_triggered(self, element_type: str):
        self.controller.select_tool(element_type)
        self.view.setFocus()

    def _sync_tool_actions(self):
        act = self._tool_actions.get(self.controller.app_state.element_type)
        if act is not None and not act.isChecked():
            act.setChecked(True)

    def _pick_color(self, field: str):
        current = self.controller.selected_style(field)
        initial = hex_to_qcolor(current or "#000000", QColor("#000000"))
        color = QColorDialog.getColor(initial, self, "Choose Color")
        if color.isValid():
            self.controller.change_style(**{field: qcolor_to_hex(color)})

    # -------------------------------------------------------------------------
    # File operations
    # -------------------------------------------------------------------------

    def save_scene_dialog(self):
        """Save the scene as JSON to the workspace directory."""
        workspace = str(self.settings_manager.get_workspace_dir())
        path, _ = QFileDialog.getSaveFileName(
            self, "Save Scene", workspace, "Roughboard scene (*.roughboard *.json)"
        )
        if not path:
            return
        try:
            save_as_json(path, self.controller.elements, self.controller.app_state)
        except OSError as e:
            QMessageBox.critical(self, "Save failed", str(e))
            return
        self.statusBar().showMessage(f"Saved scene: {path}")

    def open_scene_dialog(self):
        """Open a scene JSON file from the workspace directory."""
        workspace = str(self.settings_manager.get_workspace_dir())
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Scene", workspace, "Roughboard scene (*.roughboard *.json)"
        )
        if not path:
            return
        try:
            elements, state = load_from_file(path)
        except SceneLoadError as e:
            QMessageBox.critical(self, "Open failed", str(e))
            return
        self.controller.load_scene_elements(elements, state)
        self.statusBar().showMessage(f"Opened scene: {path}")

    def closeEvent(self, event):
        if self.settings_manager.settings.autosave:
            trace("Autosaving scene", "MAIN")
            try:
                self.controller.save_local(self.storage)
            except OSError as e:
                trace(f"Autosave failed: {e}", "ERROR")
        super().closeEvent(event)


def main():
    """Application entry point."""
    trace("Application starting", "MAIN")
    app = QApplication(sys.argv)

    settings_manager = get_settings()
    settings_manager.ensure_file_complete()

    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    w = MainWindow(settings_manager)
    w.resize(1280, 860)
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    def excepthook(exc_type, exc_value, exc_tb):
        import traceback
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
