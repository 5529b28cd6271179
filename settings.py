"""
settings.py

Persistent settings management for Roughboard.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/roughboard/settings.toml
    - macOS: ~/Library/Application Support/roughboard/settings.toml
    - Linux: ~/.config/roughboard/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "roughboard"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


def set_settings(manager: Optional["SettingsManager"]) -> None:
    """Install (or clear, with ``None``) the global settings manager."""
    global _settings_manager
    _settings_manager = manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasHandleSettings:
    """Resize handle settings.

    Defaults:
        size: 8.0
        margin: 8.0
        dashed_line_margin: 4.0
        min_size_for_edge_handles: 40.0
        border_color: "#0078D7"
        fill_color: "#FFFFFF"
    """
    size: float = 8.0                         # Default: 8.0 pixels
    margin: float = 8.0                       # Default: 8.0 pixels outside the dashed outline
    dashed_line_margin: float = 4.0           # Default: 4.0 pixels between shape and outline
    min_size_for_edge_handles: float = 40.0   # Default: 40.0 pixels (5 handle widths)
    border_color: str = "#0078D7"             # Default: blue
    fill_color: str = "#FFFFFF"               # Default: white


@dataclass
class CanvasHitSettings:
    """Hit-testing settings.

    Defaults:
        line_threshold: 10.0
    """
    line_threshold: float = 10.0  # Default: 10.0 pixels


@dataclass
class CanvasShapeSettings:
    """Shape geometry settings.

    Defaults:
        invisible_threshold: 1.0
        diamond_vertex_offset: 1
        text_snap_threshold: 30.0
    """
    invisible_threshold: float = 1.0   # Default: 1.0 pixel
    diamond_vertex_offset: int = 1     # Default: 1 pixel
    text_snap_threshold: float = 30.0  # Default: 30.0 pixels from a shape centre


@dataclass
class CanvasLineSettings:
    """Arrow / line settings.

    Defaults:
        dragging_threshold: 10.0
        arrowhead_size: 30.0
        arrowhead_angle: 20.0
    """
    dragging_threshold: float = 10.0   # Default: 10.0 pixels before a drag creates a segment
    arrowhead_size: float = 30.0       # Default: 30.0 pixels
    arrowhead_angle: float = 20.0      # Default: 20.0 degrees


@dataclass
class CanvasSelectionSettings:
    """Selection appearance settings.

    Defaults:
        outline_color: "#0078D7"
        rubber_band_color: "#0000FF"
        rubber_band_alpha: 26
    """
    outline_color: str = "#0078D7"      # Default: blue
    rubber_band_color: str = "#0000FF"  # Default: blue
    rubber_band_alpha: int = 26         # Default: 26 (about 10%)


@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        wheel_factor: 1.15
    """
    wheel_factor: float = 1.15  # Default: 1.15 (15% per scroll step)


@dataclass
class CanvasSettings:
    """All canvas-related settings."""
    handles: CanvasHandleSettings = field(default_factory=CanvasHandleSettings)
    hit: CanvasHitSettings = field(default_factory=CanvasHitSettings)
    shapes: CanvasShapeSettings = field(default_factory=CanvasShapeSettings)
    lines: CanvasLineSettings = field(default_factory=CanvasLineSettings)
    selection: CanvasSelectionSettings = field(default_factory=CanvasSelectionSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Keyboard / History Settings
# =============================================================================

@dataclass
class KeyboardSettings:
    """Arrow-key nudge settings.

    Defaults:
        translate_amount: 1
        shift_translate_amount: 5
    """
    translate_amount: int = 1         # Default: 1 pixel
    shift_translate_amount: int = 5   # Default: 5 pixels


@dataclass
class HistorySettings:
    """Undo history settings.

    Defaults:
        max_entries: 0
    """
    max_entries: int = 0  # Default: 0 (unlimited)


# =============================================================================
# Default Style Settings
# =============================================================================

@dataclass
class DefaultStyleSettings:
    """Style applied to newly created elements.

    Defaults:
        stroke_color: "#000000"
        background_color: "transparent"
        fill_style: "hachure"
        stroke_width: 1
        roughness: 1
        opacity: 100
        font: "20px Virgil"
        view_background_color: "#ffffff"
    """
    stroke_color: str = "#000000"           # Default: black
    background_color: str = "transparent"   # Default: no fill
    fill_style: str = "hachure"             # Default: "hachure"
    stroke_width: int = 1                   # Default: 1 pixel
    roughness: int = 1                      # Default: 1
    opacity: int = 100                      # Default: 100 (opaque)
    font: str = "20px Virgil"               # Default: "20px Virgil"
    view_background_color: str = "#ffffff"  # Default: white


@dataclass
class DefaultSettings:
    """Defaults for new content."""
    style: DefaultStyleSettings = field(default_factory=DefaultStyleSettings)


# =============================================================================
# Debug Settings
# =============================================================================

@dataclass
class DebugSettings:
    """Debug tracing settings.

    Defaults:
        trace: False
        trace_paint: False
        log_file: ""
    """
    trace: bool = False       # Default: False
    trace_paint: bool = False  # Default: False (very verbose)
    log_file: str = ""        # Default: "" (stderr only)


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        workspace_dir: Default directory for opening/saving scenes.
        autosave: Save the scene to local storage when the window closes.
        canvas: Canvas-related settings.
        keyboard: Arrow-key nudge settings.
        history: Undo history settings.
        defaults: Default style for new elements.
        debug: Tracing settings.
    """
    # Workspace directory for scene open/save (empty = ~/Documents/Roughboard)
    workspace_dir: str = ""

    autosave: bool = True

    # Nested settings categories
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    keyboard: KeyboardSettings = field(default_factory=KeyboardSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    defaults: DefaultSettings = field(default_factory=DefaultSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Explicit directory overriding the platform location.
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Union[str, Path, None] = None):
        if settings_dir is None:
            settings_dir = platformdirs.user_config_dir(app_name)
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError):
            # If file is corrupted or invalid, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.workspace_dir = general.get("workspace_dir", settings.workspace_dir)
        settings.autosave = general.get("autosave", settings.autosave)

        # Canvas section
        canvas = data.get("canvas", {})
        if "handles" in canvas:
            h = canvas["handles"]
            settings.canvas.handles.size = h.get("size", settings.canvas.handles.size)
            settings.canvas.handles.margin = h.get("margin", settings.canvas.handles.margin)
            settings.canvas.handles.dashed_line_margin = h.get("dashed_line_margin", settings.canvas.handles.dashed_line_margin)
            settings.canvas.handles.min_size_for_edge_handles = h.get("min_size_for_edge_handles", settings.canvas.handles.min_size_for_edge_handles)
            settings.canvas.handles.border_color = h.get("border_color", settings.canvas.handles.border_color)
            settings.canvas.handles.fill_color = h.get("fill_color", settings.canvas.handles.fill_color)
        if "hit" in canvas:
            hit = canvas["hit"]
            settings.canvas.hit.line_threshold = hit.get("line_threshold", settings.canvas.hit.line_threshold)
        if "shapes" in canvas:
            s = canvas["shapes"]
            settings.canvas.shapes.invisible_threshold = s.get("invisible_threshold", settings.canvas.shapes.invisible_threshold)
            settings.canvas.shapes.diamond_vertex_offset = s.get("diamond_vertex_offset", settings.canvas.shapes.diamond_vertex_offset)
            settings.canvas.shapes.text_snap_threshold = s.get("text_snap_threshold", settings.canvas.shapes.text_snap_threshold)
        if "lines" in canvas:
            li = canvas["lines"]
            settings.canvas.lines.dragging_threshold = li.get("dragging_threshold", settings.canvas.lines.dragging_threshold)
            settings.canvas.lines.arrowhead_size = li.get("arrowhead_size", settings.canvas.lines.arrowhead_size)
            settings.canvas.lines.arrowhead_angle = li.get("arrowhead_angle", settings.canvas.lines.arrowhead_angle)
        if "selection" in canvas:
            sel = canvas["selection"]
            settings.canvas.selection.outline_color = sel.get("outline_color", settings.canvas.selection.outline_color)
            settings.canvas.selection.rubber_band_color = sel.get("rubber_band_color", settings.canvas.selection.rubber_band_color)
            settings.canvas.selection.rubber_band_alpha = sel.get("rubber_band_alpha", settings.canvas.selection.rubber_band_alpha)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.wheel_factor = zm.get("wheel_factor", settings.canvas.zoom.wheel_factor)

        # Keyboard section
        keyboard = data.get("keyboard", {})
        settings.keyboard.translate_amount = keyboard.get("translate_amount", settings.keyboard.translate_amount)
        settings.keyboard.shift_translate_amount = keyboard.get("shift_translate_amount", settings.keyboard.shift_translate_amount)

        # History section
        history = data.get("history", {})
        settings.history.max_entries = history.get("max_entries", settings.history.max_entries)

        # Defaults section
        defaults = data.get("defaults", {})
        if "style" in defaults:
            st = defaults["style"]
            settings.defaults.style.stroke_color = st.get("stroke_color", settings.defaults.style.stroke_color)
            settings.defaults.style.background_color = st.get("background_color", settings.defaults.style.background_color)
            settings.defaults.style.fill_style = st.get("fill_style", settings.defaults.style.fill_style)
            settings.defaults.style.stroke_width = st.get("stroke_width", settings.defaults.style.stroke_width)
            settings.defaults.style.roughness = st.get("roughness", settings.defaults.style.roughness)
            settings.defaults.style.opacity = st.get("opacity", settings.defaults.style.opacity)
            settings.defaults.style.font = st.get("font", settings.defaults.style.font)
            settings.defaults.style.view_background_color = st.get("view_background_color", settings.defaults.style.view_background_color)

        # Debug section
        debug = data.get("debug", {})
        settings.debug.trace = debug.get("trace", settings.debug.trace)
        settings.debug.trace_paint = debug.get("trace_paint", settings.debug.trace_paint)
        settings.debug.log_file = debug.get("log_file", settings.debug.log_file)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "workspace_dir": s.workspace_dir,
                "autosave": s.autosave,
            },
            "canvas": {
                "handles": {
                    "size": s.canvas.handles.size,
                    "margin": s.canvas.handles.margin,
                    "dashed_line_margin": s.canvas.handles.dashed_line_margin,
                    "min_size_for_edge_handles": s.canvas.handles.min_size_for_edge_handles,
                    "border_color": s.canvas.handles.border_color,
                    "fill_color": s.canvas.handles.fill_color,
                },
                "hit": {
                    "line_threshold": s.canvas.hit.line_threshold,
                },
                "shapes": {
                    "invisible_threshold": s.canvas.shapes.invisible_threshold,
                    "diamond_vertex_offset": s.canvas.shapes.diamond_vertex_offset,
                    "text_snap_threshold": s.canvas.shapes.text_snap_threshold,
                },
                "lines": {
                    "dragging_threshold": s.canvas.lines.dragging_threshold,
                    "arrowhead_size": s.canvas.lines.arrowhead_size,
                    "arrowhead_angle": s.canvas.lines.arrowhead_angle,
                },
                "selection": {
                    "outline_color": s.canvas.selection.outline_color,
                    "rubber_band_color": s.canvas.selection.rubber_band_color,
                    "rubber_band_alpha": s.canvas.selection.rubber_band_alpha,
                },
                "zoom": {
                    "wheel_factor": s.canvas.zoom.wheel_factor,
                },
            },
            "keyboard": {
                "translate_amount": s.keyboard.translate_amount,
                "shift_translate_amount": s.keyboard.shift_translate_amount,
            },
            "history": {
                "max_entries": s.history.max_entries,
            },
            "defaults": {
                "style": {
                    "stroke_color": s.defaults.style.stroke_color,
                    "background_color": s.defaults.style.background_color,
                    "fill_style": s.defaults.style.fill_style,
                    "stroke_width": s.defaults.style.stroke_width,
                    "roughness": s.defaults.style.roughness,
                    "opacity": s.defaults.style.opacity,
                    "font": s.defaults.style.font,
                    "view_background_color": s.defaults.style.view_background_color,
                },
            },
            "debug": {
                "trace": s.debug.trace,
                "trace_paint": s.debug.trace_paint,
                "log_file": s.debug.log_file,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_workspace_dir(self) -> Path:
        """Get the resolved workspace directory path.

        Returns:
            Path to workspace directory. Falls back to ~/Documents/Roughboard
            if workspace_dir setting is empty.
        """
        if self.settings.workspace_dir:
            return Path(self.settings.workspace_dir)
        return Path.home() / "Documents" / "Roughboard"

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
