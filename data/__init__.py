"""
data package

Scene interchange: JSON files, clipboard payloads and local storage.
"""

from data.json_io import (
    SceneLoadError,
    serialize_as_json,
    load_from_json,
    save_as_json,
    load_from_file,
    restore,
    calculate_scroll_center,
)
from data.clipboard import serialize_clipboard, parse_clipboard
from data.storage import LocalStorage, save_to_local_storage, restore_from_local_storage

__all__ = [
    "SceneLoadError",
    "serialize_as_json",
    "load_from_json",
    "save_as_json",
    "load_from_file",
    "restore",
    "calculate_scroll_center",
    "serialize_clipboard",
    "parse_clipboard",
    "LocalStorage",
    "save_to_local_storage",
    "restore_from_local_storage",
]
