"""
data/storage.py

File-backed key/value storage for autosaving the scene between sessions.

Each key is stored as a JSON file in the platform user data directory
(``platformdirs.user_data_dir("roughboard")``).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import platformdirs

from app_state import AppState, clear_app_state_for_storage
from data.json_io import SceneLoadError, restore
from models import Element, ElementType
from settings import APP_NAME

logger = logging.getLogger(__name__)

LOCAL_STORAGE_KEY = "roughboard"
LOCAL_STORAGE_KEY_STATE = "roughboard-state"


class LocalStorage:
    """Tiny persistent string store, one file per key.

    Args:
        storage_dir: Directory holding the files. Defaults to the platform
            user data directory.
    """

    def __init__(self, storage_dir: Union[str, Path, None] = None):
        if storage_dir is None:
            storage_dir = platformdirs.user_data_dir(APP_NAME)
        self.storage_dir = Path(storage_dir)

    def _path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return None

    def set_item(self, key: str, value: str) -> None:
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


def save_to_local_storage(storage: LocalStorage, elements: Iterable[Element], app_state: AppState) -> None:
    """Persist non-deleted, non-selection elements and the storable app state."""
    kept = [
        e.to_dict() for e in elements
        if not e.is_deleted and e.type != ElementType.SELECTION
    ]
    storage.set_item(LOCAL_STORAGE_KEY, json.dumps(kept))
    storage.set_item(LOCAL_STORAGE_KEY_STATE, json.dumps(clear_app_state_for_storage(app_state)))


def restore_from_local_storage(storage: LocalStorage) -> Tuple[List[Element], Dict[str, Any]]:
    """Load the autosaved scene. Missing or corrupt data yields an empty scene."""
    saved_elements: List[Any] = []
    saved_state: Dict[str, Any] = {}

    raw_elements = storage.get_item(LOCAL_STORAGE_KEY)
    if raw_elements:
        try:
            saved_elements = json.loads(raw_elements)
        except ValueError:
            logger.warning("Ignoring corrupt saved elements")
        if not isinstance(saved_elements, list):
            logger.warning("Ignoring saved elements of type %s", type(saved_elements).__name__)
            saved_elements = []

    raw_state = storage.get_item(LOCAL_STORAGE_KEY_STATE)
    if raw_state:
        try:
            saved_state = json.loads(raw_state)
        except ValueError:
            logger.warning("Ignoring corrupt saved app state")
        if not isinstance(saved_state, dict):
            saved_state = {}

    try:
        return restore(saved_elements, saved_state)
    except SceneLoadError as e:
        logger.warning("Ignoring unusable saved scene: %s", e)
        return [], saved_state
