import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .dates import format_date, is_valid_date_key, today_local
from .habits import normalize_habit, seed_habits
from .ledger import sanitize_history

logger = logging.getLogger(__name__)

STORAGE_KEY = "stellar_habits_data"
VIEW_MODES = ("month", "week")
THEMES = ("dark", "light")
DEFAULT_VIEW_MODE = "week"
DEFAULT_THEME = "dark"


class MemoryStorage:
    """Key-value blob store kept in a dict."""

    def __init__(self, blobs: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(blobs or {})

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self.blobs[key] = blob


class JsonFileStorage:
    """Key-value blob store with one ``<key>.json`` file per key."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def write(self, key: str, blob: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(blob)
        os.replace(tmp_path, path)


def default_state() -> Dict[str, Any]:
    return {
        "habits": seed_habits(),
        "history": {},
        "viewMode": DEFAULT_VIEW_MODE,
        "currentDate": format_date(today_local()),
        "theme": DEFAULT_THEME,
    }


def merge_with_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    state = default_state()
    habits = data.get("habits")
    if isinstance(habits, list):
        state["habits"] = [
            normalize_habit(item, as_stored=True) for item in habits if isinstance(item, dict)
        ]
    else:
        logger.warning("Snapshot has no valid habits list; using defaults")
    state["history"] = sanitize_history(data.get("history"))
    if data.get("viewMode") in VIEW_MODES:
        state["viewMode"] = data["viewMode"]
    if is_valid_date_key(data.get("currentDate")):
        state["currentDate"] = data["currentDate"]
    if data.get("theme") in THEMES:
        state["theme"] = data["theme"]
    return state


def serialize_state(state: Dict[str, Any]) -> str:
    return json.dumps(state, indent=2, sort_keys=True)


def deserialize_state(blob: Optional[str]) -> Dict[str, Any]:
    if blob is None:
        return default_state()
    try:
        data = json.loads(blob)
    except ValueError as exc:
        logger.warning("Failed to load state: %s", exc)
        return default_state()
    if not isinstance(data, dict):
        logger.warning("Failed to load state: snapshot is not an object")
        return default_state()
    return merge_with_defaults(data)


def load_state(storage: Any, key: str = STORAGE_KEY) -> Dict[str, Any]:
    try:
        blob = storage.read(key)
    except OSError as exc:
        logger.warning("Failed to read state: %s", exc)
        blob = None
    return deserialize_state(blob)


def save_state(storage: Any, state: Dict[str, Any], key: str = STORAGE_KEY) -> None:
    storage.write(key, serialize_state(state))
