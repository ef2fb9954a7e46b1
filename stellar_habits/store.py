import copy
import logging
from contextlib import contextmanager
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

from .config import DEFAULT_WEEK_STARTS_ON
from .dates import format_date, is_valid_date_key, parse_date, shift_month
from .habits import make_habit, normalize_habit
from .ledger import toggle
from .storage import STORAGE_KEY, THEMES, VIEW_MODES, load_state, serialize_state

logger = logging.getLogger(__name__)


class HabitStore:
    """Owns the app state; every mutation is written through to storage.

    A failed write restores the state as it was before the mutation, so the
    in-memory copy and the stored snapshot never disagree.
    """

    def __init__(
        self,
        storage: Any,
        state: Optional[Dict[str, Any]] = None,
        week_starts_on: int = DEFAULT_WEEK_STARTS_ON,
        key: str = STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._key = key
        self.week_starts_on = week_starts_on
        self._state = state if state is not None else load_state(storage, key)

    @classmethod
    def open(cls, storage: Any, week_starts_on: int = DEFAULT_WEEK_STARTS_ON) -> "HabitStore":
        return cls(storage, week_starts_on=week_starts_on)

    @property
    def state(self) -> Mapping[str, Any]:
        """Read-only copy; changes go through the store's operations."""
        return MappingProxyType(copy.deepcopy(self._state))

    @property
    def current_date(self) -> date:
        return parse_date(self._state["currentDate"])

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self._state)

    def _habit(self, habit_id: str) -> Optional[Dict[str, Any]]:
        for habit in self._state["habits"]:
            if isinstance(habit, dict) and habit.get("id") == habit_id:
                return habit
        return None

    def find_habit(self, habit_id: str) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._habit(habit_id))

    @contextmanager
    def _mutation(self, action: str) -> Iterator[Dict[str, Any]]:
        before = copy.deepcopy(self._state)
        try:
            yield self._state
            self._storage.write(self._key, serialize_state(self._state))
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save state after %s: %s", action, exc)
            self._state = before
            return
        logger.debug("Saved state after %s", action)

    def add_habit(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        existing = [h.get("id") for h in self._state["habits"] if isinstance(h, dict)]
        habit = make_habit(fields, existing)
        with self._mutation("add_habit") as state:
            state["habits"].append(habit)
        return copy.deepcopy(habit)

    def update_habit(self, habit_id: str, fields: Dict[str, Any]) -> None:
        if self._habit(habit_id) is None:
            logger.debug("update_habit: no habit %s", habit_id)
            return
        updates = {k: v for k, v in fields.items() if k not in ("id", "createdAt")}
        if isinstance(updates.get("name"), str):
            updates["name"] = updates["name"].strip()
        if "specificDays" in updates and updates["specificDays"] is None:
            updates["specificDays"] = []
        with self._mutation("update_habit"):
            habit = self._habit(habit_id)
            habit.update(updates)
            normalize_habit(habit)

    def delete_habit(self, habit_id: str) -> None:
        with self._mutation("delete_habit") as state:
            state["habits"] = [
                h for h in state["habits"] if not (isinstance(h, dict) and h.get("id") == habit_id)
            ]

    def toggle_habit(self, habit_id: str, date_key: str) -> None:
        if not is_valid_date_key(date_key):
            logger.debug("toggle_habit: ignoring %r", date_key)
            return
        with self._mutation("toggle_habit") as state:
            toggle(state["history"], date_key, habit_id)

    def set_view_mode(self, mode: str) -> None:
        if mode not in VIEW_MODES:
            logger.debug("set_view_mode: ignoring %r", mode)
            return
        with self._mutation("set_view_mode") as state:
            state["viewMode"] = mode

    def set_current_date(self, date_key: str) -> None:
        if not is_valid_date_key(date_key):
            logger.debug("set_current_date: ignoring %r", date_key)
            return
        with self._mutation("set_current_date") as state:
            state["currentDate"] = date_key

    def navigate_month(self, direction: int) -> None:
        self.set_current_date(format_date(shift_month(self.current_date, direction)))

    def toggle_theme(self) -> None:
        with self._mutation("toggle_theme") as state:
            state["theme"] = THEMES[1] if state.get("theme") == THEMES[0] else THEMES[0]
