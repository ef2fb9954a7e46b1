import json
import unittest

from stellar_habits.storage import STORAGE_KEY, MemoryStorage
from stellar_habits.store import HabitStore


def _state():
    return {
        "habits": [
            {"id": "a", "name": "Read", "color": "#10b981", "icon": "Book",
             "frequencyPerWeek": 7, "createdAt": 1},
            {"id": "b", "name": "Run", "color": "#ef4444", "icon": "Activity",
             "frequencyPerWeek": 3, "createdAt": 2},
        ],
        "history": {"2026-02-02": {"a": True}},
        "viewMode": "week",
        "currentDate": "2026-02-04",
        "theme": "dark",
    }


class BrokenStorage(MemoryStorage):
    def write(self, key, blob):
        raise OSError("disk full")


class StoreMutationTests(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.store = HabitStore(self.storage, _state())

    def _persisted(self):
        return json.loads(self.storage.blobs[STORAGE_KEY])

    def test_double_toggle_restores_value(self):
        self.store.toggle_habit("b", "2026-02-05")
        self.assertTrue(self.store.state["history"]["2026-02-05"]["b"])
        self.store.toggle_habit("b", "2026-02-05")
        self.assertFalse(self.store.state["history"]["2026-02-05"]["b"])

        self.store.toggle_habit("a", "2026-02-02")
        self.store.toggle_habit("a", "2026-02-02")
        self.assertTrue(self.store.state["history"]["2026-02-02"]["a"])
        self.assertEqual(self._persisted()["history"]["2026-02-02"], {"a": True})

    def test_add_habit_appends_and_persists(self):
        habit = self.store.add_habit({"name": "Yoga", "color": "#8b5cf6", "specificDays": [1, 3]})
        habits = self.store.state["habits"]
        self.assertEqual(habits[-1]["id"], habit["id"])
        self.assertEqual(habit["frequencyPerWeek"], 2)
        self.assertEqual(self._persisted()["habits"][-1]["name"], "Yoga")

    def test_update_habit_merges_fields(self):
        self.store.update_habit("b", {"name": "Sprint", "id": "zzz", "specificDays": [0, 6]})
        habit = self.store.find_habit("b")
        self.assertEqual(habit["name"], "Sprint")
        self.assertEqual(habit["frequencyPerWeek"], 2)
        self.assertEqual(habit["color"], "#ef4444")
        self.assertIsNone(self.store.find_habit("zzz"))

        self.store.update_habit("b", {"specificDays": None, "frequencyPerWeek": 5})
        habit = self.store.find_habit("b")
        self.assertNotIn("specificDays", habit)
        self.assertEqual(habit["frequencyPerWeek"], 5)

    def test_update_unknown_habit_is_noop(self):
        self.store.update_habit("missing", {"name": "X"})
        self.assertNotIn(STORAGE_KEY, self.storage.blobs)
        self.assertEqual(self.store.snapshot(), _state())

    def test_delete_leaves_history_orphaned(self):
        self.store.delete_habit("a")
        self.assertEqual([h["id"] for h in self.store.state["habits"]], ["b"])
        self.assertEqual(self.store.state["history"], {"2026-02-02": {"a": True}})

    def test_view_date_and_theme(self):
        self.store.set_view_mode("month")
        self.store.set_view_mode("year")
        self.assertEqual(self.store.state["viewMode"], "month")

        self.store.set_current_date("2026-03-15")
        self.store.set_current_date("not a date")
        self.assertEqual(self.store.state["currentDate"], "2026-03-15")

        self.store.navigate_month(-1)
        self.assertEqual(self.store.state["currentDate"], "2026-02-01")
        self.store.navigate_month(11)
        self.assertEqual(self.store.state["currentDate"], "2027-01-01")

        self.store.toggle_theme()
        self.assertEqual(self.store.state["theme"], "light")
        self.store.toggle_theme()
        self.assertEqual(self._persisted()["theme"], "dark")

    def test_state_is_read_only(self):
        with self.assertRaises(TypeError):
            self.store.state["theme"] = "light"

    def test_views_do_not_write_through(self):
        self.store.state["habits"].append({"id": "zz", "name": "Sneaky"})
        self.store.state["history"]["2026-02-04"] = {"a": True}
        self.store.find_habit("a")["name"] = "Renamed"
        added = self.store.add_habit({"name": "Yoga"})
        added["name"] = "Changed"

        self.assertEqual([h["name"] for h in self.store.state["habits"]], ["Read", "Run", "Yoga"])
        self.assertNotIn("2026-02-04", self.store.state["history"])
        self.assertEqual(self._persisted()["habits"][-1]["name"], "Yoga")

    def test_bad_date_keys_are_ignored(self):
        self.store.set_current_date("2026-2-4")
        self.store.toggle_habit("a", "2026-2-4")
        self.store.toggle_habit("a", "someday")
        self.assertEqual(self.store.state["currentDate"], "2026-02-04")
        self.assertEqual(list(self.store.state["history"]), ["2026-02-02"])
        self.assertNotIn(STORAGE_KEY, self.storage.blobs)

    def test_unserializable_update_rolls_back(self):
        with self.assertLogs("stellar_habits.store", level="ERROR"):
            self.store.update_habit("b", {"color": object()})
        self.assertEqual(self.store.find_habit("b")["color"], "#ef4444")
        self.assertEqual(self.store.snapshot(), _state())
        self.assertNotIn(STORAGE_KEY, self.storage.blobs)


class StoreLifecycleTests(unittest.TestCase):
    def test_open_loads_persisted_snapshot(self):
        backend = MemoryStorage()
        first = HabitStore(backend, _state())
        first.toggle_habit("b", "2026-02-04")
        second = HabitStore.open(backend)
        self.assertEqual(second.snapshot(), first.snapshot())

    def test_open_without_snapshot_seeds_habits(self):
        store = HabitStore.open(MemoryStorage(), week_starts_on=0)
        self.assertEqual(len(store.state["habits"]), 3)
        self.assertEqual(store.week_starts_on, 0)

    def test_instances_are_independent(self):
        one = HabitStore(MemoryStorage(), _state())
        two = HabitStore(MemoryStorage(), _state())
        one.delete_habit("a")
        self.assertEqual(len(two.state["habits"]), 2)

    def test_failed_write_rolls_back(self):
        store = HabitStore(BrokenStorage(), _state())
        with self.assertLogs("stellar_habits.store", level="ERROR"):
            store.toggle_habit("b", "2026-02-04")
        self.assertNotIn("2026-02-04", store.state["history"])
        with self.assertLogs("stellar_habits.store", level="ERROR"):
            store.add_habit({"name": "Yoga"})
        self.assertEqual(len(store.state["habits"]), 2)


if __name__ == "__main__":
    unittest.main()
