"""Tests for the snapshot undo/redo history."""
from __future__ import annotations

import json

from history import SceneHistory
from models import ElementType, new_element


def entry(n: int) -> str:
    return SceneHistory.generate_entry({"name": "scene"}, [
        new_element(ElementType.RECTANGLE, n, n, 10, 10)
    ])


class TestGenerateEntry:
    def test_selection_flags_are_cleared(self):
        el = new_element(ElementType.RECTANGLE, 0, 0, 10, 10)
        el.is_selected = True
        data = json.loads(SceneHistory.generate_entry({}, [el]))
        assert data["elements"][0]["isSelected"] is False

    def test_shape_cache_is_stripped(self):
        el = new_element(ElementType.RECTANGLE, 0, 0, 10, 10)
        el.shape = ["cached"]
        data = json.loads(SceneHistory.generate_entry({}, [el]))
        assert "shape" not in data["elements"][0]

    def test_equal_scenes_give_equal_entries(self):
        el = new_element(ElementType.RECTANGLE, 0, 0, 10, 10)
        assert SceneHistory.generate_entry({"a": 1, "b": 2}, [el]) == \
            SceneHistory.generate_entry({"b": 2, "a": 1}, [el])


class TestStacks:
    def test_three_edits_undo_and_redo(self):
        h = SceneHistory()
        entries = [entry(i) for i in range(4)]
        for e in entries:
            h.push_entry(e)

        undone = [h.undo_once() for _ in range(3)]
        assert [d["elements"][0].x for d in undone] == [2, 1, 0]
        redone = [h.redo_once() for _ in range(3)]
        assert [d["elements"][0].x for d in redone] == [1, 2, 3]
        assert h.redo_once() is None

    def test_new_edit_after_undo_clears_redo(self):
        h = SceneHistory()
        for i in range(3):
            h.push_entry(entry(i))
        h.undo_once()
        assert h.can_redo()
        h.push_entry(entry(9))
        assert not h.can_redo()
        assert h.redo_once() is None

    def test_duplicate_push_is_ignored(self):
        h = SceneHistory()
        e = entry(1)
        h.push_entry(e)
        h.push_entry(e)
        assert h.undo_depth == 1

    def test_duplicate_push_keeps_redo(self):
        h = SceneHistory()
        first = entry(0)
        h.push_entry(first)
        h.push_entry(entry(1))
        h.undo_once()
        h.push_entry(first)
        assert h.can_redo()

    def test_undo_past_first_entry_returns_none(self):
        h = SceneHistory()
        h.push_entry(entry(0))
        assert h.undo_once() is None
        assert h.undo_depth == 0
        assert h.redo_depth == 1
        assert h.undo_once() is None

    def test_empty_history(self):
        h = SceneHistory()
        assert h.undo_once() is None
        assert h.redo_once() is None
        assert not h.can_undo()
        assert not h.can_redo()

    def test_max_entries_trims_oldest(self):
        h = SceneHistory(max_entries=2)
        for i in range(5):
            h.push_entry(entry(i))
        assert h.undo_depth == 2
        assert h.undo_once()["elements"][0].x == 3

    def test_max_entries_from_settings(self, settings_manager):
        settings_manager.settings.history.max_entries = 3
        assert SceneHistory().max_entries == 3

    def test_clear(self):
        h = SceneHistory()
        h.push_entry(entry(0))
        h.push_entry(entry(1))
        h.undo_once()
        h.skip_recording()
        h.clear()
        assert (h.undo_depth, h.redo_depth) == (0, 0)
        assert h.is_recording()


class TestMalformedEntries:
    def test_undo_onto_malformed_entry_is_noop(self, caplog):
        h = SceneHistory()
        h.push_entry("{not json")
        h.push_entry(entry(1))
        assert h.undo_once() is None
        assert (h.undo_depth, h.redo_depth) == (2, 0)
        assert "malformed" in caplog.text

    def test_entry_that_is_not_an_object_is_noop(self):
        h = SceneHistory()
        h.push_entry(entry(0))
        h.push_entry("[1, 2]")
        h.push_entry(entry(2))
        assert h.undo_once() is None
        assert h.redo_depth == 0

    def test_redo_of_malformed_entry_is_noop(self):
        h = SceneHistory()
        h.push_entry(entry(0))
        h.push_entry(entry(1))
        h.undo_once()
        h._redo_stack[-1] = "{broken"
        assert h.redo_once() is None
        assert (h.undo_depth, h.redo_depth) == (1, 1)


    def test_undo_onto_entry_with_unknown_element_type_is_noop(self, caplog):
        h = SceneHistory()
        h.push_entry(entry(0))
        h.push_entry('{"appState": {}, "elements": [{"type": "bogus"}]}')
        h.push_entry(entry(2))
        assert h.undo_once() is None
        assert (h.undo_depth, h.redo_depth) == (3, 0)
        assert "malformed element" in caplog.text

    def test_undo_onto_entry_with_bad_points_is_noop(self):
        h = SceneHistory()
        arrow = json.loads(entry(0))
        arrow["elements"][0].update(type="arrow", points=[[0, 0], [5]])
        h.push_entry(entry(0))
        h.push_entry(json.dumps(arrow))
        h.push_entry(entry(2))
        assert h.undo_once() is None
        assert (h.undo_depth, h.redo_depth) == (3, 0)

    def test_elements_field_must_be_a_list(self):
        h = SceneHistory()
        h.push_entry('{"appState": {}, "elements": {"x": 1}}')
        h.push_entry(entry(1))
        assert h.undo_once() is None
        assert h.redo_depth == 0

    def test_undo_returns_decoded_elements(self):
        h = SceneHistory()
        h.push_entry(entry(4))
        h.push_entry(entry(5))
        data = h.undo_once()
        assert data["elements"][0].type == ElementType.RECTANGLE
        assert data["appState"] == {"name": "scene"}

class TestRecording:
    def test_recording_flags(self):
        h = SceneHistory()
        assert h.is_recording()
        h.skip_recording()
        assert not h.is_recording()
        h.resume_recording()
        assert h.is_recording()
