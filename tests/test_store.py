"""Tests for the ordered element store."""
from __future__ import annotations

import pytest

from models import ElementType, new_element
from scene import ElementStore, move_all_left, move_all_right, move_one_left


def make_store(n=3):
    elements = [new_element(ElementType.RECTANGLE, i * 10, 0, 5, 5) for i in range(n)]
    return ElementStore(elements), elements


class TestAccess:
    def test_get_and_index(self):
        store, (a, b, c) = make_store()
        assert store.get(b.id) is b
        assert store.index_of(c.id) == 2
        assert store.get("missing") is None
        assert store.index_of("missing") == -1
        assert len(store) == 3
        assert list(store) == [a, b, c]

    def test_non_deleted(self):
        store, (a, b, c) = make_store()
        b.is_deleted = True
        assert store.non_deleted_elements() == [a, c]


class TestMutation:
    def test_append_notifies(self):
        store, _ = make_store(0)
        calls = []
        store.add_callback(lambda: calls.append(1))
        store.append(new_element(ElementType.ELLIPSE, 0, 0))
        assert len(store) == 1
        assert calls == [1]

    def test_callback_remover(self):
        store, _ = make_store(0)
        calls = []
        remove = store.add_callback(lambda: calls.append(1))
        remove()
        remove()
        store.notify()
        assert calls == []

    def test_soft_remove(self):
        store, (a, b, c) = make_store()
        b.is_selected = True
        version = b.version
        removed = store.remove(lambda e: e is b)
        assert removed == [b]
        assert b.is_deleted and not b.is_selected
        assert b.version > version
        assert store.elements == [a, b, c]

    def test_soft_remove_skips_already_deleted(self):
        store, (a, b, c) = make_store()
        store.remove(lambda e: e is b)
        assert store.remove(lambda e: e is b) == []

    def test_hard_remove(self):
        store, (a, b, c) = make_store()
        store.remove(lambda e: e is b, soft=False)
        assert store.elements == [a, c]

    def test_discard(self):
        store, (a, b, c) = make_store()
        store.discard(a)
        assert store.elements == [b, c]

    def test_replace_all(self):
        store, _ = make_store()
        fresh = [new_element(ElementType.DIAMOND, 0, 0)]
        store.replace_all(fresh)
        assert store.elements == fresh

    def test_restack_bumps_versions_of_moved(self):
        store, (a, b, c) = make_store()
        a.is_selected = True
        versions = (a.version, b.version)
        store.restack(move_all_right)
        assert store.elements == [b, c, a]
        assert a.version == versions[0] + 1
        assert b.version == versions[1]

    @pytest.mark.parametrize("fn", [move_all_left, move_one_left])
    def test_restack_bumps_only_the_selected_element(self, fn):
        store, (a, b, c) = make_store()
        c.is_selected = True
        versions = [e.version for e in (a, b, c)]
        store.restack(fn)
        assert store.elements[0 if fn is move_all_left else 1] is c
        assert [e.version for e in (a, b, c)] == [versions[0], versions[1], versions[2] + 1]

    def test_restack_without_selection_is_noop(self):
        store, elements = make_store()
        store.restack(move_all_right)
        assert store.elements == elements


class TestSelection:
    def test_selected(self):
        store, (a, b, c) = make_store()
        a.is_selected = c.is_selected = True
        c.is_deleted = True
        assert store.selected_elements() == [a]
        assert store.selected_indices() == [0]
        assert store.is_any_selected()

    def test_select_all_skips_deleted(self):
        store, (a, b, c) = make_store()
        b.is_deleted = True
        store.select_all()
        assert [e.is_selected for e in store] == [True, False, True]
        store.clear_selection()
        assert not store.is_any_selected()

    def test_set_selected(self):
        store, (a, b, c) = make_store()
        store.set_selected(lambda e: e is not a)
        assert store.selected_elements() == [b, c]

    def test_selected_attribute(self):
        store, (a, b, c) = make_store()
        store.select_all()
        assert store.selected_attribute(lambda e: e.type) == ElementType.RECTANGLE
        assert store.selected_attribute(lambda e: e.x) is None


class TestSnapshot:
    def test_snapshot_and_restore(self):
        store, (a, b, c) = make_store()
        copies = store.snapshot()
        order = [e.id for e in store]
        a.x = 500
        store.discard(b)
        store.restore_snapshot(copies, order)
        assert [e.id for e in store] == order
        assert store.elements[0].x == 0
        assert store.elements[0] is not a
