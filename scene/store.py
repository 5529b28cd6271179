"""
scene/store.py

Ordered element store.

The store owns the scene list. Index 0 is painted first. Deleted elements
stay in the list (soft delete) so history snapshots can bring them back.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from debug_trace import trace
from models import Element, clone_element, mutate_element

StoreCallback = Callable[[], None]
RestackFn = Callable[[List[Element], List[int]], Any]


class ElementStore:
    """Owns the scene element sequence and its selection."""

    def __init__(self, elements: Optional[Iterable[Element]] = None):
        self._elements: List[Element] = list(elements or [])
        self._callbacks: List[StoreCallback] = []

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def add_callback(self, cb: StoreCallback) -> Callable[[], None]:
        """Register ``cb`` and return a function that unregisters it."""
        self._callbacks.append(cb)

        def remove() -> None:
            if cb in self._callbacks:
                self._callbacks.remove(cb)
        return remove

    def notify(self) -> None:
        for cb in list(self._callbacks):
            cb()

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    @property
    def elements(self) -> List[Element]:
        """All elements including soft-deleted ones (do not mutate the list)."""
        return self._elements

    def non_deleted_elements(self) -> List[Element]:
        return [e for e in self._elements if not e.is_deleted]

    def get(self, element_id: str) -> Optional[Element]:
        for e in self._elements:
            if e.id == element_id:
                return e
        return None

    def index_of(self, element_id: str) -> int:
        for i, e in enumerate(self._elements):
            if e.id == element_id:
                return i
        return -1

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self):
        return iter(self._elements)

    # -------------------------------------------------------------------------
    # Structural mutation
    # -------------------------------------------------------------------------

    def append(self, *elements: Element) -> None:
        self._elements.extend(elements)
        trace(f"append {[e.id for e in elements]}", "STORE")
        self.notify()

    def remove(self, predicate: Callable[[Element], bool], soft: bool = True) -> List[Element]:
        """Delete the elements matching ``predicate``.

        Args:
            predicate: Selects the elements to delete.
            soft: Mark them ``is_deleted`` (default) instead of dropping them.

        Returns:
            The deleted elements.
        """
        removed = [e for e in self._elements if not e.is_deleted and predicate(e)]
        if not removed:
            return removed
        if soft:
            for e in removed:
                e.is_selected = False
                mutate_element(e, is_deleted=True)
        else:
            ids = {e.id for e in removed}
            self._elements = [e for e in self._elements if e.id not in ids]
        trace(f"remove soft={soft} {[e.id for e in removed]}", "STORE")
        self.notify()
        return removed

    def discard(self, element: Element) -> None:
        """Drop one element outright (used for elements never committed)."""
        self._elements = [e for e in self._elements if e is not element]
        self.notify()

    def replace_all(self, elements: Iterable[Element]) -> None:
        self._elements = list(elements)
        trace(f"replace_all ({len(self._elements)})", "STORE")
        self.notify()

    def restack(self, fn: RestackFn) -> None:
        """Reorder with a z-order function taking (elements, selected indices)."""
        indices = self.selected_indices()
        if not indices:
            return
        moved = [self._elements[i] for i in indices]
        fn(self._elements, indices)
        for element in moved:
            # Restacked elements count as changed
            mutate_element(element)
        self.notify()

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def selected_indices(self) -> List[int]:
        return [i for i, e in enumerate(self._elements) if e.is_selected and not e.is_deleted]

    def selected_elements(self) -> List[Element]:
        return [e for e in self._elements if e.is_selected and not e.is_deleted]

    def is_any_selected(self) -> bool:
        return any(e.is_selected and not e.is_deleted for e in self._elements)

    def selected_attribute(self, projector: Callable[[Element], Any]) -> Any:
        """Common projected value across the selection, or None if they differ."""
        values = {projector(e) for e in self.selected_elements()}
        if len(values) == 1:
            return values.pop()
        return None

    def clear_selection(self) -> None:
        for e in self._elements:
            e.is_selected = False

    def select_all(self) -> None:
        for e in self._elements:
            e.is_selected = not e.is_deleted

    def set_selected(self, predicate: Callable[[Element], bool]) -> None:
        for e in self._elements:
            e.is_selected = not e.is_deleted and predicate(e)

    def snapshot(self) -> Dict[str, Element]:
        """Deep copies of the current elements keyed by id."""
        return {e.id: clone_element(e) for e in self._elements}

    def restore_snapshot(self, copies: Dict[str, Element], order: Sequence[str]) -> None:
        """Put back the copies taken by ``snapshot`` in ``order``."""
        self._elements = [copies[i] for i in order if i in copies]
        self.notify()
