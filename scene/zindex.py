"""
scene/zindex.py

Z-order restacking of the element list.

All four operations work in place on ``elements`` and return it. Index 0 is
painted first (bottom of the stack). The relative order of the moved
elements, and of the elements left behind, is always preserved.
"""

from __future__ import annotations

from typing import List, MutableSequence, TypeVar

T = TypeVar("T")


def _swap(elements: MutableSequence[T], a: int, b: int) -> None:
    elements[a], elements[b] = elements[b], elements[a]


def move_one_left(elements: MutableSequence[T], indices: List[int]) -> MutableSequence[T]:
    """Send each indexed element one slot backward.

    Elements already packed at the front stay where they are.
    """
    is_sorted = True
    # Left to right so a swap never overwrites an element still to move
    for i, index in enumerate(sorted(indices)):
        is_sorted = is_sorted and index == i
        if is_sorted:
            continue
        _swap(elements, index - 1, index)
    return elements


def move_one_right(elements: MutableSequence[T], indices: List[int]) -> MutableSequence[T]:
    """Bring each indexed element one slot forward."""
    is_sorted = True
    last = len(elements) - 1
    for i, index in enumerate(sorted(indices, reverse=True)):
        is_sorted = is_sorted and index == last - i
        if is_sorted:
            continue
        _swap(elements, index + 1, index)
    return elements


def move_all_left(elements: MutableSequence[T], indices: List[int]) -> MutableSequence[T]:
    """Send the indexed elements to the back.

    Example, moving c and f::

        [a, b, c, d, e, f, g]  ->  [c, f, a, b, d, e, g]

    The moved elements are saved first, which frees their slots. Walking
    the markers from right to left, the run between two markers shifts
    right by the number of markers passed so far; the saved elements then
    fill the leading slots.
    """
    if not indices:
        return elements
    ordered = sorted(indices)
    leftmost = [elements[index] for index in ordered]

    markers = list(reversed(ordered)) + [0]
    for i in range(1, len(markers)):
        pos = markers[i - 1] - 1
        while pos >= markers[i]:
            elements[pos + i] = elements[pos]
            pos -= 1

    for i, element in enumerate(leftmost):
        elements[i] = element
    return elements


def move_all_right(elements: MutableSequence[T], indices: List[int]) -> MutableSequence[T]:
    """Bring the indexed elements to the front.

    Example, moving c and f::

        [a, b, c, d, e, f, g]  ->  [a, b, d, e, g, c, f]

    Mirror image of ``move_all_left``: runs between markers shift left, and
    the saved elements fill the trailing slots.
    """
    if not indices:
        return elements
    descending = sorted(indices, reverse=True)
    rightmost = [elements[index] for index in descending]

    markers = sorted(indices) + [len(elements)]
    for i in range(1, len(markers)):
        for pos in range(markers[i - 1] + 1, markers[i]):
            elements[pos - i] = elements[pos]

    size = len(elements)
    for i, element in enumerate(rightmost):
        elements[size - i - 1] = element
    return elements
