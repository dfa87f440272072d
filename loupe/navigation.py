"""Cursor movement over display rows.

List mode visits every row. Tree mode lands only on non-directory rows and
returns the input index unchanged when no such row exists.
"""

from __future__ import annotations

from collections.abc import Sequence

from loupe.models import FlatItem, ViewMode


def first_list_index(items: Sequence[FlatItem]) -> int:
    return 0 if items else -1


def next_list_index(items: Sequence[FlatItem], current: int) -> int:
    if not items:
        return current
    if current < len(items) - 1:
        return current + 1
    return 0


def prev_list_index(items: Sequence[FlatItem], current: int) -> int:
    if not items:
        return current
    if current > 0:
        return current - 1
    return len(items) - 1


def first_file_index(items: Sequence[FlatItem]) -> int:
    for index, item in enumerate(items):
        if not item.is_dir:
            return index
    return -1


def last_file_index(items: Sequence[FlatItem]) -> int:
    for index in range(len(items) - 1, -1, -1):
        if not items[index].is_dir:
            return index
    return -1


def next_file_index(items: Sequence[FlatItem], current: int) -> int:
    for index in range(current + 1, len(items)):
        if not items[index].is_dir:
            return index
    first = first_file_index(items)
    return current if first == -1 else first


def prev_file_index(items: Sequence[FlatItem], current: int) -> int:
    for index in range(min(current, len(items)) - 1, -1, -1):
        if not items[index].is_dir:
            return index
    last = last_file_index(items)
    return current if last == -1 else last


def first_index(mode: ViewMode, items: Sequence[FlatItem]) -> int:
    if mode == "repos":
        return first_list_index(items)
    return first_file_index(items)


def next_index(mode: ViewMode, items: Sequence[FlatItem], current: int) -> int:
    if mode == "repos":
        return next_list_index(items, current)
    return next_file_index(items, current)


def prev_index(mode: ViewMode, items: Sequence[FlatItem], current: int) -> int:
    if mode == "repos":
        return prev_list_index(items, current)
    return prev_file_index(items, current)
