"""Read-only in-memory todo list built once at startup."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from config import DEFAULT_TODO_ITEMS


@dataclass(frozen=True, slots=True)
class TodoList:
    items: tuple[str, ...]

    @classmethod
    def from_items(cls, items: Iterable[str]) -> "TodoList":
        return cls(items=tuple(str(item) for item in items))

    def __iter__(self) -> Iterator[str]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def default_todo_list() -> TodoList:
    return TodoList.from_items(DEFAULT_TODO_ITEMS)
