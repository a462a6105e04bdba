from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CompletionEvent:
    completion_time_ms: float
    latency_ms: float


class CompletionQueue:
    """Binary min-heap of in-flight requests keyed on completion time."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[CompletionEvent] = []

    def __len__(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()

    def peek(self) -> CompletionEvent | None:
        return self._items[0] if self._items else None

    def push(self, event: CompletionEvent) -> None:
        self._items.append(event)
        self._sift_up(len(self._items) - 1)

    def pop(self) -> CompletionEvent | None:
        if not self._items:
            return None
        root = self._items[0]
        tail = self._items.pop()
        if self._items:
            self._items[0] = tail
            self._sift_down(0)
        return root

    def _sift_up(self, index: int) -> None:
        items = self._items
        while index > 0:
            parent = (index - 1) // 2
            if items[index].completion_time_ms >= items[parent].completion_time_ms:
                break
            items[index], items[parent] = items[parent], items[index]
            index = parent

    def _sift_down(self, index: int) -> None:
        items = self._items
        size = len(items)
        while True:
            left = index * 2 + 1
            right = left + 1
            smallest = index
            if left < size and items[left].completion_time_ms < items[smallest].completion_time_ms:
                smallest = left
            if right < size and items[right].completion_time_ms < items[smallest].completion_time_ms:
                smallest = right
            if smallest == index:
                return
            items[index], items[smallest] = items[smallest], items[index]
            index = smallest
