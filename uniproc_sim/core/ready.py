"""Priority-ordered holding area for released, non-running tasks."""

from __future__ import annotations

import heapq

from uniproc_sim.schedulers import PriorityOrdering


class _Entry:
    __slots__ = ("index", "_ordering")

    def __init__(self, index: int, ordering: PriorityOrdering) -> None:
        self.index = index
        self._ordering = ordering

    def __lt__(self, other: "_Entry") -> bool:
        # Keys are read from the live task at comparison time.
        return self._ordering.higher_priority(self.index, other.index)


class ReadyQueue:
    """Binary heap of task indices ordered by the active ``PriorityOrdering``."""

    def __init__(self, ordering: PriorityOrdering) -> None:
        self._ordering = ordering
        self._heap: list[_Entry] = []
        self._members: set[int] = set()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __contains__(self, index: object) -> bool:
        return index in self._members

    def push(self, index: int) -> None:
        if index in self._members:
            raise ValueError(f"task index {index} is already ready")
        heapq.heappush(self._heap, _Entry(index, self._ordering))
        self._members.add(index)

    def peek(self) -> int:
        if not self._heap:
            raise IndexError("peek from empty ready queue")
        return self._heap[0].index

    def pop(self) -> int:
        if not self._heap:
            raise IndexError("pop from empty ready queue")
        entry = heapq.heappop(self._heap)
        self._members.discard(entry.index)
        return entry.index

    def remove(self, index: int) -> None:
        if index not in self._members:
            raise KeyError(index)
        self._heap = [entry for entry in self._heap if entry.index != index]
        heapq.heapify(self._heap)
        self._members.discard(index)

    def ordered(self) -> list[int]:
        """Members from highest to lowest priority, without mutating the heap."""

        return [entry.index for entry in sorted(self._heap)]

    def clear(self) -> None:
        self._heap = []
        self._members = set()
