from __future__ import annotations

from collections import deque
from typing import Any, Deque, List


class InputQueue:
    def __init__(self) -> None:
        self._q: Deque[Any] = deque()

    def push(self, item: Any) -> None:
        self._q.append(item)

    def pop_all(self) -> List[Any]:
        out: List[Any] = list(self._q)
        self._q.clear()
        return out


class EventQueue(InputQueue):
    def of_type(self, kind: type) -> List[Any]:
        return [e for e in self._q if isinstance(e, kind)]


__all__ = ["InputQueue", "EventQueue"]
