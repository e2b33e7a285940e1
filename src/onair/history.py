"""
온에어 히스토리 (undo/redo).

적용된 상태의 불변 스냅샷을 선형으로 쌓는다. 커서가 꼬리가 아닐 때 새 항목을 기록하면
커서 이후 항목(redo 가능분)은 버린다. 용량 초과 시 가장 오래된 항목부터 조용히 제거.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAPACITY = 200


@dataclass(frozen=True)
class HistoryEntry:
    """적용 시점의 온에어 스냅샷. 라이브 상태와 별개의 복사본."""
    title: str = ""
    leader: str = ""
    follower: str = ""
    without_pair: bool = False
    hidden: bool = False
    label: str = ""

    def to_dict(self) -> dict:
        d = asdict(self)
        return {
            "title": d["title"],
            "leader": d["leader"],
            "follower": d["follower"],
            "withoutPair": d["without_pair"],
            "hidden": d["hidden"],
            "label": d["label"],
        }


class HistoryLog:
    """
    커서가 있는 유한 길이 히스토리.

    불변식: 항목이 하나라도 있으면 0 <= index < len.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError(f"history capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: List[HistoryEntry] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._items)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[HistoryEntry]:
        if not self._items:
            return None
        return self._items[self._index]

    def record(self, entry: HistoryEntry) -> None:
        """커서 뒤를 잘라내고 추가, 커서를 꼬리로. 용량 초과분은 앞에서 제거."""
        if self._index < len(self._items) - 1:
            dropped = len(self._items) - 1 - self._index
            del self._items[self._index + 1:]
            logger.debug("히스토리 분기: redo 항목 %d개 폐기", dropped)
        self._items.append(entry)
        self._index = len(self._items) - 1

        overflow = len(self._items) - self.capacity
        if overflow > 0:
            del self._items[:overflow]
            self._index = max(0, self._index - overflow)
            logger.debug("히스토리 용량 초과: 오래된 항목 %d개 제거", overflow)

    def undo(self) -> Optional[HistoryEntry]:
        if self._index <= 0:
            return None
        self._index -= 1
        return self._items[self._index]

    def redo(self) -> Optional[HistoryEntry]:
        if self._index >= len(self._items) - 1:
            return None
        self._index += 1
        return self._items[self._index]

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return 0 <= self._index < len(self._items) - 1

    def snapshot(self) -> dict:
        """운영자 콘솔용 {items, index}."""
        return {
            "items": [e.to_dict() for e in self._items],
            "index": self._index,
        }
