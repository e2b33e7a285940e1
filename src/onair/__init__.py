"""
온에어 상태 엔진: 현재/NEXT 상태, undo/redo 히스토리, 적용·초기화·숨김 전이.

- OnAirStore: 유일한 상태 원본, 변경마다 applyId 증가.
- HistoryLog: 유한 길이 선형 undo/redo.
- OnAirController: 요청 핸들러가 부르는 액션 표면 (저장소 변경 + 히스토리 기록).
"""

from src.onair.controller import OnAirController
from src.onair.errors import OnAirError, ValidationError
from src.onair.history import DEFAULT_HISTORY_CAPACITY, HistoryEntry, HistoryLog
from src.onair.state import OnAirState, OnAirStore

__all__ = [
    "OnAirController",
    "OnAirError",
    "ValidationError",
    "DEFAULT_HISTORY_CAPACITY",
    "HistoryEntry",
    "HistoryLog",
    "OnAirState",
    "OnAirStore",
]
