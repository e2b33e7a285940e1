"""
온에어 액션 표면.

저장소 변경 → 히스토리 기록을 하나의 락 안에서 처리한다. FastAPI 동기 핸들러는
스레드풀에서 돌기 때문에, 액션 하나가 부분 상태를 남기지 않도록 여기서 직렬화한다.
네트워크 I/O 는 이 락 안에서 절대 하지 않는다.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from src.catalog.provider import Catalog, CatalogRef, SpecialItemRef
from src.onair.errors import ValidationError
from src.onair.history import DEFAULT_HISTORY_CAPACITY, HistoryLog
from src.onair.state import OnAirState, OnAirStore
from src.onair.titles import build_title

logger = logging.getLogger(__name__)


class OnAirController:
    """OnAirStore + HistoryLog 묶음. 요청 핸들러는 이 객체만 호출한다."""

    def __init__(self, catalog: Optional[Catalog] = None, history_capacity: int = DEFAULT_HISTORY_CAPACITY):
        self.catalog = catalog or Catalog()
        self.store = OnAirStore(self.catalog)
        self.history = HistoryLog(history_capacity)
        self._lock = threading.Lock()

    def _journaled(self, label: str, mutate) -> OnAirState:
        with self._lock:
            mutate()
            self.history.record(self.store.snapshot(label))
            state = self.store.state
        logger.info("온에어 적용: %s (applyId=%d)", label, state.apply_id)
        return state

    def state(self) -> OnAirState:
        with self._lock:
            return self.store.state

    def history_snapshot(self) -> dict:
        with self._lock:
            return self.history.snapshot()

    # --- 기본 액션 ---

    def apply_pair(
        self,
        title: str,
        leader_ref: Optional[CatalogRef],
        follower_ref: Optional[CatalogRef],
        without_pair: bool = False,
    ) -> OnAirState:
        return self._journaled(
            f"pair: {title}",
            lambda: self.store.apply_pair(title, leader_ref, follower_ref, without_pair),
        )

    def apply_heat(self, title: str, heat_label: Optional[str] = None) -> OnAirState:
        label = f"heat: {build_title(title, heat_label)}"
        return self._journaled(label, lambda: self.store.apply_heat(title, heat_label))

    def apply_leader(self, ref: CatalogRef) -> OnAirState:
        name = self._resolve(ref, "leader")
        return self._journaled(f"leader: {name}", lambda: self.store.apply_leader_only(name))

    def apply_follower(self, ref: CatalogRef) -> OnAirState:
        name = self._resolve(ref, "follower")
        return self._journaled(f"follower: {name}", lambda: self.store.apply_follower_only(name))

    def apply_leader_name(self, name: str) -> OnAirState:
        return self._journaled(f"leader: {name}", lambda: self.store.apply_leader_only(name))

    def apply_follower_name(self, name: str) -> OnAirState:
        return self._journaled(f"follower: {name}", lambda: self.store.apply_follower_only(name))

    def clear(self) -> OnAirState:
        return self._journaled("clear", self.store.clear)

    def hide(self) -> OnAirState:
        return self._journaled("hide", self.store.hide)

    def show(self) -> OnAirState:
        return self._journaled("show", self.store.show)

    def undo(self) -> Optional[OnAirState]:
        """원점이면 None (오류 아님)."""
        with self._lock:
            entry = self.history.undo()
            if entry is None:
                return None
            self.store.restore(entry)
            state = self.store.state
        logger.info("undo → %s (applyId=%d)", entry.label, state.apply_id)
        return state

    def redo(self) -> Optional[OnAirState]:
        with self._lock:
            entry = self.history.redo()
            if entry is None:
                return None
            self.store.restore(entry)
            state = self.store.state
        logger.info("redo → %s (applyId=%d)", entry.label, state.apply_id)
        return state

    # --- 콘테스트 단위 액션 ---

    def apply_finals(
        self,
        contest_id: str,
        leader_ref: Optional[CatalogRef],
        follower_ref: Optional[CatalogRef],
        without_pair: bool = False,
    ) -> OnAirState:
        contest = self._contest(contest_id)
        if contest.type != "finals":
            raise ValidationError("contest is not finals type")
        return self.apply_pair(build_title(contest.name), leader_ref, follower_ref, without_pair)

    def apply_rounds(self, contest_id: str, heat_label: Optional[str] = None) -> OnAirState:
        contest = self._contest(contest_id)
        if contest.type != "rounds":
            raise ValidationError("contest is not rounds type")
        return self.apply_heat(contest.name, heat_label or None)

    def apply_special(
        self,
        special_id: str,
        item_index: Optional[int],
        second_index: Optional[int] = None,
    ) -> OnAirState:
        """스페셜: 타이틀 = 스페셜 이름, 페어 줄 = 선택 항목 (두 번째 항목이 있으면 페어)."""
        special = self.catalog.special(special_id)
        if special is None:
            raise ValidationError("invalid specialId")
        if item_index is None:
            raise ValidationError("itemIndex required")
        follower_ref = SpecialItemRef(special_id, second_index) if second_index is not None else None
        return self.apply_pair(
            build_title(special.name),
            SpecialItemRef(special_id, item_index),
            follower_ref,
            without_pair=follower_ref is None,
        )

    def apply_next(self, contest_id: str, heat_label: Optional[str] = None) -> OnAirState:
        """NEXT 줄. 히트는 rounds 콘테스트에서만 붙는다. 히스토리에는 남기지 않는다."""
        contest = self._contest(contest_id)
        heat = heat_label if contest.type == "rounds" and heat_label else None
        title = build_title(contest.name, heat, is_next=True)
        with self._lock:
            self.store.apply_next(title)
            state = self.store.state
        logger.info("NEXT 적용: %s (applyId=%d)", title, state.apply_id)
        return state

    def clear_next(self) -> OnAirState:
        with self._lock:
            self.store.clear_next()
            state = self.store.state
        logger.info("NEXT 초기화 (applyId=%d)", state.apply_id)
        return state

    def _contest(self, contest_id: str):
        if not contest_id:
            raise ValidationError("contestId required")
        contest = self.catalog.contest(contest_id)
        if contest is None:
            raise ValidationError("invalid contestId")
        return contest

    def _resolve(self, ref: CatalogRef, role: str) -> str:
        name = self.catalog.resolve(ref)
        if name is None:
            raise ValidationError(f"unknown {role} reference: {ref!r}")
        return name
