"""
온에어 상태 저장소. 오버레이가 지금/다음에 보여줄 내용의 유일한 원본.

모든 변경은 apply_id 를 정확히 한 번 올린다. 오버레이 클라이언트는 apply_id 만 비교해서
다시 그릴지 결정한다. 저장소는 히스토리를 읽지 않는다 (기록은 호출 측 몫).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from src.catalog.provider import Catalog, CatalogRef
from src.onair.errors import ValidationError
from src.onair.history import HistoryEntry
from src.onair.titles import HEAT_SEPARATOR

logger = logging.getLogger(__name__)


@dataclass
class OnAirState:
    title: str = ""
    leader: str = ""
    follower: str = ""
    without_pair: bool = False
    hidden: bool = False
    apply_id: int = 0
    next_title: str = ""

    def to_dict(self) -> dict:
        """오버레이 렌더러에 내려주는 형태."""
        return {
            "title": self.title,
            "leader": self.leader,
            "follower": self.follower,
            "withoutPair": self.without_pair,
            "hidden": self.hidden,
            "applyId": self.apply_id,
            "nextTitle": self.next_title,
        }


class OnAirStore:
    """OnAirState 를 변경할 수 있는 유일한 컴포넌트."""

    def __init__(self, catalog: Optional[Catalog] = None):
        self.catalog = catalog or Catalog()
        self._state = OnAirState()

    @property
    def state(self) -> OnAirState:
        """복사본 반환. 호출 측이 수정해도 저장소에는 영향 없음."""
        return replace(self._state)

    @property
    def apply_id(self) -> int:
        return self._state.apply_id

    def _commit(self, **changes) -> None:
        self._state = replace(self._state, apply_id=self._state.apply_id + 1, **changes)
        logger.debug("온에어 변경 applyId=%d %s", self._state.apply_id, sorted(changes))

    def _resolve(self, ref: CatalogRef, role: str) -> str:
        name = self.catalog.resolve(ref)
        if name is None:
            raise ValidationError(f"unknown {role} reference: {ref!r}")
        return name

    def snapshot(self, label: str) -> HistoryEntry:
        """현재 내용을 히스토리 항목으로 복사."""
        s = self._state
        return HistoryEntry(
            title=s.title,
            leader=s.leader,
            follower=s.follower,
            without_pair=s.without_pair,
            hidden=s.hidden,
            label=label,
        )

    # --- 상태 전이 ---

    def apply_pair(
        self,
        title: str,
        leader_ref: Optional[CatalogRef],
        follower_ref: Optional[CatalogRef],
        without_pair: bool = False,
    ) -> None:
        """
        타이틀 + 리더/팔로워. without_pair 가 아니면 두 참조 모두 필수.
        참조가 하나라도 해석되지 않으면 ValidationError, 상태는 그대로.
        솔로 표시는 이름 하나를 항상 leader 자리에 둔다 (팔로워만 넘어와도).
        """
        if without_pair and leader_ref is None:
            leader_ref, follower_ref = follower_ref, None
        if leader_ref is None:
            raise ValidationError("leader reference required")
        if follower_ref is None and not without_pair:
            raise ValidationError("follower reference required")
        leader = self._resolve(leader_ref, "leader")
        follower = self._resolve(follower_ref, "follower") if follower_ref is not None else ""
        self._commit(
            title=(title or "").strip(),
            leader=leader,
            follower=follower,
            without_pair=bool(without_pair),
        )

    def apply_heat(self, title: str, heat_label: Optional[str] = None) -> None:
        """히트/라운드 화면은 페어를 절대 보여주지 않는다."""
        base = (title or "").strip()
        full = f"{base}{HEAT_SEPARATOR}{heat_label}" if heat_label else base
        self._commit(title=full.strip(), leader="", follower="", without_pair=False)

    def apply_leader_only(self, name: str) -> None:
        self._commit(leader=(name or "").strip())

    def apply_follower_only(self, name: str) -> None:
        self._commit(follower=(name or "").strip())

    def clear(self) -> None:
        """내용만 비움. hidden 은 유지."""
        self._commit(title="", leader="", follower="", without_pair=False)

    def hide(self) -> None:
        self._commit(hidden=True)

    def show(self) -> None:
        self._commit(hidden=False)

    def restore(self, entry: HistoryEntry) -> None:
        """undo/redo 용. 항목 내용을 그대로 덮어쓴다 (NEXT 줄은 건드리지 않음)."""
        self._commit(
            title=entry.title,
            leader=entry.leader,
            follower=entry.follower,
            without_pair=entry.without_pair,
            hidden=entry.hidden,
        )

    def apply_next(self, title: str) -> None:
        self._commit(next_title=(title or "").strip())

    def clear_next(self) -> None:
        self._commit(next_title="")
