"""
오버레이 동기화 프로토콜 (렌더링 클라이언트 측 계약).

브라우저 오버레이(page.py 의 JS)와 같은 규칙을 파이썬으로 옮긴 것. 폴러와 테스트가 사용.

- 첫 폴링: 무조건 렌더, applyId 기록 → SYNCED
- 이후: applyId 같으면 아무것도 안 함 (애니메이션 재생 금지)
- 다르면 필드별 diff: title / leader / follower / 페어 표시 여부. 바뀐 필드만 애니메이션.
- 애니메이션 트리거는 재시작 가능: 진행 중 상태를 먼저 끊고 다시 시작 (generation 증가)
- hideEmpty 가 켜져 있고 텍스트가 비면 레이아웃에서 제외, 아니면 빈 채로 자리 유지
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class SyncState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SYNCED = "synced"


@dataclass
class ElementView:
    """DOM 요소 하나의 모델."""
    text: str = ""
    visible: bool = True
    anim_type: str = "none"
    anim_ms: int = 0
    playing: bool = False
    generation: int = 0

    def restart_animation(self, anim_type: str, anim_ms: int) -> None:
        # play 클래스 제거 → reflow → 다시 추가 와 같은 순서
        self.playing = False
        self.anim_type = anim_type
        self.anim_ms = max(0, int(anim_ms or 0))
        self.generation += 1
        self.playing = True


@dataclass(frozen=True)
class AnimationTrigger:
    field: str
    anim_type: str
    duration_ms: int
    generation: int


@dataclass(frozen=True)
class RenderResult:
    rendered: bool
    changed: Tuple[str, ...] = ()
    animations: Tuple[AnimationTrigger, ...] = ()

    @property
    def animated_fields(self) -> Tuple[str, ...]:
        return tuple(a.field for a in self.animations)


NO_RENDER = RenderResult(rendered=False)


@dataclass
class _LastRendered:
    title: Optional[str] = None
    leader: Optional[str] = None
    follower: Optional[str] = None
    pair_tail: Optional[bool] = None


class OverlaySyncClient:
    """오버레이 클라이언트 한 개의 상태 기계."""

    def __init__(self, mode: str = "current", hide_empty: bool = True, settings: Optional[dict] = None):
        self.mode = (mode or "current").lower()
        self.hide_empty = hide_empty
        self.settings: dict = dict(settings or {})
        self.settings_version: Optional[int] = self.settings.get("version")
        self.sync_state = SyncState.UNINITIALIZED
        self.last_apply_id: Optional[int] = None
        self._last = _LastRendered()
        self.elements: Dict[str, ElementView] = {
            "title": ElementView(),
            "pair": ElementView(),
            "leader": ElementView(),
            "tail": ElementView(visible=False),
        }

    # --- 설정 ---

    def apply_settings(self, payload: dict) -> bool:
        """version 이 바뀐 경우에만 반영. 반영했으면 True."""
        if not isinstance(payload, dict):
            return False
        version = payload.get("version")
        if version is not None and version == self.settings_version:
            return False
        self.settings = dict(payload)
        self.settings_version = version
        logger.debug("오버레이 설정 반영 version=%s", version)
        return True

    def _anim(self, name: str) -> Tuple[str, int]:
        anim_type = str(self.settings.get(f"{name}AnimType") or "none")
        anim_ms = self.settings.get(f"{name}AnimMs") or 0
        try:
            anim_ms = int(anim_ms)
        except (TypeError, ValueError):
            anim_ms = 0
        return anim_type, anim_ms

    # --- 폴링 ---

    def on_poll(self, state: dict) -> RenderResult:
        """서버 스냅샷 하나를 처리."""
        if not isinstance(state, dict):
            return NO_RENDER
        try:
            apply_id = int(state.get("applyId") or 0)
        except (TypeError, ValueError):
            return NO_RENDER
        if self.sync_state is SyncState.SYNCED and apply_id == self.last_apply_id:
            return NO_RENDER
        result = self.render(state)
        self.last_apply_id = apply_id
        self.sync_state = SyncState.SYNCED
        return result

    def _texts(self, state: dict) -> Tuple[str, str, str, bool]:
        hidden = bool(state.get("hidden"))
        if self.mode == "next":
            title = "" if hidden else str(state.get("nextTitle") or "")
            return title, "", "", False
        if hidden:
            return "", "", "", bool(state.get("withoutPair"))
        return (
            str(state.get("title") or ""),
            str(state.get("leader") or ""),
            str(state.get("follower") or ""),
            bool(state.get("withoutPair")),
        )

    def render(self, state: dict) -> RenderResult:
        title, leader, follower, without_pair = self._texts(state)
        last = self._last
        changed: List[str] = []
        animations: List[AnimationTrigger] = []

        def trigger(field_name: str, element: ElementView, settings_key: str) -> None:
            anim_type, anim_ms = self._anim(settings_key)
            if anim_type == "none":
                return
            element.restart_animation(anim_type, anim_ms)
            animations.append(AnimationTrigger(field_name, anim_type, element.anim_ms, element.generation))

        if title != last.title:
            self.elements["title"].text = title
            changed.append("title")
            trigger("title", self.elements["title"], "title")
            last.title = title

        # 페어 줄: 리더 먼저, 팔로워가 생기면 ' — 팔로워'. withoutPair 면 이름 하나만.
        show_tail = bool(not without_pair and follower.strip())
        leader_changed = leader != last.leader
        follower_changed = follower != last.follower
        tail_changed = show_tail != last.pair_tail

        if leader_changed:
            self.elements["leader"].text = leader
            changed.append("leader")
            if leader:
                trigger("leader", self.elements["leader"], "leader")
            last.leader = leader

        if tail_changed:
            changed.append("pairVisibility")
            self.elements["tail"].visible = show_tail

        if follower_changed or tail_changed:
            self.elements["tail"].text = follower if show_tail else ""
            if follower_changed:
                changed.append("follower")
                if show_tail:
                    trigger("follower", self.elements["tail"], "follower")
            last.follower = follower

        last.pair_tail = show_tail

        self._set_visible(self.elements["title"], bool(title.strip()))
        pair_visible = bool(leader.strip() or show_tail)
        self._set_visible(self.elements["pair"], pair_visible)

        return RenderResult(rendered=True, changed=tuple(changed), animations=tuple(animations))

    def _set_visible(self, element: ElementView, has_text: bool) -> None:
        if not self.hide_empty:
            element.visible = True
            return
        element.visible = has_text

    def snapshot(self) -> dict:
        """현재 화면에 그려진 내용."""
        return {
            "title": self.elements["title"].text,
            "leader": self.elements["leader"].text,
            "follower": self.elements["tail"].text,
            "titleVisible": self.elements["title"].visible,
            "pairVisible": self.elements["pair"].visible,
            "tailVisible": self.elements["tail"].visible,
        }
