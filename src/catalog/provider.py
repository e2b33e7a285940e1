"""
카탈로그 (콘테스트·참가자·스페셜) 읽기 전용 조회.

데이터는 관리 콘솔이 data/*.json 에 저장한다. 온에어 엔진은 여기서 참조만 검증하고
카탈로그를 수정하지 않는다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from src.utils.json_store import load_json

logger = logging.getLogger(__name__)

CONTEST_TYPES = ("finals", "rounds")
DEFAULT_ROUND_BUTTONS = ["Heat 1", "Heat 2", "Heat 3", "Heat 4"]
MAX_SPECIAL_ITEMS = 120


@dataclass(frozen=True)
class Participant:
    number: int
    full_name: str
    role: str = "unknown"


@dataclass(frozen=True)
class Contest:
    id: str
    name: str
    type: str = "rounds"  # "finals" | "rounds"


@dataclass(frozen=True)
class Special:
    id: str
    name: str
    items: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParticipantRef:
    """참가자 번호 참조"""
    number: int


@dataclass(frozen=True)
class SpecialItemRef:
    """스페셜 항목 참조 (specials[id].items[index])"""
    special_id: str
    index: int


CatalogRef = Union[ParticipantRef, SpecialItemRef]


def role_by_number(number: int) -> str:
    """기본 규칙: 홀수 lead, 짝수 follow."""
    return "lead" if number % 2 == 1 else "follow"


def normalize_special(raw) -> Optional[Special]:
    """
    스페셜 항목 정규화.
    구버전 {id, name, info, teams: [...]} → 현재 {id, name, items: [...]}.
    """
    if not isinstance(raw, dict):
        return None
    sid = str(raw.get("id") or "").strip()
    name = str(raw.get("name") or "").strip()
    if not sid or not name:
        return None
    src_items = raw.get("items")
    if not isinstance(src_items, list):
        src_items = raw.get("teams") if isinstance(raw.get("teams"), list) else []
    items = [str(x).strip() for x in src_items]
    items = [x for x in items if x][:MAX_SPECIAL_ITEMS]
    return Special(id=sid, name=name, items=items)


def _parse_participant(raw) -> Optional[Participant]:
    if not isinstance(raw, dict):
        return None
    try:
        number = int(raw.get("number"))
    except (TypeError, ValueError):
        return None
    name = str(raw.get("fullName") or "").strip()
    if not name:
        return None
    role = str(raw.get("role") or role_by_number(number))
    return Participant(number=number, full_name=name, role=role)


def _parse_contest(raw) -> Optional[Contest]:
    if not isinstance(raw, dict):
        return None
    cid = str(raw.get("id") or "").strip()
    name = str(raw.get("name") or "").strip()
    if not cid or not name:
        return None
    ctype = raw.get("type") if raw.get("type") in CONTEST_TYPES else "rounds"
    return Contest(id=cid, name=name, type=ctype)


class Catalog:
    """
    data 디렉터리의 JSON 파일을 읽어 보관하는 조회 전용 카탈로그.

    파일: participants.json, contests.json, contest-participants.json,
    specials.json, round-buttons.json. 없거나 깨진 파일은 기본값.
    """

    def __init__(self, data_dir: Optional[Union[Path, str]] = None):
        self.data_dir = Path(data_dir) if data_dir else None
        self._participants: Dict[int, Participant] = {}
        self._contests: Dict[str, Contest] = {}
        self._contest_participants: Dict[str, List[int]] = {}
        self._specials: Dict[str, Special] = {}
        self._round_buttons: List[str] = list(DEFAULT_ROUND_BUTTONS)
        if self.data_dir is not None:
            self.reload()

    @classmethod
    def from_records(
        cls,
        participants: Optional[list] = None,
        contests: Optional[list] = None,
        specials: Optional[list] = None,
        contest_participants: Optional[dict] = None,
        round_buttons: Optional[list] = None,
    ) -> "Catalog":
        """파일 없이 레코드로 구성 (테스트·임베드용)."""
        cat = cls()
        cat._load_records(
            participants or [],
            contests or [],
            specials or [],
            contest_participants or {},
            round_buttons if round_buttons is not None else list(DEFAULT_ROUND_BUTTONS),
        )
        return cat

    def reload(self) -> None:
        if self.data_dir is None:
            return
        d = self.data_dir
        self._load_records(
            load_json(d / "participants.json", []),
            load_json(d / "contests.json", []),
            load_json(d / "specials.json", []),
            load_json(d / "contest-participants.json", {}),
            load_json(d / "round-buttons.json", list(DEFAULT_ROUND_BUTTONS)),
        )
        logger.info(
            "카탈로그 로드: 참가자 %d명, 콘테스트 %d개, 스페셜 %d개",
            len(self._participants), len(self._contests), len(self._specials),
        )

    def _load_records(self, participants, contests, specials, contest_participants, round_buttons) -> None:
        self._participants = {}
        for raw in participants if isinstance(participants, list) else []:
            p = _parse_participant(raw)
            if p is not None:
                self._participants[p.number] = p
        self._contests = {}
        for raw in contests if isinstance(contests, list) else []:
            c = _parse_contest(raw)
            if c is not None:
                self._contests[c.id] = c
        self._specials = {}
        for raw in specials if isinstance(specials, list) else []:
            s = normalize_special(raw)
            if s is not None:
                self._specials[s.id] = s
        self._contest_participants = {}
        if isinstance(contest_participants, dict):
            for cid, numbers in contest_participants.items():
                if not isinstance(numbers, list):
                    continue
                clean = []
                for n in numbers:
                    try:
                        clean.append(int(n))
                    except (TypeError, ValueError):
                        continue
                self._contest_participants[str(cid)] = clean
        if isinstance(round_buttons, list):
            self._round_buttons = [str(x) for x in round_buttons if str(x).strip()][:30]

    # --- 조회 ---

    def participant(self, number: int) -> Optional[Participant]:
        return self._participants.get(number)

    def participants(self, contest_id: Optional[str] = None) -> List[Participant]:
        """콘테스트 지정 시 해당 부분집합. 부분집합이 비어 있으면 전체."""
        ordered = sorted(self._participants.values(), key=lambda p: p.number)
        if not contest_id:
            return ordered
        allowed = self._contest_participants.get(contest_id)
        if not allowed:
            return ordered
        allowed_set = set(allowed)
        return [p for p in ordered if p.number in allowed_set]

    def contest(self, contest_id: str) -> Optional[Contest]:
        return self._contests.get(contest_id)

    def contests(self, contest_type: Optional[str] = None) -> List[Contest]:
        items = list(self._contests.values())
        if contest_type and contest_type != "all":
            items = [c for c in items if c.type == contest_type]
        return items

    def special(self, special_id: str) -> Optional[Special]:
        return self._specials.get(special_id)

    def specials(self) -> List[Special]:
        return list(self._specials.values())

    def round_buttons(self) -> List[str]:
        return list(self._round_buttons)

    def resolve(self, ref: CatalogRef) -> Optional[str]:
        """참조 → 표시 문자열. 해석 불가면 None."""
        if isinstance(ref, ParticipantRef):
            p = self.participant(ref.number)
            return p.full_name if p else None
        if isinstance(ref, SpecialItemRef):
            s = self.special(ref.special_id)
            if s is None or not (0 <= ref.index < len(s.items)):
                return None
            return s.items[ref.index]
        return None
