"""타이틀 문자열 조립 (현재/NEXT 공통)."""

from typing import Optional

NEXT_PREFIX = "NEXT: "
HEAT_SEPARATOR = " • "


def build_title(name: str, heat_label: Optional[str] = None, is_next: bool = False) -> str:
    """'NEXT: ' 접두어 + 이름 + ' • 히트' 형식. 앞뒤 공백 제거."""
    prefix = NEXT_PREFIX if is_next else ""
    heat_part = f"{HEAT_SEPARATOR}{heat_label}" if heat_label else ""
    return f"{prefix}{name or ''}{heat_part}".strip()
