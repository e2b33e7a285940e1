"""data/*.json 읽기·쓰기 헬퍼. 마지막 쓰기가 이긴다."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_json(path: Path, default: Any) -> Any:
    """파일이 없거나 JSON 이 깨졌으면 default."""
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("JSON 로드 실패 (%s): %s", path, e)
        return default


def save_json(path: Path, data: Any) -> None:
    """임시 파일에 쓴 뒤 교체."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp, path)
