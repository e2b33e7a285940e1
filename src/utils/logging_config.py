"""
온에어 서버 로깅 설정.

파일 구성 (logs/ 또는 LOG_DIR):
- app.log     INFO 이상 전체
- error.log   ERROR 이상
- onair.log   온에어 액션·히스토리·오버레이·카탈로그 (DEBUG)
- capture.log OBS 연결·스크린샷 + obsws_python (DEBUG)
콘솔은 LOG_CONSOLE_LEVEL (기본 WARNING).
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Tuple

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# 카테고리 파일 → 포함할 logger 이름 prefix
CATEGORY_LOGS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("onair.log", ("src.onair", "src.overlay", "src.catalog")),
    ("capture.log", ("src.capture", "obsws_python")),
)

# 연결 실패마다 스택을 찍거나 요청마다 한 줄씩 남기는 외부 logger
NOISY_LOGGERS = ("obsws_python", "websocket", "uvicorn.access")


class _PrefixFilter(logging.Filter):
    def __init__(self, prefixes: Tuple[str, ...]):
        super().__init__()
        self.prefixes = tuple(p for p in prefixes if p)

    def filter(self, record: logging.LogRecord) -> bool:
        return (record.name or "").startswith(self.prefixes)


def _level_from_env(key: str, default: int) -> int:
    name = (os.environ.get(key) or "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def _default_log_dir() -> Path:
    env = os.environ.get("LOG_DIR")
    if env:
        return Path(env)
    return Path(__file__).resolve().parent.parent.parent / "logs"


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=int(os.environ.get("LOG_MAX_MB", "10")) * 1024 * 1024,
        backupCount=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(log_dir: Optional[Path] = None) -> Path:
    """루트 핸들러를 갈아끼우고 로그 디렉터리를 돌려준다. 여러 번 불러도 핸들러가 쌓이지 않는다."""
    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(logging.DEBUG)

    target = Path(log_dir) if log_dir else _default_log_dir()
    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(_level_from_env("LOG_CONSOLE_LEVEL", logging.WARNING))
    console.setFormatter(formatter)
    root.addHandler(console)

    root.addHandler(_file_handler(target / "app.log", logging.INFO, formatter))
    root.addHandler(_file_handler(target / "error.log", logging.ERROR, formatter))
    for filename, prefixes in CATEGORY_LOGS:
        handler = _file_handler(target / filename, logging.DEBUG, formatter)
        handler.addFilter(_PrefixFilter(prefixes))
        root.addHandler(handler)

    noisy_level = _level_from_env("OBSWS_LOG_LEVEL", logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

    return target
