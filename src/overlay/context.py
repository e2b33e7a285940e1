"""
요청 핸들러에 주입되는 컨텍스트. 프로세스 전역 싱글턴 대신 이 객체 하나를 넘긴다.
테스트는 카탈로그·OBS 클라이언트 팩토리를 바꿔 끼워 따로 만든다.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from src.capture.screenshots import ScreenshotPipeline
from src.capture.session import DEFAULT_TIMEOUT_SEC, CaptureSessionManager, ClientFactory
from src.catalog.provider import Catalog
from src.onair.controller import OnAirController
from src.onair.history import DEFAULT_HISTORY_CAPACITY
from src.overlay.settings import SettingsStore

logger = logging.getLogger(__name__)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def default_data_dir() -> Path:
    return Path(os.environ.get("ONAIR_DATA_DIR") or (_project_root() / "data"))


@dataclass
class BroadcastContext:
    catalog: Catalog
    onair: OnAirController
    settings: SettingsStore
    capture: CaptureSessionManager
    screenshots: ScreenshotPipeline


def build_context(
    data_dir: Optional[Union[Path, str]] = None,
    history_capacity: Optional[int] = None,
    catalog: Optional[Catalog] = None,
    settings: Optional[SettingsStore] = None,
    client_factory: Optional[ClientFactory] = None,
    obs_timeout: Optional[float] = None,
) -> BroadcastContext:
    """환경변수(.env) 기본값을 채워 컨텍스트 구성."""
    if history_capacity is None:
        history_capacity = int(os.environ.get("ONAIR_HISTORY_CAPACITY") or DEFAULT_HISTORY_CAPACITY)
    if obs_timeout is None:
        obs_timeout = float(os.environ.get("OBS_TIMEOUT_SEC") or DEFAULT_TIMEOUT_SEC)
    if catalog is None or settings is None:
        data_dir = Path(data_dir) if data_dir else default_data_dir()
    catalog = catalog or Catalog(data_dir)
    settings = settings or SettingsStore(data_dir)
    capture = CaptureSessionManager(settings.get, client_factory=client_factory, timeout=obs_timeout)
    ctx = BroadcastContext(
        catalog=catalog,
        onair=OnAirController(catalog, history_capacity=history_capacity),
        settings=settings,
        capture=capture,
        screenshots=ScreenshotPipeline(capture, settings.get),
    )
    logger.info("컨텍스트 구성: history_capacity=%d, obs_timeout=%.1fs", history_capacity, obs_timeout)
    return ctx
