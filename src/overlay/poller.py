"""
고정 주기 폴러 (순수 pull 모델).

- OverlayPoller: /api/overlay-state (100~2000ms) + /api/overlay-settings (약 1초, version 비교)
- CaptureStatusPoller: /api/capture/status (1500~2000ms). 재연결은 하지 않는다 (운영자 몫).

폴링 실패는 조용히 넘긴다: 마지막으로 그린 내용을 그대로 둔다.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import httpx

from src.overlay.sync import OverlaySyncClient, RenderResult

logger = logging.getLogger(__name__)

OVERLAY_INTERVAL_MIN_MS = 100
OVERLAY_INTERVAL_MAX_MS = 2000
SETTINGS_INTERVAL_MS = 1000
CAPTURE_INTERVAL_MIN_MS = 1500
CAPTURE_INTERVAL_MAX_MS = 2000

STATUS_OK = "ok"
STATUS_STALE = "stale"
STATUS_DISCONNECTED = "disconnected"


def clamp_interval(ms: float, lo: int, hi: int) -> float:
    return float(max(lo, min(hi, ms)))


def classify_capture_status(status: dict) -> str:
    """'disconnected' / 'stale' / 'ok'. 운영자 대응이 서로 다르다."""
    if not isinstance(status, dict) or not status.get("connected"):
        return STATUS_DISCONNECTED
    if status.get("stale"):
        return STATUS_STALE
    return STATUS_OK


async def _sleep_or_stop(stop: asyncio.Event, seconds: float) -> bool:
    """stop 이 set 되면 True."""
    try:
        await asyncio.wait_for(stop.wait(), timeout=seconds)
        return True
    except asyncio.TimeoutError:
        return False


class OverlayPoller:
    """오버레이 렌더링 클라이언트 한 개를 구동."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        sync: Optional[OverlaySyncClient] = None,
        interval_ms: float = 250,
        on_render: Optional[Callable[[RenderResult], None]] = None,
    ):
        self.client = client
        self.sync = sync or OverlaySyncClient()
        self.interval_ms = clamp_interval(interval_ms, OVERLAY_INTERVAL_MIN_MS, OVERLAY_INTERVAL_MAX_MS)
        self.on_render = on_render
        self.failures = 0

    async def refresh_settings(self) -> bool:
        try:
            resp = await self.client.get("/api/overlay-settings")
            resp.raise_for_status()
            return self.sync.apply_settings(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("오버레이 설정 폴링 실패 (무시): %s", e)
            return False

    async def poll_once(self) -> Optional[RenderResult]:
        """실패 시 None. 화면은 마지막 상태 유지."""
        try:
            resp = await self.client.get("/api/overlay-state")
            resp.raise_for_status()
            state = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            self.failures += 1
            logger.debug("오버레이 상태 폴링 실패 (무시): %s", e)
            return None
        result = self.sync.on_poll(state)
        if result.rendered and self.on_render is not None:
            self.on_render(result)
        return result

    async def run(self, stop: asyncio.Event) -> None:
        await self.refresh_settings()
        loop = asyncio.get_running_loop()
        next_settings = loop.time() + SETTINGS_INTERVAL_MS / 1000.0
        while not stop.is_set():
            await self.poll_once()
            if loop.time() >= next_settings:
                await self.refresh_settings()
                next_settings = loop.time() + SETTINGS_INTERVAL_MS / 1000.0
            if await _sleep_or_stop(stop, self.interval_ms / 1000.0):
                break


class CaptureStatusPoller:
    """운영자 콘솔의 캡처 상태 표시. 상태 분류가 바뀔 때만 콜백."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        interval_ms: float = 2000,
        on_change: Optional[Callable[[str, dict], None]] = None,
    ):
        self.client = client
        self.interval_ms = clamp_interval(interval_ms, CAPTURE_INTERVAL_MIN_MS, CAPTURE_INTERVAL_MAX_MS)
        self.on_change = on_change
        self.last_kind: Optional[str] = None
        self.last_status: dict = {}

    async def poll_once(self) -> str:
        try:
            resp = await self.client.get("/api/capture/status")
            resp.raise_for_status()
            status = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("캡처 상태 폴링 실패: %s", e)
            status = {"connected": False, "lastErrorMessage": f"server unreachable: {e}"}
        kind = classify_capture_status(status)
        self.last_status = status
        if kind != self.last_kind:
            logger.info("캡처 상태: %s → %s", self.last_kind, kind)
            self.last_kind = kind
            if self.on_change is not None:
                self.on_change(kind, status)
        return kind

    async def run(self, stop: asyncio.Event) -> None:
        while not stop.is_set():
            await self.poll_once()
            if await _sleep_or_stop(stop, self.interval_ms / 1000.0):
                break
