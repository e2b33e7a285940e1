"""
OBS(obs-websocket) 캡처 세션 관리.

프로세스당 OBS 연결은 최대 하나. 재연결 복잡도는 여기서 숨기고, 호출 측에는 예외 대신
CallResult 값을 돌려준다. 자동 재시도는 하지 않는다 (재연결은 운영자가 직접 요청).

락 두 개:
- _conn_lock: 연결 수명주기와 원격 호출 직렬화 (네트워크 I/O 동안 잡힘)
- _state_lock: 세션 필드 갱신/조회. status() 는 이것만 잡으므로 원격 호출이 멈춰도 막히지 않는다.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from obsws_python import ReqClient

from src.overlay.settings import OverlaySettings

logger = logging.getLogger(__name__)

STALE_FACTOR = 3
DEFAULT_TIMEOUT_SEC = 5.0

ClientFactory = Callable[..., Any]


@dataclass(frozen=True)
class CallResult:
    """원격 호출 결과. 실패는 예외가 아니라 값."""
    ok: bool
    value: Any = None
    error: str = ""

    @classmethod
    def success(cls, value: Any = None) -> "CallResult":
        return cls(True, value, "")

    @classmethod
    def failure(cls, error: str) -> "CallResult":
        return cls(False, None, error or "unknown error")


@dataclass
class CaptureSession:
    connected: bool = False
    last_ok_at: Optional[float] = None
    last_error_at: Optional[float] = None
    last_error_message: str = ""
    studio_mode_enabled: bool = False


@dataclass(frozen=True)
class CaptureStatus:
    """운영자 콘솔용 상태. stale 은 저장값이 아니라 조회 시점에 계산."""
    available: bool
    connected: bool
    stale: bool
    last_ok_at: Optional[float]
    last_error_at: Optional[float]
    last_error_message: str
    studio_mode_enabled: bool

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "connected": self.connected,
            "stale": self.stale,
            "lastOkAt": _to_ms(self.last_ok_at),
            "lastErrorAt": _to_ms(self.last_error_at),
            "lastErrorMessage": self.last_error_message,
            "studioModeEnabled": self.studio_mode_enabled,
        }


def _to_ms(ts: Optional[float]) -> Optional[int]:
    return int(ts * 1000) if ts is not None else None


def _default_client_factory(host: str, port: int, password: Optional[str], timeout: float):
    return ReqClient(host=host, port=port, password=password, timeout=timeout)


class CaptureSessionManager:
    """
    OBS 연결 하나를 소유. 설정은 호출 시점마다 settings_provider 에서 읽는다
    (관리 콘솔이 저장한 마지막 값).
    """

    def __init__(
        self,
        settings_provider: Callable[[], OverlaySettings],
        client_factory: Optional[ClientFactory] = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        clock: Callable[[], float] = time.time,
    ):
        self._settings_provider = settings_provider
        self._client_factory = client_factory or _default_client_factory
        self.timeout = timeout
        self._clock = clock
        self._client = None
        self._session = CaptureSession()
        self._conn_lock = threading.RLock()
        self._state_lock = threading.Lock()

    # --- 세션 기록 ---

    def _mark_ok(self) -> None:
        with self._state_lock:
            self._session.connected = True
            self._session.last_ok_at = self._clock()

    def _mark_error(self, message: str) -> None:
        with self._state_lock:
            self._session.connected = False
            self._session.last_error_at = self._clock()
            self._session.last_error_message = message

    def _set_studio_mode(self, enabled: bool) -> None:
        with self._state_lock:
            self._session.studio_mode_enabled = enabled

    @property
    def session(self) -> CaptureSession:
        with self._state_lock:
            return replace(self._session)

    # --- 연결 ---

    def ensure_connected(self) -> CallResult:
        """이미 연결돼 있으면 즉시 반환 (_conn_lock 없이). 아니면 저장된 설정으로 새로 연결."""
        current = self._client
        if current is not None and self.session.connected:
            return CallResult.success(current)
        with self._conn_lock:
            if self._client is not None and self.session.connected:
                return CallResult.success(self._client)
            self._teardown()
            cfg = self._settings_provider()
            client = None
            try:
                client = self._client_factory(
                    host=cfg.endpoint_host,
                    port=cfg.endpoint_port,
                    password=cfg.credential or None,
                    timeout=self.timeout,
                )
                client.get_version()
            except Exception as e:
                if client is not None:
                    self._client = client
                    self._teardown()
                message = f"connect {cfg.endpoint_host}:{cfg.endpoint_port} failed: {e}"
                self._mark_error(message)
                logger.warning("OBS 연결 실패: %s", message)
                return CallResult.failure(message)
            self._client = client
            self._mark_ok()
            logger.info("OBS 연결됨: %s:%s", cfg.endpoint_host, cfg.endpoint_port)
            return CallResult.success(client)

    def reconnect(self) -> CallResult:
        """기존 연결을 완전히 끊은 뒤 새로 연결. 연결이 없어도 안전."""
        with self._conn_lock:
            self._teardown()
            with self._state_lock:
                self._session.connected = False
            logger.info("OBS 재연결 요청")
            return self.ensure_connected()

    def disconnect(self) -> None:
        with self._conn_lock:
            self._teardown()
            with self._state_lock:
                self._session.connected = False

    def _teardown(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            client.disconnect()
        except Exception as e:
            logger.debug("OBS 연결 종료 중 오류 (무시): %s", e)

    # --- 원격 호출 ---

    def call(self, method_name: str, *args, **kwargs) -> CallResult:
        """
        연결 확인 후 ReqClient 메서드 호출. 성공하면 last_ok_at 갱신,
        실패하면 오류 기록 + 연결 해제 (다음 호출에서 새로 연결).
        """
        with self._conn_lock:
            conn = self.ensure_connected()
            if not conn.ok:
                return conn
            fn = getattr(self._client, method_name, None)
            if fn is None:
                return CallResult.failure(f"missing method: {method_name}")
            try:
                resp = fn(*args, **kwargs)
            except Exception as e:
                message = f"{method_name} failed: {e}"
                self._mark_error(message)
                self._teardown()
                logger.warning("OBS 호출 실패: %s", message)
                return CallResult.failure(message)
            self._mark_ok()
            return CallResult.success(resp)

    def query_studio_mode(self) -> CallResult:
        """스튜디오 모드 여부 조회 후 세션에 기록."""
        res = self.call("get_studio_mode_enabled")
        if not res.ok:
            return res
        enabled = bool(getattr(res.value, "studio_mode_enabled", False))
        self._set_studio_mode(enabled)
        return CallResult.success(enabled)

    # --- 상태 ---

    def status(self) -> CaptureStatus:
        cfg = self._settings_provider()
        s = self.session
        now = self._clock()
        stale = bool(
            s.connected
            and s.last_ok_at is not None
            and (now - s.last_ok_at) * 1000.0 > STALE_FACTOR * cfg.poll_interval_ms
        )
        return CaptureStatus(
            available=bool(cfg.endpoint_host),
            connected=s.connected,
            stale=stale,
            last_ok_at=s.last_ok_at,
            last_error_at=s.last_error_at,
            last_error_message=s.last_error_message,
            studio_mode_enabled=s.studio_mode_enabled,
        )
