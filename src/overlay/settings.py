"""
오버레이/캡처 설정 (data/overlay-settings.json).

저장 시 통째로 교체. 필드마다 기본값이 따로 있어 일부만 저장된 구버전 파일도 읽힌다.
저장할 때마다 version 이 올라가서, 클라이언트는 직렬화된 블롭 대신 숫자만 비교한다.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from src.onair.errors import ValidationError
from src.utils.json_store import load_json, save_json

logger = logging.getLogger(__name__)


class OverlaySettings(BaseModel):
    """캡처 엔드포인트 + 스크린샷 + 오버레이 스타일/애니메이션. JSON 은 camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    endpoint_host: str = "127.0.0.1"
    endpoint_port: int = Field(default=4455, ge=1, le=65535)
    credential: str = ""
    interval_sec: float = Field(default=2.0, gt=0, le=60)
    quality: int = Field(default=70, ge=-1, le=100)
    width: int = Field(default=640, ge=8, le=4096)
    height: int = Field(default=360, ge=8, le=4096)
    preview_requires_staging_mode: bool = True
    auto_refresh: bool = True

    title_font: str = "system-ui"
    pair_font: str = "system-ui"
    title_size_px: int = Field(default=48, ge=6, le=400)
    pair_size_px: int = Field(default=40, ge=6, le=400)
    title_color: str = "#ffffff"
    pair_color: str = "#ffffff"
    title_anim_type: str = "fade"
    title_anim_ms: int = Field(default=500, ge=0, le=10000)
    leader_anim_type: str = "fade"
    leader_anim_ms: int = Field(default=500, ge=0, le=10000)
    follower_anim_type: str = "fade"
    follower_anim_ms: int = Field(default=500, ge=0, le=10000)

    @property
    def poll_interval_ms(self) -> float:
        return self.interval_sec * 1000.0

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True)


class SettingsStore:
    """설정 로드/저장 + version 카운터. version 은 휘발성 (시작 시 1)."""

    FILENAME = "overlay-settings.json"

    def __init__(self, data_dir: Optional[Union[Path, str]] = None, initial: Optional[OverlaySettings] = None):
        self.path = Path(data_dir) / self.FILENAME if data_dir else None
        self._lock = threading.Lock()
        self._version = 1
        self._settings = initial or self._load()

    def _load(self) -> OverlaySettings:
        if self.path is None:
            return OverlaySettings()
        raw = load_json(self.path, {})
        if not isinstance(raw, dict):
            raw = {}
        try:
            return OverlaySettings.model_validate(raw)
        except PydanticValidationError as e:
            logger.warning("설정 파일 검증 실패, 기본값 사용: %s", e)
            return OverlaySettings()

    @property
    def version(self) -> int:
        return self._version

    def get(self) -> OverlaySettings:
        return self._settings

    def snapshot(self) -> dict:
        with self._lock:
            data = self._settings.to_public()
            data["version"] = self._version
        return data

    def save(self, payload: dict) -> OverlaySettings:
        """통째로 교체. 빠진 필드는 기본값. 검증 실패 시 ValidationError, 기존 설정 유지."""
        if not isinstance(payload, dict):
            raise ValidationError("settings payload must be an object")
        body = {k: v for k, v in payload.items() if k != "version"}
        try:
            new = OverlaySettings.model_validate(body)
        except PydanticValidationError as e:
            raise ValidationError(f"invalid settings: {e.errors()[0].get('msg', e)}") from e
        with self._lock:
            self._settings = new
            self._version += 1
            version = self._version
        if self.path is not None:
            save_json(self.path, new.to_public())
        logger.info("오버레이 설정 저장 (version=%d)", version)
        return new
