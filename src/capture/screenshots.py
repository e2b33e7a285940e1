"""
프로그램(송출 중)/프리뷰(대기) 스틸 캡처.

OBS GetSourceScreenshot 은 base64 data URI 를 돌려준다. 여기서 raw bytes 로 풀어서 넘긴다.
프리뷰는 스튜디오 모드 여부를 먼저 묻고, 보여줄 게 없으면 캡처 요청 없이 바로 NoPreview.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Callable, Union

from src.capture.session import CallResult, CaptureSessionManager
from src.overlay.settings import OverlaySettings

logger = logging.getLogger(__name__)

IMAGE_FORMAT = "jpg"
IMAGE_MIME = "image/jpeg"


@dataclass(frozen=True)
class Frame:
    scene_name: str
    image_bytes: bytes
    studio_mode_enabled: bool = False
    source: str = "program"  # "program" | "preview"
    mime_type: str = IMAGE_MIME


@dataclass(frozen=True)
class NoPreview:
    """스튜디오 모드 꺼짐 + 설정상 프리뷰에 스튜디오 모드 필수. 오류가 아닌 정상 상태."""
    reason: str = "studio mode is off"


PreviewResult = Union[Frame, NoPreview]


def decode_image_data(data: str) -> bytes:
    """'data:image/jpg;base64,....' 또는 순수 base64 → bytes."""
    if not data:
        raise ValueError("empty image data")
    payload = data.split(",", 1)[1] if data.startswith("data:") else data
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"invalid base64 image data: {e}") from e


def _scene_name(resp, *attrs: str) -> str:
    for attr in attrs:
        value = getattr(resp, attr, None)
        if value:
            return str(value)
    return ""


class ScreenshotPipeline:
    def __init__(self, manager: CaptureSessionManager, settings_provider: Callable[[], OverlaySettings]):
        self.manager = manager
        self._settings_provider = settings_provider

    def _capture_scene(self, scene_name: str) -> CallResult:
        cfg = self._settings_provider()
        res = self.manager.call(
            "get_source_screenshot",
            scene_name,
            IMAGE_FORMAT,
            cfg.width,
            cfg.height,
            cfg.quality,
        )
        if not res.ok:
            return res
        try:
            image = decode_image_data(getattr(res.value, "image_data", "") or "")
        except ValueError as e:
            logger.warning("스크린샷 디코딩 실패 (%s): %s", scene_name, e)
            return CallResult.failure(str(e))
        return CallResult.success(image)

    def get_program_frame(self) -> CallResult:
        """송출 중인 씬 캡처. value = Frame."""
        res = self.manager.call("get_current_program_scene")
        if not res.ok:
            return res
        scene = _scene_name(res.value, "current_program_scene_name", "scene_name")
        if not scene:
            return CallResult.failure("program scene name missing")
        shot = self._capture_scene(scene)
        if not shot.ok:
            return shot
        studio = self.manager.session.studio_mode_enabled
        return CallResult.success(Frame(scene, shot.value, studio_mode_enabled=studio, source="program"))

    def get_preview_frame(self) -> CallResult:
        """
        value = Frame | NoPreview.

        스튜디오 모드 조회가 실패하면 '꺼짐'으로 본다: 스튜디오 모드 필수 설정이면 NoPreview,
        아니면 연결 오류를 그대로 돌려준다 (프로그램 폴백을 시도하지 않음).
        """
        cfg = self._settings_provider()
        studio = self.manager.query_studio_mode()
        if not studio.ok:
            if cfg.preview_requires_staging_mode:
                return CallResult.success(NoPreview("studio mode unknown (disconnected)"))
            return studio

        if not studio.value:
            if cfg.preview_requires_staging_mode:
                return CallResult.success(NoPreview())
            program = self.get_program_frame()
            if not program.ok:
                return program
            return CallResult.success(program.value)

        res = self.manager.call("get_current_preview_scene")
        if not res.ok:
            return res
        scene = _scene_name(res.value, "current_preview_scene_name", "scene_name")
        if not scene:
            return CallResult.failure("preview scene name missing")
        shot = self._capture_scene(scene)
        if not shot.ok:
            return shot
        return CallResult.success(Frame(scene, shot.value, studio_mode_enabled=True, source="preview"))
