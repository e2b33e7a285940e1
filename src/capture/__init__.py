"""
OBS 캡처 소스: 연결 관리 + 프로그램/프리뷰 스크린샷.

운영자 콘솔이 상태를 폴링하고 스틸 이미지를 당겨 간다. 실패는 CallResult 값으로 전달.
"""

from src.capture.screenshots import Frame, NoPreview, ScreenshotPipeline
from src.capture.session import CallResult, CaptureSession, CaptureSessionManager, CaptureStatus

__all__ = [
    "CallResult",
    "CaptureSession",
    "CaptureSessionManager",
    "CaptureStatus",
    "Frame",
    "NoPreview",
    "ScreenshotPipeline",
]
