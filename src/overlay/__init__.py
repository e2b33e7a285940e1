"""
방송 오버레이: 온에어 상태를 OBS 브라우저 소스로 노출.

- server.create_app(ctx): /api/overlay-state 등 pull 스냅샷 + 운영자 액션
- sync.OverlaySyncClient: 렌더링 클라이언트 측 폴링·diff·애니메이션 계약
- OBS에서 브라우저 소스 URL을 http://127.0.0.1:3000/overlay?mode=current 로 설정.
"""

from src.overlay.settings import OverlaySettings, SettingsStore
from src.overlay.sync import OverlaySyncClient, RenderResult, SyncState

__all__ = ["OverlaySettings", "SettingsStore", "OverlaySyncClient", "RenderResult", "SyncState"]
