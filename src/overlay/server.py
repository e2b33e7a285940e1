"""
온에어 오버레이 로컬 HTTP 서버.

- /, /overlay: OBS 브라우저 소스 페이지 (상태 폴링)
- /api/overlay-state, /api/overlay-settings: 오버레이 렌더러용 pull 스냅샷
- /api/onair/*, /api/next, /api/reset/*, /api/history/*: 운영자 액션 (요청/응답, fire-and-forget 없음)
- /api/capture/*: OBS 연결 상태·스크린샷

핸들러는 전부 동기 def: 스레드풀에서 돌아서 OBS 호출이 멈춰도 온에어 액션은 막히지 않는다.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

from fastapi import Body, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, Field

from src.capture.screenshots import Frame, NoPreview
from src.catalog.provider import CatalogRef, ParticipantRef, SpecialItemRef
from src.onair.errors import ValidationError
from src.onair.state import OnAirState
from src.overlay.context import BroadcastContext, build_context
from src.overlay.page import OVERLAY_HTML

logger = logging.getLogger(__name__)


# --- 요청 본문 ---

class SpecialItemRefBody(BaseModel):
    special_id: str = Field(alias="specialId")
    index: int


RefBody = Union[int, SpecialItemRefBody]


def to_ref(raw: Optional[RefBody]) -> Optional[CatalogRef]:
    """숫자 = 참가자 번호, {specialId, index} = 스페셜 항목."""
    if raw is None:
        return None
    if isinstance(raw, SpecialItemRefBody):
        return SpecialItemRef(raw.special_id, raw.index)
    return ParticipantRef(int(raw))


class PairBody(BaseModel):
    title: str = ""
    leader: Optional[RefBody] = None
    follower: Optional[RefBody] = None
    without_pair: bool = Field(default=False, alias="withoutPair")


class FinalsBody(BaseModel):
    contest_id: str = Field(default="", alias="contestId")
    first_number: Optional[int] = Field(default=None, alias="firstNumber")
    second_number: Optional[int] = Field(default=None, alias="secondNumber")
    no_pair: bool = Field(default=False, alias="noPair")


class HeatBody(BaseModel):
    title: str = ""
    heat_label: Optional[str] = Field(default=None, alias="heatLabel")


class RoundsBody(BaseModel):
    contest_id: str = Field(default="", alias="contestId")
    heat_label: Optional[str] = Field(default=None, alias="heatLabel")


class SpecialBody(BaseModel):
    special_id: str = Field(default="", alias="specialId")
    item_index: Optional[int] = Field(default=None, alias="itemIndex")
    second_index: Optional[int] = Field(default=None, alias="secondIndex")


class HalfBody(BaseModel):
    """리더/팔로워 한쪽만. ref 또는 name 중 하나."""
    ref: Optional[RefBody] = None
    name: Optional[str] = None


def _ok(state: OnAirState) -> JSONResponse:
    return JSONResponse({"ok": True, "state": state.to_dict()})


def create_app(ctx: BroadcastContext) -> FastAPI:
    app = FastAPI(title="On-Air Overlay", docs_url=None, redoc_url=None)
    app.state.ctx = ctx
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        logger.info("요청 거부 %s: %s", request.url.path, exc.message)
        return JSONResponse({"error": exc.message}, status_code=400)

    # --- 오버레이 페이지 / 렌더러 스냅샷 ---

    @app.get("/", response_class=HTMLResponse)
    @app.get("/overlay", response_class=HTMLResponse)
    def overlay_page():
        """OBS 브라우저 소스 URL. 예: /overlay?mode=current&interval=250"""
        return HTMLResponse(OVERLAY_HTML)

    @app.get("/api/overlay-state")
    def get_overlay_state():
        return JSONResponse(ctx.onair.state().to_dict(), headers={"Cache-Control": "no-store"})

    @app.get("/api/overlay-settings")
    def get_overlay_settings():
        return JSONResponse(ctx.settings.snapshot(), headers={"Cache-Control": "no-store"})

    @app.post("/api/overlay-settings")
    def save_overlay_settings(payload: dict = Body(...)):
        ctx.settings.save(payload)
        return JSONResponse({"ok": True, "settings": ctx.settings.snapshot()})

    # --- 온에어 액션 ---

    @app.post("/api/onair/pair")
    def apply_pair(body: PairBody):
        return _ok(ctx.onair.apply_pair(body.title, to_ref(body.leader), to_ref(body.follower), body.without_pair))

    @app.post("/api/onair/finals")
    def apply_finals(body: FinalsBody):
        leader = ParticipantRef(body.first_number) if body.first_number is not None else None
        follower = ParticipantRef(body.second_number) if body.second_number is not None else None
        return _ok(ctx.onair.apply_finals(body.contest_id, leader, follower, body.no_pair))

    @app.post("/api/onair/heat")
    def apply_heat(body: HeatBody):
        if not body.title.strip():
            raise ValidationError("title required")
        return _ok(ctx.onair.apply_heat(body.title, body.heat_label))

    @app.post("/api/onair/rounds")
    def apply_rounds(body: RoundsBody):
        """히트 화면. 페어는 항상 비운다."""
        return _ok(ctx.onair.apply_rounds(body.contest_id, body.heat_label))

    @app.post("/api/onair/special")
    def apply_special(body: SpecialBody):
        return _ok(ctx.onair.apply_special(body.special_id, body.item_index, body.second_index))

    @app.post("/api/onair/leader")
    def apply_leader(body: HalfBody):
        if body.ref is not None:
            return _ok(ctx.onair.apply_leader(to_ref(body.ref)))
        if body.name is not None:
            return _ok(ctx.onair.apply_leader_name(body.name))
        raise ValidationError("ref or name required")

    @app.post("/api/onair/follower")
    def apply_follower(body: HalfBody):
        if body.ref is not None:
            return _ok(ctx.onair.apply_follower(to_ref(body.ref)))
        if body.name is not None:
            return _ok(ctx.onair.apply_follower_name(body.name))
        raise ValidationError("ref or name required")

    @app.post("/api/onair/clear")
    @app.post("/api/reset/onair")
    def clear_onair():
        return _ok(ctx.onair.clear())

    @app.post("/api/onair/hide")
    def hide_onair():
        return _ok(ctx.onair.hide())

    @app.post("/api/onair/show")
    def show_onair():
        return _ok(ctx.onair.show())

    @app.post("/api/next")
    def apply_next(body: RoundsBody):
        return _ok(ctx.onair.apply_next(body.contest_id, body.heat_label))

    @app.post("/api/reset/next")
    def reset_next():
        return _ok(ctx.onair.clear_next())

    # --- 히스토리 ---

    @app.get("/api/history")
    def get_history():
        return JSONResponse(ctx.onair.history_snapshot())

    @app.post("/api/history/undo")
    def undo():
        """원점이면 applied=false (오류 아님)."""
        state = ctx.onair.undo()
        current = state or ctx.onair.state()
        return JSONResponse({"ok": True, "applied": state is not None, "state": current.to_dict()})

    @app.post("/api/history/redo")
    def redo():
        state = ctx.onair.redo()
        current = state or ctx.onair.state()
        return JSONResponse({"ok": True, "applied": state is not None, "state": current.to_dict()})

    # --- 캡처 ---

    @app.get("/api/capture/status")
    def capture_status():
        return JSONResponse(ctx.capture.status().to_dict(), headers={"Cache-Control": "no-store"})

    @app.post("/api/capture/reconnect")
    def capture_reconnect():
        res = ctx.capture.reconnect()
        body = {"ok": res.ok, "status": ctx.capture.status().to_dict()}
        if not res.ok:
            body["error"] = res.error
        return JSONResponse(body, status_code=200 if res.ok else 503)

    def _frame_response(frame: Frame) -> Response:
        return Response(
            content=frame.image_bytes,
            media_type=frame.mime_type,
            headers={
                "Cache-Control": "no-store",
                "X-Scene-Name": frame.scene_name,
                "X-Frame-Source": frame.source,
                "X-Studio-Mode": "1" if frame.studio_mode_enabled else "0",
            },
        )

    @app.get("/api/capture/program")
    def capture_program():
        res = ctx.screenshots.get_program_frame()
        if not res.ok:
            return JSONResponse({"error": res.error}, status_code=503)
        return _frame_response(res.value)

    @app.get("/api/capture/preview")
    def capture_preview():
        res = ctx.screenshots.get_preview_frame()
        if not res.ok:
            return JSONResponse({"error": res.error}, status_code=503)
        if isinstance(res.value, NoPreview):
            return Response(status_code=204, headers={"X-Preview": "none", "X-Preview-Reason": res.value.reason})
        return _frame_response(res.value)

    # --- 카탈로그 (읽기 전용) ---

    @app.get("/api/contests")
    def list_contests(type: Optional[str] = None):
        return JSONResponse([
            {"id": c.id, "name": c.name, "type": c.type} for c in ctx.catalog.contests(type)
        ])

    @app.get("/api/participants")
    def list_participants(contestId: Optional[str] = None):
        return JSONResponse([
            {"number": p.number, "fullName": p.full_name, "role": p.role}
            for p in ctx.catalog.participants(contestId)
        ])

    @app.get("/api/specials")
    def list_specials():
        return JSONResponse([
            {"id": s.id, "name": s.name, "items": list(s.items)} for s in ctx.catalog.specials()
        ])

    @app.get("/api/round-buttons")
    def list_round_buttons():
        return JSONResponse(ctx.catalog.round_buttons())

    return app


def run() -> None:
    """콘솔 진입점: .env 로드 → 로깅 → uvicorn."""
    from dotenv import load_dotenv
    import uvicorn

    from src.utils.logging_config import setup_logging

    load_dotenv()
    log_dir = setup_logging()
    host = os.getenv("OVERLAY_HOST", "127.0.0.1")
    port = int(os.getenv("OVERLAY_PORT", "3000"))
    ctx = build_context()
    app = create_app(ctx)
    logger.info("오버레이 서버 시작: http://%s:%d (로그: %s)", host, port, log_dir)
    print(f"오버레이: http://{host}:{port}/overlay?mode=current  (NEXT: ?mode=next)")
    try:
        uvicorn.run(app, host=host, port=port, log_level="warning")
    finally:
        ctx.capture.disconnect()


if __name__ == "__main__":
    run()
