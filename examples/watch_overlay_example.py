"""
실행 중인 오버레이 서버를 폴링해서 화면 변화와 캡처 상태를 터미널에 출력하는 예제

브라우저 없이 오버레이 동기화 동작을 확인할 때 사용.
실행: python examples/watch_overlay_example.py [--mode next] [--interval 250]
"""

import sys
from pathlib import Path

# 프로젝트 루트를 path에 넣어서 'import src' 가능하게 함
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse
import asyncio
import os

import httpx
from dotenv import load_dotenv

from src.overlay.poller import CaptureStatusPoller, OverlayPoller
from src.overlay.sync import OverlaySyncClient
from src.utils import setup_logging

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
LOG_DIR = setup_logging()


def on_render(result):
    if not result.changed:
        return
    anims = ", ".join(f"{a.field}:{a.anim_type}/{a.duration_ms}ms" for a in result.animations) or "-"
    print(f"  변경: {', '.join(result.changed)}  애니메이션: {anims}")


def on_capture_change(kind, status):
    msg = status.get("lastErrorMessage") or ""
    print(f"[캡처] {kind} {msg}")


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--mode", default="current", choices=["current", "next"])
    parser.add_argument("--interval", type=float, default=250)
    args = parser.parse_args()

    host = os.getenv("OVERLAY_HOST", "127.0.0.1")
    port = os.getenv("OVERLAY_PORT", "3000")
    base_url = f"http://{host}:{port}"

    sync = OverlaySyncClient(mode=args.mode)
    stop = asyncio.Event()
    async with httpx.AsyncClient(base_url=base_url, timeout=2.0) as client:
        overlay = OverlayPoller(client, sync, interval_ms=args.interval, on_render=on_render)
        capture = CaptureStatusPoller(client, on_change=on_capture_change)
        print(f"서버: {base_url}, 모드: {args.mode}, 로그: {LOG_DIR}")
        print("폴링 중... (종료: Ctrl+C)\n")
        try:
            await asyncio.gather(overlay.run(stop), capture.run(stop))
        finally:
            stop.set()
            print(f"\n마지막 화면: {sync.snapshot()}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
