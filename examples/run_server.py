"""
온에어 오버레이 서버 실행 예제

.env 에 OVERLAY_HOST, OVERLAY_PORT, ONAIR_DATA_DIR 설정 (없으면 기본값).
실행: python examples/run_server.py  (프로젝트 루트에서)

OBS 브라우저 소스 URL:
- 현재 온에어: http://127.0.0.1:3000/overlay?mode=current&interval=250
- NEXT 줄:     http://127.0.0.1:3000/overlay?mode=next
"""

import sys
from pathlib import Path

# 프로젝트 루트를 path에 넣어서 'import src' 가능하게 함
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dotenv import load_dotenv

from src.overlay.server import run

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


if __name__ == "__main__":
    run()
