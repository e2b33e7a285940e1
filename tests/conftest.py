"""Shared pytest configuration and fixtures for the on-air overlay test suite."""

import base64
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.catalog.provider import Catalog  # noqa: E402
from src.onair.controller import OnAirController  # noqa: E402
from src.overlay.context import build_context  # noqa: E402
from src.overlay.settings import OverlaySettings, SettingsStore  # noqa: E402

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9"


# =============================================================================
# Fake OBS
# =============================================================================

class FakeObsClient:
    """obsws_python.ReqClient 대역. 호출 기록 + 실패 주입."""

    def __init__(self, mixer, host, port, password, timeout):
        self.mixer = mixer
        self.host = host
        self.port = port
        self.password = password
        self.timeout = timeout
        self.closed = False
        self.calls = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        if self.closed:
            raise ConnectionError("socket closed")
        if name in self.mixer.fail_methods:
            raise ConnectionError(f"{name} boom")

    def get_version(self):
        self._maybe_fail("get_version")
        return SimpleNamespace(obs_version="30.0.0")

    def get_studio_mode_enabled(self):
        self._maybe_fail("get_studio_mode_enabled")
        return SimpleNamespace(studio_mode_enabled=self.mixer.studio_mode)

    def get_current_program_scene(self):
        self._maybe_fail("get_current_program_scene")
        return SimpleNamespace(current_program_scene_name=self.mixer.program_scene)

    def get_current_preview_scene(self):
        self._maybe_fail("get_current_preview_scene")
        return SimpleNamespace(current_preview_scene_name=self.mixer.preview_scene)

    def get_source_screenshot(self, name, img_format, width, height, quality):
        self._maybe_fail("get_source_screenshot")
        self.mixer.screenshots.append((name, img_format, width, height, quality))
        data = base64.b64encode(JPEG_BYTES).decode("ascii")
        return SimpleNamespace(image_data=f"data:image/{img_format};base64,{data}")

    def disconnect(self):
        self.closed = True
        self.mixer.disconnects += 1


class FakeMixer:
    """OBS 인스턴스 하나. factory 로 ReqClient 생성을 대신한다."""

    def __init__(self):
        self.reachable = True
        self.studio_mode = False
        self.program_scene = "Main"
        self.preview_scene = "Next Up"
        self.fail_methods = set()
        self.clients = []
        self.screenshots = []
        self.disconnects = 0

    def factory(self, host, port, password, timeout):
        if not self.reachable:
            raise ConnectionRefusedError(f"[Errno 111] Connection refused ({host}:{port})")
        client = FakeObsClient(self, host, port, password, timeout)
        self.clients.append(client)
        return client

    @property
    def open_clients(self):
        return [c for c in self.clients if not c.closed]


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


# =============================================================================
# Shared Fixtures
# =============================================================================

CATALOG_RECORDS = dict(
    participants=[
        {"number": 3, "fullName": "Alice", "role": "lead"},
        {"number": 8, "fullName": "Bob", "role": "follow"},
        {"number": 5, "fullName": "Carol"},
        {"number": 12, "fullName": "Dave"},
    ],
    contests=[
        {"id": "final-a", "name": "Final A", "type": "finals"},
        {"id": "round-2", "name": "Round 2", "type": "rounds"},
    ],
    specials=[
        {"id": "show", "name": "Showcase", "items": ["Team Red", "Team Blue"]},
        {"id": "legacy", "name": "Legacy", "teams": ["Old Team"]},
    ],
    contest_participants={"final-a": [3, 8]},
)


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_records(**CATALOG_RECORDS)


@pytest.fixture
def controller(catalog) -> OnAirController:
    return OnAirController(catalog)


@pytest.fixture
def mixer() -> FakeMixer:
    return FakeMixer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings_store() -> SettingsStore:
    return SettingsStore(initial=OverlaySettings())


@pytest.fixture
def ctx(catalog, settings_store, mixer):
    return build_context(
        catalog=catalog,
        settings=settings_store,
        client_factory=mixer.factory,
        history_capacity=200,
        obs_timeout=1.0,
    )


@pytest.fixture
def client(ctx):
    from fastapi.testclient import TestClient

    from src.overlay.server import create_app

    with TestClient(create_app(ctx)) as c:
        yield c
