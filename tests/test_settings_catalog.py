import json

import pytest

from src.catalog.provider import Catalog, ParticipantRef, SpecialItemRef, normalize_special
from src.onair.errors import ValidationError
from src.onair.titles import build_title
from src.overlay.settings import OverlaySettings, SettingsStore


# --- Settings ---

def test_defaults_are_independent(tmp_path):
    (tmp_path / "overlay-settings.json").write_text(json.dumps({"titleColor": "#ff0000"}), encoding="utf-8")
    store = SettingsStore(tmp_path)
    s = store.get()
    assert s.title_color == "#ff0000"
    assert s.pair_color == "#ffffff"
    assert s.endpoint_port == 4455


def test_broken_file_falls_back_to_defaults(tmp_path):
    (tmp_path / "overlay-settings.json").write_text("{not json", encoding="utf-8")
    assert SettingsStore(tmp_path).get() == OverlaySettings()


def test_save_replaces_wholesale_and_bumps_version(tmp_path):
    store = SettingsStore(tmp_path)
    v0 = store.version
    store.save({"titleColor": "#00ff00", "endpointHost": "10.1.1.1"})
    store.save({"pairColor": "#123456"})
    s = store.get()
    assert store.version == v0 + 2
    assert s.pair_color == "#123456"
    # 통째로 교체: 이전 저장값은 기본값으로 돌아감
    assert s.title_color == "#ffffff"
    assert s.endpoint_host == "127.0.0.1"
    on_disk = json.loads((tmp_path / "overlay-settings.json").read_text(encoding="utf-8"))
    assert on_disk["pairColor"] == "#123456"
    assert "version" not in on_disk


def test_invalid_payload_keeps_previous(tmp_path):
    store = SettingsStore(tmp_path)
    store.save({"titleSizePx": 60})
    version = store.version
    with pytest.raises(ValidationError):
        store.save({"titleSizePx": "huge"})
    assert store.get().title_size_px == 60
    assert store.version == version


def test_snapshot_has_all_public_fields():
    snap = SettingsStore().snapshot()
    expected = {
        "endpointHost", "endpointPort", "credential", "intervalSec", "quality", "width", "height",
        "previewRequiresStagingMode", "autoRefresh", "titleFont", "pairFont", "titleSizePx",
        "pairSizePx", "titleColor", "pairColor", "titleAnimType", "titleAnimMs", "leaderAnimType",
        "leaderAnimMs", "followerAnimType", "followerAnimMs", "version",
    }
    assert set(snap) == expected


# --- Catalog ---

def test_catalog_loads_from_data_dir(tmp_path):
    (tmp_path / "participants.json").write_text(json.dumps([
        {"number": 1, "fullName": "Ann"},
        {"number": "x", "fullName": "Broken"},
    ]), encoding="utf-8")
    (tmp_path / "contests.json").write_text(json.dumps([
        {"id": "f", "name": "Finals", "type": "finals"},
        {"id": "r", "name": "Rounds", "type": "weird"},
    ]), encoding="utf-8")
    cat = Catalog(tmp_path)
    assert cat.participant(1).full_name == "Ann"
    assert cat.participant(1).role == "lead"
    assert cat.contest("r").type == "rounds"
    assert cat.round_buttons() == ["Heat 1", "Heat 2", "Heat 3", "Heat 4"]


def test_participants_subset_per_contest(catalog):
    assert [p.number for p in catalog.participants("final-a")] == [3, 8]
    assert [p.number for p in catalog.participants("round-2")] == [3, 5, 8, 12]


def test_legacy_specials_are_migrated(catalog):
    assert catalog.special("legacy").items == ["Old Team"]
    assert normalize_special({"id": "x", "name": "X", "items": ["  a ", "", "b"]}).items == ["a", "b"]
    assert normalize_special({"id": "", "name": "X"}) is None


def test_resolve(catalog):
    assert catalog.resolve(ParticipantRef(3)) == "Alice"
    assert catalog.resolve(ParticipantRef(99)) is None
    assert catalog.resolve(SpecialItemRef("show", 1)) == "Team Blue"
    assert catalog.resolve(SpecialItemRef("show", -1)) is None
    assert catalog.resolve(SpecialItemRef("missing", 0)) is None


def test_build_title():
    assert build_title("Final A") == "Final A"
    assert build_title("Round 2", "Heat 1") == "Round 2 • Heat 1"
    assert build_title("Round 2", "Heat 1", is_next=True) == "NEXT: Round 2 • Heat 1"
    assert build_title("", None) == ""
