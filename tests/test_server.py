from conftest import JPEG_BYTES


def test_overlay_page_served(client):
    for path in ("/", "/overlay"):
        resp = client.get(path)
        assert resp.status_code == 200
        assert "/api/overlay-state" in resp.text


def test_initial_overlay_state(client):
    resp = client.get("/api/overlay-state")
    assert resp.status_code == 200
    assert resp.json() == {
        "title": "", "leader": "", "follower": "", "withoutPair": False,
        "hidden": False, "applyId": 0, "nextTitle": "",
    }


def test_finals_apply_and_history(client):
    resp = client.post("/api/onair/finals", json={"contestId": "final-a", "firstNumber": 3, "secondNumber": 8})
    assert resp.status_code == 200
    state = resp.json()["state"]
    assert (state["title"], state["leader"], state["follower"]) == ("Final A", "Alice", "Bob")
    hist = client.get("/api/history").json()
    assert hist["index"] == 0
    assert hist["items"][0]["leader"] == "Alice"


def test_validation_error_is_400_and_does_not_mutate(client):
    resp = client.post("/api/onair/finals", json={"contestId": "final-a", "firstNumber": 3, "secondNumber": 404})
    assert resp.status_code == 400
    assert "follower" in resp.json()["error"]
    assert client.get("/api/overlay-state").json()["applyId"] == 0


def test_pair_with_special_refs(client):
    resp = client.post("/api/onair/pair", json={
        "title": "Showcase",
        "leader": {"specialId": "show", "index": 0},
        "follower": {"specialId": "show", "index": 1},
    })
    assert resp.status_code == 200
    assert resp.json()["state"]["follower"] == "Team Blue"


def test_rounds_clears_pair(client):
    client.post("/api/onair/pair", json={"title": "X", "leader": 3, "follower": 8})
    state = client.post("/api/onair/rounds", json={"contestId": "round-2", "heatLabel": "Heat 3"}).json()["state"]
    assert state["title"] == "Round 2 • Heat 3"
    assert (state["leader"], state["follower"]) == ("", "")


def test_heat_requires_title(client):
    assert client.post("/api/onair/heat", json={"title": " "}).status_code == 400
    state = client.post("/api/onair/heat", json={"title": "Round 2", "heatLabel": "Heat 3"}).json()["state"]
    assert state["title"] == "Round 2 • Heat 3"


def test_special_endpoint(client):
    state = client.post("/api/onair/special", json={"specialId": "show", "itemIndex": 1}).json()["state"]
    assert (state["title"], state["leader"], state["withoutPair"]) == ("Showcase", "Team Blue", True)
    assert client.post("/api/onair/special", json={"specialId": "nope"}).status_code == 400


def test_special_without_item_is_rejected(client):
    resp = client.post("/api/onair/special", json={"specialId": "show"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "itemIndex required"
    assert client.get("/api/overlay-state").json()["applyId"] == 0


def test_finals_solo_with_second_number_only(client):
    resp = client.post("/api/onair/finals", json={"contestId": "final-a", "secondNumber": 8, "noPair": True})
    assert resp.status_code == 200
    state = resp.json()["state"]
    assert (state["leader"], state["follower"], state["withoutPair"]) == ("Bob", "", True)


def test_leader_follower_separately(client):
    client.post("/api/onair/pair", json={"title": "Final A", "leader": 3, "follower": 8})
    state = client.post("/api/onair/leader", json={"name": "Carol"}).json()["state"]
    assert (state["title"], state["leader"], state["follower"]) == ("Final A", "Carol", "Bob")
    state = client.post("/api/onair/follower", json={"ref": 12}).json()["state"]
    assert state["follower"] == "Dave"
    assert client.post("/api/onair/follower", json={}).status_code == 400


def test_hide_show_clear_undo_redo(client):
    client.post("/api/onair/pair", json={"title": "Final A", "leader": 3, "follower": 8})
    assert client.post("/api/onair/hide").json()["state"]["hidden"] is True
    shown = client.post("/api/onair/show").json()["state"]
    assert (shown["hidden"], shown["leader"]) == (False, "Alice")
    cleared = client.post("/api/reset/onair").json()["state"]
    assert cleared["title"] == ""
    undone = client.post("/api/history/undo").json()
    assert undone["applied"] is True
    assert undone["state"]["title"] == "Final A"
    redone = client.post("/api/history/redo").json()
    assert redone["state"]["title"] == ""
    assert client.post("/api/history/redo").json()["applied"] is False


def test_undo_at_origin_is_not_an_error(client):
    resp = client.post("/api/history/undo")
    assert resp.status_code == 200
    assert resp.json()["applied"] is False


def test_next_and_reset(client):
    state = client.post("/api/next", json={"contestId": "round-2", "heatLabel": "Heat 2"}).json()["state"]
    assert state["nextTitle"] == "NEXT: Round 2 • Heat 2"
    assert client.post("/api/reset/next").json()["state"]["nextTitle"] == ""


def test_overlay_settings_roundtrip_bumps_version(client):
    v1 = client.get("/api/overlay-settings").json()["version"]
    resp = client.post("/api/overlay-settings", json={"titleColor": "#abcdef", "version": 999})
    assert resp.status_code == 200
    snap = client.get("/api/overlay-settings").json()
    assert snap["titleColor"] == "#abcdef"
    assert snap["version"] == v1 + 1
    assert client.post("/api/overlay-settings", json={"width": -5}).status_code == 400


def test_capture_status_and_frames(client, mixer):
    status = client.get("/api/capture/status").json()
    assert status["connected"] is False
    prog = client.get("/api/capture/program")
    assert prog.status_code == 200
    assert prog.content == JPEG_BYTES
    assert prog.headers["x-scene-name"] == "Main"
    assert prog.headers["content-type"] == "image/jpeg"
    assert client.get("/api/capture/status").json()["connected"] is True


def test_capture_preview_no_preview_is_204(client, mixer):
    resp = client.get("/api/capture/preview")
    assert resp.status_code == 204
    assert resp.headers["x-preview"] == "none"


def test_capture_preview_in_studio_mode(client, mixer):
    mixer.studio_mode = True
    resp = client.get("/api/capture/preview")
    assert resp.status_code == 200
    assert resp.headers["x-scene-name"] == "Next Up"
    assert resp.headers["x-frame-source"] == "preview"


def test_capture_unreachable(client, mixer):
    mixer.reachable = False
    assert client.get("/api/capture/program").status_code == 503
    resp = client.post("/api/capture/reconnect")
    assert resp.status_code == 503
    body = resp.json()
    assert body["ok"] is False
    assert body["status"]["connected"] is False
    assert body["status"]["lastErrorMessage"]


def test_capture_reconnect(client, mixer):
    client.get("/api/capture/program")
    resp = client.post("/api/capture/reconnect")
    assert resp.status_code == 200
    assert len(mixer.open_clients) == 1


def test_catalog_endpoints(client):
    assert [c["id"] for c in client.get("/api/contests", params={"type": "finals"}).json()] == ["final-a"]
    assert len(client.get("/api/contests").json()) == 2
    assert [p["number"] for p in client.get("/api/participants", params={"contestId": "final-a"}).json()] == [3, 8]
    assert client.get("/api/specials").json()[0]["items"] == ["Team Red", "Team Blue"]
    assert client.get("/api/round-buttons").json()[0] == "Heat 1"
