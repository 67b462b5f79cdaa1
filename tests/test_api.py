import pytest

from app.core.errors import StorageUnavailableError
from app.crud import sessions as session_store


def _start(client, console_name="PS4"):
    response = client.post("/api/v1/sessions/start", json={"console_name": console_name})
    assert response.status_code == 201, response.text
    return response.json()


def test_health_and_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert response.headers["X-Request-ID"] == "abc-123"


def test_start_and_stop_session(client, clock):
    started = _start(client)
    assert started["status"] == "running"
    assert started["start_iso"] == "2024-05-15T12:00:00.000000Z"

    clock.advance(minutes=70)
    response = client.post(f"/api/v1/sessions/{started['id']}/stop")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["end_iso"] == "2024-05-15T13:10:00.000000Z"
    assert body["duration_hours"] == pytest.approx(70 / 60)
    assert body["price"] == 35


def test_duplicate_start_returns_conflict_envelope(client):
    first = _start(client)

    response = client.post("/api/v1/sessions/start", json={"console_name": "PS4"})

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "invalid_state"
    assert body["details"]["session_id"] == first["id"]


def test_unknown_console_is_rejected(client):
    response = client.post("/api/v1/sessions/start", json={"console_name": "Xbox"})

    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_missing_session_returns_not_found(client):
    for method, path in [
        ("get", "/api/v1/sessions/nope"),
        ("post", "/api/v1/sessions/nope/stop"),
        ("delete", "/api/v1/sessions/nope"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"


def test_console_states_show_running_elapsed(client, clock):
    started = _start(client, "PS3")
    clock.advance(minutes=1, seconds=5)

    response = client.get("/api/v1/consoles")

    assert response.status_code == 200
    states = {item["console_name"]: item["running"] for item in response.json()}
    assert list(states) == ["PS4", "PS3", "PS2", "PS1"]
    assert states["PS4"] is None
    assert states["PS3"]["id"] == started["id"]
    assert states["PS3"]["elapsed_seconds"] == 65
    assert states["PS3"]["elapsed_display"] == "00:01:05"

    running = client.get("/api/v1/sessions/running", params={"console_name": "PS3"})
    assert running.json()["id"] == started["id"]
    idle = client.get("/api/v1/sessions/running", params={"console_name": "PS4"})
    assert idle.status_code == 404


def test_manual_session(client):
    response = client.post(
        "/api/v1/sessions/manual",
        json={"console_name": "PS2", "start_time": "23:00", "end_time": "01:00", "day": "2024-05-14"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "completed"
    assert body["start_iso"] == "2024-05-14T23:00:00.000000Z"
    assert body["end_iso"] == "2024-05-15T01:00:00.000000Z"
    assert body["price"] == 50


def test_manual_session_validation(client):
    malformed = client.post(
        "/api/v1/sessions/manual",
        json={"console_name": "PS2", "start_time": "9am", "end_time": "10:00"},
    )
    assert malformed.status_code == 422
    assert malformed.json()["code"] == "validation_error"
    assert malformed.json()["details"]["errors"]

    empty = client.post(
        "/api/v1/sessions/manual",
        json={"console_name": "PS2", "start_time": "10:00", "end_time": "10:00"},
    )
    assert empty.status_code == 422
    assert empty.json()["code"] == "validation_error"


def test_list_and_delete_sessions(client):
    started = _start(client)
    client.post(
        "/api/v1/sessions/manual",
        json={"console_name": "PS1", "start_time": "10:00", "end_time": "10:30"},
    )

    assert len(client.get("/api/v1/sessions").json()) == 2
    running = client.get("/api/v1/sessions", params={"status": "running"}).json()
    assert [item["id"] for item in running] == [started["id"]]
    assert client.get("/api/v1/sessions", params={"status": "paused"}).status_code == 422

    assert client.delete(f"/api/v1/sessions/{started['id']}").json() == {"status": "deleted"}
    assert client.delete("/api/v1/sessions").json() == {"deleted": 1}
    assert client.get("/api/v1/sessions").json() == []


def test_stop_all(client, clock):
    _start(client, "PS4")
    _start(client, "PS3")
    clock.advance(minutes=25)

    response = client.post("/api/v1/sessions/stop-all")

    assert response.status_code == 200
    stopped = response.json()
    assert {item["console_name"] for item in stopped} == {"PS4", "PS3"}
    assert {item["price"] for item in stopped} == {15}
    assert client.get("/api/v1/sessions", params={"status": "running"}).json() == []


def test_stop_all_failure_reports_failed_ids(client, monkeypatch):
    started = _start(client, "PS4")

    def broken_complete(db, record, **kwargs):
        raise StorageUnavailableError(f"Failed to stop session {record.id}")

    monkeypatch.setattr(session_store, "complete_session", broken_complete)

    response = client.post("/api/v1/sessions/stop-all")

    assert response.status_code == 503
    body = response.json()
    assert body["code"] == "stop_all_failed"
    assert list(body["details"]["failed"]) == [started["id"]]
    assert body["details"]["completed"] == []


def test_settlement_report(client, clock):
    started = _start(client, "PS4")
    clock.advance(minutes=60)
    client.post(f"/api/v1/sessions/{started['id']}/stop")
    client.post(
        "/api/v1/sessions/manual",
        json={"console_name": "PS3", "start_time": "08:00", "end_time": "08:20"},
    )

    response = client.get("/api/v1/reports/settlement", params={"period": "daily"})

    assert response.status_code == 200
    report = response.json()
    assert report["currency"] == "EGP"
    assert [item["console_name"] for item in report["consoles"]] == ["PS3", "PS4"]
    assert report["grand_total_count"] == 2
    assert report["grand_total_price"] == 40
    assert report["grand_total_duration_display"] == "01h 20m"

    assert client.get("/api/v1/reports/settlement", params={"period": "yearly"}).status_code == 422


def test_shift_settle_and_end(client, clock):
    _start(client, "PS1")
    clock.advance(minutes=12)

    settled = client.post("/api/v1/reports/shift/settle").json()
    assert [item["console_name"] for item in settled["stopped"]] == ["PS1"]
    assert settled["report"]["grand_total_price"] == 10

    ended = client.post("/api/v1/reports/shift/end").json()
    assert ended["deleted"] == 1
    assert ended["report"]["grand_total_count"] == 1
    assert client.get("/api/v1/sessions").json() == []


def test_stats(client, clock):
    started = _start(client, "PS4")
    _start(client, "PS3")
    clock.advance(minutes=40)
    client.post(f"/api/v1/sessions/{started['id']}/stop")

    stats = client.get("/api/v1/reports/stats").json()

    assert stats == {
        "total": 2,
        "running": 1,
        "completed": 1,
        "total_revenue": 25,
        "total_hours": pytest.approx(40 / 60),
    }


def test_sessions_pdf_export(client, clock):
    assert client.get("/api/v1/reports/sessions.pdf").status_code == 404

    started = _start(client, "PS4")
    clock.advance(minutes=30)
    client.post(f"/api/v1/sessions/{started['id']}/stop")
    _start(client, "PS3")

    response = client.get("/api/v1/reports/sessions.pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="Game_Time_Report_2024-05-15.pdf"' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_controller_inventory(client):
    initial = client.get("/api/v1/inventory/controllers").json()
    assert initial["total"] == 16
    assert initial["controllers_out"] == 0

    updated = client.put("/api/v1/inventory/controllers", json={"controllers_out": 5}).json()
    assert updated["controllers_out"] == 5
    assert updated["in_stock"] == 11

    clamped = client.put("/api/v1/inventory/controllers", json={"controllers_out": 99}).json()
    assert clamped["controllers_out"] == 16
    assert clamped["in_stock"] == 0
