from fastapi.testclient import TestClient


def _create(client: TestClient, **overrides):
    body = {"name": "Summer Open", "start_date": "2024-08-15", "end_date": "2024-08-17"}
    body.update(overrides)
    return client.post("/api/tournaments", json=body)


def test_create_and_get_tournament(client: TestClient):
    response = _create(client, notes="Grass season warm-up")

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Summer Open"
    assert data["notes"] == "Grass season warm-up"

    get_response = client.get(f"/api/tournaments/{data['id']}")
    assert get_response.status_code == 200
    assert get_response.json()["id"] == data["id"]

    listed = client.get("/api/tournaments").json()
    assert [t["id"] for t in listed] == [data["id"]]


def test_tournament_validation_fails_if_end_before_start(client: TestClient):
    response = _create(client, start_date="2024-08-17", end_date="2024-08-15")

    assert response.status_code == 422
    assert any("end_date must be >= start_date" in str(err) for err in response.json()["detail"])


def test_get_missing_tournament_returns_404(client: TestClient):
    assert client.get("/api/tournaments/999").status_code == 404


def test_new_tournament_has_default_config(client: TestClient):
    tournament_id = _create(client).json()["id"]

    config = client.get(f"/api/tournaments/{tournament_id}/config").json()

    assert config["tournament_id"] == tournament_id
    assert config["default_match_duration"] == 90
    assert config["minimum_rest_minutes"] == 90
    assert config["day_start_time"] == "08:00"
    assert config["day_end_time"] == "22:00"
    assert config["constraint_priorities"][0] == "court-availability"


def test_update_config(client: TestClient):
    tournament_id = _create(client).json()["id"]

    response = client.put(
        f"/api/tournaments/{tournament_id}/config",
        json={"minimum_rest_minutes": 60, "day_start_time": "09:00", "day_end_time": "20:00"},
    )

    assert response.status_code == 200
    assert response.json()["minimum_rest_minutes"] == 60
    assert client.get(f"/api/tournaments/{tournament_id}/config").json()["day_start_time"] == "09:00"


def test_update_config_rejects_bad_times(client: TestClient):
    tournament_id = _create(client).json()["id"]

    malformed = client.put(f"/api/tournaments/{tournament_id}/config", json={"day_start_time": "8am"})
    inverted = client.put(
        f"/api/tournaments/{tournament_id}/config", json={"day_start_time": "20:00", "day_end_time": "09:00"}
    )

    assert malformed.status_code == 422
    assert inverted.status_code == 422


def test_courts_players_and_availability(client: TestClient):
    tournament_id = _create(client).json()["id"]
    base = f"/api/tournaments/{tournament_id}"

    court = client.post(f"{base}/courts", json={"name": "Centre Court", "surface": "grass", "is_finals_court": True})
    assert court.status_code == 201
    court_id = court.json()["id"]
    assert court.json()["surface"] == "grass"

    player = client.post(
        f"{base}/players",
        json={
            "first_name": "Ana",
            "last_name": "Ivanova",
            "availability": {"2024-08-15": ["evening", "morning", "morning"]},
        },
    )
    assert player.status_code == 201
    assert player.json()["availability"] == {"2024-08-15": ["morning", "evening"]}

    window = client.put(
        f"{base}/courts/{court_id}/availability/2024-08-15",
        json={"start_time": "10:00", "end_time": "18:00"},
    )
    assert window.status_code == 200

    replaced = client.put(
        f"{base}/courts/{court_id}/availability/2024-08-15",
        json={"blocked": True, "reason": "Rain damage"},
    )
    assert replaced.json()["id"] == window.json()["id"]

    windows = client.get(f"{base}/courts/{court_id}/availability").json()
    assert len(windows) == 1
    assert windows[0]["blocked"] is True
    assert windows[0]["reason"] == "Rain damage"

    assert [c["name"] for c in client.get(f"{base}/courts").json()] == ["Centre Court"]
    assert [p["last_name"] for p in client.get(f"{base}/players").json()] == ["Ivanova"]


def test_court_availability_for_unknown_court_is_404(client: TestClient):
    tournament_id = _create(client).json()["id"]

    response = client.put(
        f"/api/tournaments/{tournament_id}/courts/999/availability/2024-08-15",
        json={"start_time": "10:00", "end_time": "18:00"},
    )

    assert response.status_code == 404


def test_health(client: TestClient):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_player_availability_keys_must_be_calendar_dates(client: TestClient):
    tournament_id = _create(client).json()["id"]
    url = f"/api/tournaments/{tournament_id}/players"

    unpadded = client.post(url, json={"first_name": "A", "last_name": "B", "availability": {"2024-8-15": ["morning"]}})
    weekday = client.post(url, json={"first_name": "A", "last_name": "B", "availability": {"Monday": ["morning"]}})

    assert unpadded.status_code == 422
    assert weekday.status_code == 422
    assert client.get(url).json() == []


def test_delete_court_removes_its_matches_and_windows(client: TestClient):
    tournament_id = _create(client).json()["id"]
    base = f"/api/tournaments/{tournament_id}"
    doomed = client.post(f"{base}/courts", json={"name": "Court 7"}).json()["id"]
    kept = client.post(f"{base}/courts", json={"name": "Court 8"}).json()["id"]
    client.put(f"{base}/courts/{doomed}/availability/2024-08-15", json={"start_time": "10:00", "end_time": "18:00"})
    for court_id in (doomed, kept):
        client.post(
            f"{base}/matches",
            json={"draw_id": "ms", "round_name": "R1", "court_id": court_id,
                  "scheduled_date": "2024-08-15", "scheduled_time": "10:00"},
        )

    response = client.delete(f"{base}/courts/{doomed}")

    assert response.status_code == 204
    assert [c["id"] for c in client.get(f"{base}/courts").json()] == [kept]
    assert [m["court_id"] for m in client.get(f"{base}/matches").json()] == [kept]
    assert client.get(f"{base}/courts/{doomed}/availability").status_code == 404
    assert client.delete(f"{base}/courts/{doomed}").status_code == 404
