"""Working hours and time zone over HTTP."""

HOURS = "/api/v1/professional/working-hours"


def test_defaults(client, pro_headers):
    response = client.get(HOURS, headers=pro_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["timeZone"] == "America/Los_Angeles"
    assert data["workingHours"]["mon"] == {"enabled": True, "start": "09:00", "end": "17:00"}
    assert data["workingHours"]["sun"]["enabled"] is False


def test_replace_hours_and_zone(client, pro_headers):
    response = client.put(
        HOURS,
        json={
            "timeZone": "America/New_York",
            "workingHours": {"sat": {"enabled": True, "start": "10:00", "end": "14:00"}},
        },
        headers=pro_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["timeZone"] == "America/New_York"
    assert data["workingHours"]["sat"] == {"enabled": True, "start": "10:00", "end": "14:00"}


def test_invalid_zone(client, pro_headers):
    response = client.put(
        HOURS, json={"timeZone": "Mars/Olympus", "workingHours": {}}, headers=pro_headers
    )
    assert response.status_code == 400
    assert response.json()["errorCode"] == "INVALID_TIME_ZONE"


def test_inverted_window(client, pro_headers):
    response = client.put(
        HOURS,
        json={"workingHours": {"mon": {"enabled": True, "start": "17:00", "end": "09:00"}}},
        headers=pro_headers,
    )
    assert response.status_code == 400
    assert response.json()["errorCode"] == "VALIDATION_ERROR"
