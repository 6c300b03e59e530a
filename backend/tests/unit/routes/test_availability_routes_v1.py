"""Public day availability over HTTP."""

from datetime import datetime

from tests._utils import la_time, seed_booking

DAY = "/api/v1/availability/day"
NOW = la_time(3, 14)


def _params(professional, service, day="2025-03-04", **extra):
    params = {
        "professionalId": professional.id,
        "serviceId": service.id,
        "day": day,
        "now": NOW.isoformat(),
    }
    params.update(extra)
    return params


def _instant(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestDayAvailability:
    def test_needs_no_professional_header(self, client, professional, haircut):
        response = client.get(DAY, params=_params(professional, haircut))

        assert response.status_code == 200
        data = response.json()
        assert data["timeZone"] == "America/Los_Angeles"
        assert data["locationType"] == "SALON"
        assert data["durationMinutes"] == 45
        assert data["stepMinutes"] == 30
        assert len(data["slots"]) == 15
        assert _instant(data["slots"][0]) == la_time(4, 9)

    def test_booked_time_is_left_out(
        self, client, unit_db, professional, client_profile, haircut
    ):
        seed_booking(unit_db, professional.id, client_profile.id, la_time(4, 9), 60)
        response = client.get(DAY, params=_params(professional, haircut))
        assert _instant(response.json()["slots"][0]) == la_time(4, 10)

    def test_step_and_location(self, client, professional, color):
        response = client.get(
            DAY, params=_params(professional, color, stepMinutes=15, locationType="MOBILE")
        )
        data = response.json()
        assert data["durationMinutes"] == 75
        assert data["stepMinutes"] == 15
        assert _instant(data["slots"][-1]) == la_time(4, 15, 45)

    def test_past_day(self, client, professional, haircut):
        response = client.get(DAY, params=_params(professional, haircut, day="2025-03-01"))
        assert response.status_code == 400
        assert response.json()["errorCode"] == "VALIDATION_ERROR"

    def test_unknown_professional(self, client, haircut):
        response = client.get(
            DAY,
            params={"professionalId": "NOPE", "serviceId": haircut.id, "day": "2025-03-04"},
        )
        assert response.status_code == 404

    def test_missing_service(self, client, professional):
        response = client.get(DAY, params={"professionalId": professional.id, "day": "2025-03-04"})
        assert response.status_code == 400

    def test_bad_location_type(self, client, professional, haircut):
        response = client.get(DAY, params=_params(professional, haircut, locationType="BEACH"))
        assert response.status_code == 400
