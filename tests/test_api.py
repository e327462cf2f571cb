"""Tests for the JSON web service."""

import json

import pytest
from sqlmodel import Session, select

from api import create_app
from domain import StorageError, default_shift_time_table
from repository import SettingsDB


@pytest.fixture
def client(repo):
    app = create_app(repo)
    app.config["TESTING"] = True
    return app.test_client()


class TestShiftEndpoints:
    """/api/shifts routes."""

    def test_list_month_empty(self, client):
        resp = client.get("/api/shifts/2025/3")
        assert resp.status_code == 200
        assert resp.get_json() == []

    @pytest.mark.parametrize("path", ["/api/shifts/2025/13", "/api/shifts/2025/0", "/api/shifts/abc/3"])
    def test_list_month_invalid(self, client, path):
        resp = client.get(path)
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Invalid year or month"}

    def test_post_then_get_by_date(self, client):
        resp = client.post("/api/shifts", json={"date": "2025-03-03", "type": "night"})
        assert resp.status_code == 200
        created = resp.get_json()
        assert created["date"] == "2025-03-03"
        assert created["type"] == "night"
        assert created["userId"] == 1

        resp = client.get("/api/shifts/date/2025-03-03")
        assert resp.status_code == 200
        assert resp.get_json() == created

    def test_get_by_date_missing_is_null(self, client):
        resp = client.get("/api/shifts/date/2025-03-04")
        assert resp.status_code == 200
        assert resp.get_json() is None

    def test_get_by_malformed_date(self, client):
        assert client.get("/api/shifts/date/03-03-2025").status_code == 400

    @pytest.mark.parametrize("payload", [
        {"date": "2025-03-03"},
        {"type": "night"},
        {"date": "2025-03-03", "type": "evening"},
        {"date": "not-a-date", "type": "night"},
        ["2025-03-03", "night"],
    ])
    def test_post_invalid(self, client, payload):
        resp = client.post("/api/shifts", json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Invalid shift data"}

    def test_post_non_json_body(self, client):
        resp = client.post("/api/shifts", data="date=2025-03-03", content_type="text/plain")
        assert resp.status_code == 400

    def test_reassignment_keeps_one_record(self, client):
        client.post("/api/shifts", json={"date": "2025-03-03", "type": "night"})
        client.post("/api/shifts", json={"date": "2025-03-03", "type": "morning"})
        shifts = client.get("/api/shifts/2025/3").get_json()
        assert len(shifts) == 1
        assert shifts[0]["type"] == "morning"

    def test_delete_by_date(self, client):
        client.post("/api/shifts", json={"date": "2025-03-03", "type": "night"})
        resp = client.delete("/api/shifts/date/2025-03-03")
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True}
        assert client.get("/api/shifts/date/2025-03-03").get_json() is None

    def test_delete_missing_succeeds(self, client):
        resp = client.delete("/api/shifts/date/2025-03-03")
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True}

    def test_store_failure_is_500(self, client, repo, monkeypatch):
        def boom(*args, **kwargs):
            raise StorageError("disk on fire")
        monkeypatch.setattr(repo, "get", boom)
        resp = client.get("/api/shifts/date/2025-03-03")
        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Failed to fetch shift"}


class TestSettingsEndpoints:
    """/api/settings routes."""

    def test_get_defaults(self, client):
        data = client.get("/api/settings").get_json()
        assert data["weeklyTargetHours"] == 36
        assert json.loads(data["shiftTimes"])["night"]["hours"] == 9.0

    def test_put_replaces_settings(self, client):
        times = default_shift_time_table().to_dict()
        times["morning"] = {"start": "06:00", "end": "14:00", "hours": 7}
        resp = client.put("/api/settings", json={"weeklyTargetHours": 30, "shiftTimes": json.dumps(times)})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["weeklyTargetHours"] == 30
        assert json.loads(data["shiftTimes"])["morning"]["hours"] == 8.0
        assert client.get("/api/settings").get_json() == data

    def test_put_without_target_keeps_current(self, client):
        resp = client.put("/api/settings", json={"shiftTimes": default_shift_time_table().to_json()})
        assert resp.status_code == 200
        assert resp.get_json()["weeklyTargetHours"] == 36

    @pytest.mark.parametrize("payload", [
        {"weeklyTargetHours": 0, "shiftTimes": default_shift_time_table().to_json()},
        {"weeklyTargetHours": 30},
        {"weeklyTargetHours": 30, "shiftTimes": {"morning": {}}},
        {"weeklyTargetHours": 30, "shiftTimes": "{\"morning\": {\"start\": \"07:00\", \"end\": \"14:00\"}}"},
    ])
    def test_put_invalid(self, client, payload):
        resp = client.put("/api/settings", json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Invalid settings data"}
        assert client.get("/api/settings").get_json()["weeklyTargetHours"] == 36

    def test_corrupted_stored_settings_is_500(self, client, repo):
        with Session(repo.engine) as session:
            row = session.exec(select(SettingsDB)).first()
            row.shift_times = "{broken"
            session.add(row)
            session.commit()
        resp = client.get("/api/settings")
        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Failed to fetch settings"}


class TestStatsEndpoints:
    """Dashboard and holiday routes."""

    def test_yearly_stats(self, client):
        client.post("/api/shifts", json={"date": "2025-03-03", "type": "night"})
        client.post("/api/shifts", json={"date": "2025-03-04", "type": "mattina"})
        data = client.get("/api/stats/2025").get_json()
        assert data["totalHours"] == 16.0
        assert data["totalShifts"] == 2
        assert data["targetHours"] == 36 * 52
        assert len(data["months"]) == 12
        assert data["months"][2]["totalShiftsByType"] == {"morning": 1, "afternoon": 0, "night": 1, "admissions": 0}

    def test_weekly_progress(self, client):
        client.post("/api/shifts", json={"date": "2024-06-10", "type": "night"})
        client.post("/api/shifts", json={"date": "2024-06-17", "type": "night"})
        data = client.get("/api/stats/week/2024-06-12").get_json()
        assert data["weekStart"] == "2024-06-10"
        assert data["weekEnd"] == "2024-06-16"
        assert data["hours"] == 9.0
        assert data["progress"] == 25.0

    def test_weekly_progress_past_last_supported_date(self, client):
        resp = client.get("/api/stats/week/9999-12-31")
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Invalid date"}

    def test_holidays(self, client):
        data = client.get("/api/holidays/2025").get_json()
        assert len(data) == 11
        assert {"name": "Lunedì dell'Angelo (Pasquetta)", "date": "2025-04-21"} in data
        assert data[0]["date"] == "2025-01-01"

    def test_holidays_invalid_year(self, client):
        assert client.get("/api/holidays/year").status_code == 400
