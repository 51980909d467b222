#!/usr/bin/env python3
"""Tests for the Flask JSON API."""

import pytest

from fuellog import Advisor, DISABLED_MESSAGE, LogbookStore
from fuellog.config import Settings
from web.app import create_app


class StubAdvisor:
    """Advisor stand-in that records what it was asked."""

    available = True

    def __init__(self):
        self.calls = []

    def summarize_month(self, entries, month_label):
        self.calls.append(("summary", [e.id for e in entries], month_label))
        return "summary text"

    def estimate_trip(self, distance_km, avg_kmpl):
        self.calls.append(("trip", distance_km, avg_kmpl))
        return "trip text"


@pytest.fixture
def store(tmp_path):
    return LogbookStore(tmp_path)


@pytest.fixture
def advisor():
    return StubAdvisor()


@pytest.fixture
def client(tmp_path, store, advisor):
    app = create_app(settings=Settings(data_dir=tmp_path), store=store, advisor=advisor)
    app.testing = True
    return app.test_client()


def add_entry(client, **fields):
    body = {"totalValue": 100.0, "pricePerLiter": 5.0, "kmEnd": 10000, "date": "2025-01-05"}
    body.update(fields)
    resp = client.post("/api/me/entries", json=body)
    assert resp.status_code == 201
    return resp.get_json()["id"]


class TestEntries:
    """Tests for the fuel entry endpoints."""

    def test_empty_scope(self, client):
        resp = client.get("/api/me/entries")
        assert resp.status_code == 200
        assert resp.get_json() == []

    def test_add_and_list(self, client):
        add_entry(client, id="b", date="2025-01-20", totalValue=120.0, pricePerLiter=6.0, kmEnd=10400)
        add_entry(client, id="a")

        data = client.get("/api/me/entries").get_json()

        assert [e["id"] for e in data] == ["a", "b"]
        assert data[0]["distance"] is None
        assert data[1]["kmStart"] == 10000
        assert data[1]["distance"] == 400
        assert data[1]["liters"] == 20.0
        assert data[1]["avgKmpl"] == 20.0
        assert data[1]["fuelType"] == "GASOLINA"

    def test_add_ethanol(self, client):
        add_entry(client, id="a", fuelType="etanol")
        assert client.get("/api/me/entries").get_json()[0]["fuelType"] == "ETANOL"

    def test_add_missing_fields(self, client):
        resp = client.post("/api/me/entries", json={"totalValue": 100.0})
        assert resp.status_code == 400
        assert "kmEnd" in resp.get_json()["error"]

    def test_add_invalid_value(self, client):
        resp = client.post("/api/me/entries", json={"totalValue": 100.0, "pricePerLiter": 0, "kmEnd": 1})
        assert resp.status_code == 400

    def test_add_unknown_field(self, client):
        resp = client.post(
            "/api/me/entries", json={"totalValue": 100.0, "pricePerLiter": 5.0, "kmEnd": 1, "liters": 20}
        )
        assert resp.status_code == 400

    def test_body_must_be_object(self, client):
        resp = client.post("/api/me/entries", data="nope", content_type="text/plain")
        assert resp.status_code == 400

    def test_update(self, client):
        add_entry(client, id="a")
        resp = client.put("/api/me/entries/a", json={"notes": "full tank", "kmEnd": 10050})
        assert resp.status_code == 200
        data = client.get("/api/me/entries").get_json()
        assert data[0]["notes"] == "full tank"
        assert data[0]["kmEnd"] == 10050

    def test_update_unknown(self, client):
        resp = client.put("/api/me/entries/zz", json={"notes": "x"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "fuel entry 'zz' not found", "kind": "fuel entry", "id": "zz"}

    def test_delete(self, client):
        add_entry(client, id="a")
        assert client.delete("/api/me/entries/a").status_code == 204
        assert client.get("/api/me/entries").get_json() == []
        assert client.delete("/api/me/entries/a").status_code == 404

    def test_scopes_isolated(self, client):
        add_entry(client, id="a")
        assert client.get("/api/other/entries").get_json() == []

    def test_invalid_scope(self, client):
        assert client.get("/api/.hidden/entries").status_code == 400


class TestAggregates:
    """Tests for monthly and stats endpoints."""

    def test_monthly(self, client):
        add_entry(client, id="a")
        add_entry(client, id="b", date="2025-01-20", totalValue=120.0, pricePerLiter=6.0, kmEnd=10400)
        add_entry(client, id="c", date="2025-03-02", totalValue=90.0, pricePerLiter=4.5, kmEnd=10700)

        data = client.get("/api/me/monthly").get_json()

        assert data == [
            {"label": "2025-01", "totalSpend": 220.0, "totalDistance": 400, "meanAvgKmpl": 20.0},
            {"label": "2025-03", "totalSpend": 90.0, "totalDistance": 300, "meanAvgKmpl": 15.0},
        ]

    def test_stats(self, client):
        add_entry(client, id="a")
        add_entry(client, id="b", date="2025-01-20", totalValue=120.0, pricePerLiter=6.0, kmEnd=10400)

        data = client.get("/api/me/stats").get_json()

        assert data["entryCount"] == 2
        assert data["totalSpend"] == 220.0
        assert data["totalDistance"] == 400
        assert data["avgKmpl"] == 20.0
        assert data["avgPricePerLiter"] == 5.5
        assert data["currentMileage"] == 10400

    def test_stats_empty(self, client):
        data = client.get("/api/me/stats").get_json()
        assert data["entryCount"] == 0
        assert data["avgKmpl"] is None
        assert data["currentMileage"] == 0


class TestReminders:
    """Tests for the reminder endpoints."""

    def test_create_defaults_anchor_to_current_mileage(self, client, store):
        add_entry(client, id="a", kmEnd=12000)
        resp = client.post("/api/me/reminders", json={"name": "Oil change", "recurringKmInterval": 5000})
        assert resp.status_code == 201

        reminder = store.load("me").reminders[0]
        assert reminder.id == resp.get_json()["id"]
        assert reminder.last_completion_km == 12000

    def test_list_with_status(self, client):
        add_entry(client, id="a", kmEnd=15000)
        client.post(
            "/api/me/reminders",
            json={"id": "oil", "name": "Oil", "type": "km", "recurringKmInterval": 5000, "lastCompletionKm": 10000},
        )
        client.post(
            "/api/me/reminders",
            json={"id": "tires", "name": "Tires", "type": "km", "isRecurring": False, "kmValue": 40000},
        )

        data = client.get("/api/me/reminders").get_json()

        assert [r["id"] for r in data] == ["oil", "tires"]
        assert data[0]["status"] == "due"
        assert data[0]["due"] is True
        assert data[0]["dueKm"] == 15000
        assert data[0]["kmRemaining"] == 0
        assert data[1]["status"] == "pending"
        assert data[1]["kmRemaining"] == 25000

    def test_create_date_reminder(self, client, store):
        resp = client.post(
            "/api/me/reminders",
            json={"name": "Insurance", "type": "date", "recurringDaysInterval": 365, "lastCompletionDate": "2025-01-01"},
        )
        assert resp.status_code == 201
        assert store.load("me").reminders[0].last_completion_date == "2025-01-01"

    def test_create_invalid(self, client):
        resp = client.post("/api/me/reminders", json={"name": "Oil", "recurringKmInterval": 0})
        assert resp.status_code == 400

    def test_create_type_any_case(self, client, store):
        resp = client.post("/api/me/reminders", json={"name": "Oil", "type": "KM", "recurringKmInterval": 5000})
        assert resp.status_code == 201
        reminder = store.load("me").reminders[0]
        assert reminder.type.value == "km"
        assert reminder.recurring_km_interval == 5000

    def test_create_unknown_type(self, client):
        resp = client.post("/api/me/reminders", json={"name": "Oil", "type": "hours", "recurringKmInterval": 5000})
        assert resp.status_code == 400

    def test_create_recurring_flag_must_be_bool(self, client, store):
        resp = client.post(
            "/api/me/reminders", json={"name": "Oil", "isRecurring": "false", "recurringKmInterval": 5000}
        )
        assert resp.status_code == 400
        assert store.load("me").reminders == []

    def test_update_recurring_flag_must_be_bool(self, client, store):
        client.post(
            "/api/me/reminders",
            json={"id": "oil", "name": "Oil", "recurringKmInterval": 5000, "lastCompletionKm": 10000},
        )
        resp = client.put("/api/me/reminders/oil", json={"isRecurring": "false"})
        assert resp.status_code == 400
        assert store.load("me").reminders[0].is_recurring is True

    def test_complete_recurring(self, client, store):
        add_entry(client, id="a", kmEnd=15000)
        client.post(
            "/api/me/reminders",
            json={"id": "oil", "name": "Oil", "recurringKmInterval": 5000, "lastCompletionKm": 10000},
        )

        resp = client.post("/api/me/reminders/oil/complete")

        assert resp.get_json() == {"id": "oil", "removed": False}
        assert store.load("me").reminders[0].last_completion_km == 15000

    def test_complete_one_time_removes(self, client, store):
        client.post(
            "/api/me/reminders",
            json={"id": "tires", "name": "Tires", "isRecurring": False, "kmValue": 40000},
        )
        resp = client.post("/api/me/reminders/tires/complete")
        assert resp.get_json() == {"id": "tires", "removed": True}
        assert store.load("me").reminders == []

    def test_complete_unknown(self, client):
        resp = client.post("/api/me/reminders/missing/complete")
        assert resp.status_code == 404
        assert resp.get_json()["kind"] == "reminder"

    def test_update(self, client, store):
        client.post(
            "/api/me/reminders",
            json={"id": "oil", "name": "Oil", "recurringKmInterval": 5000, "lastCompletionKm": 10000},
        )
        resp = client.put("/api/me/reminders/oil", json={"name": "Synthetic oil", "recurringKmInterval": 7500})
        assert resp.status_code == 200
        reminder = store.load("me").reminders[0]
        assert reminder.name == "Synthetic oil"
        assert reminder.recurring_km_interval == 7500

    def test_update_cannot_change_id(self, client):
        client.post(
            "/api/me/reminders",
            json={"id": "oil", "name": "Oil", "recurringKmInterval": 5000, "lastCompletionKm": 10000},
        )
        assert client.put("/api/me/reminders/oil", json={"id": "other"}).status_code == 400

    def test_delete(self, client, store):
        client.post(
            "/api/me/reminders",
            json={"id": "oil", "name": "Oil", "recurringKmInterval": 5000, "lastCompletionKm": 10000},
        )
        assert client.delete("/api/me/reminders/oil").status_code == 204
        assert store.load("me").reminders == []
        assert client.delete("/api/me/reminders/oil").status_code == 404


class TestAdvisorEndpoints:
    """Tests for summary and trip endpoints."""

    def test_summary_passes_month_entries(self, client, advisor):
        add_entry(client, id="a")
        add_entry(client, id="b", date="2025-02-03", kmEnd=10300)

        resp = client.get("/api/me/summary/2025-01")

        assert resp.get_json() == {"month": "2025-01", "available": True, "text": "summary text"}
        assert advisor.calls == [("summary", ["a"], "January 2025")]

    def test_summary_bad_month(self, client):
        assert client.get("/api/me/summary/2025-13").status_code == 400
        assert client.get("/api/me/summary/january").status_code == 400

    def test_trip_uses_logbook_average(self, client, advisor):
        add_entry(client, id="a")
        add_entry(client, id="b", date="2025-01-20", totalValue=120.0, pricePerLiter=6.0, kmEnd=10400)

        resp = client.get("/api/me/trip?distance=300")

        assert resp.get_json() == {"available": True, "text": "trip text"}
        assert advisor.calls == [("trip", 300.0, 20.0)]

    def test_trip_explicit_average(self, client, advisor):
        client.get("/api/me/trip?distance=300&avgKmpl=12.5")
        assert advisor.calls == [("trip", 300.0, 12.5)]

    def test_trip_requires_distance(self, client):
        assert client.get("/api/me/trip").status_code == 400
        assert client.get("/api/me/trip?distance=far").status_code == 400

    def test_trip_without_consumption_data(self, client):
        assert client.get("/api/me/trip?distance=300").status_code == 400

    def test_disabled_advisor(self, tmp_path, store):
        app = create_app(settings=Settings(data_dir=tmp_path), store=store, advisor=Advisor())
        resp = app.test_client().get("/api/me/summary/2025-01")
        assert resp.get_json() == {"month": "2025-01", "available": False, "text": DISABLED_MESSAGE}


class TestStoreFailure:
    def test_unreadable_logbook(self, client, tmp_path):
        (tmp_path / "me.yaml").write_text("fuelEntries: [unclosed\n")
        resp = client.get("/api/me/entries")
        assert resp.status_code == 503
