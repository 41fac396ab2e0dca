from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from fastapi.testclient import TestClient

from building_engine.main import create_app
from building_engine.utils.config import get_settings


POOL = {
    "amenity_id": "pool",
    "name": "Pool",
    "available_from": "06:00",
    "available_to": "22:00",
    "slot_duration_hours": 1,
    "capacity": 8,
}


def _build_test_client() -> TestClient:
    get_settings.cache_clear()
    settings = replace(get_settings(), week_starts_on=6, forecast_horizon_years=10, due_soon_window_years=3)
    return TestClient(create_app(settings))


def _reservation(start: str, end: str, status: str = "approved") -> dict:
    return {
        "id": f"b-{start}",
        "amenity_id": "pool",
        "booking_date": "2024-03-01",
        "start_time": start,
        "end_time": end,
        "status": status,
    }


def test_slot_grid_marks_booked_slot() -> None:
    client = _build_test_client()

    response = client.post(
        "/bookings/slots",
        json={"amenity": POOL, "date": "2024-03-01", "reservations": [_reservation("10:00", "11:00")]},
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["slots"]) == 16
    assert body["available_count"] == 15
    assert body["slots"][4] == {"start": "10:00", "end": "11:00", "is_available": False}


def test_week_grid_returns_seven_days() -> None:
    client = _build_test_client()

    response = client.post("/bookings/week", json={"amenity": POOL, "anchor_date": "2024-03-06"})

    assert response.status_code == 200
    days = response.json()["days"]
    assert [day["date"] for day in days][0] == "2024-03-03"
    assert len(days) == 7


def test_booking_submission_accepts_free_slot() -> None:
    client = _build_test_client()

    response = client.post(
        "/bookings",
        json={
            "amenity": POOL,
            "booking_date": "2024-03-01",
            "start_time": "12:00",
            "end_time": "13:00",
            "guests": 2,
            "reservation_id": "b-new",
            "reservations": [_reservation("10:00", "11:00")],
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "approved"
    assert body["amenity_id"] == "pool"
    assert body["id"] == "b-new"


def test_booking_submission_rejects_taken_slot() -> None:
    client = _build_test_client()

    response = client.post(
        "/bookings",
        json={
            "amenity": POOL,
            "booking_date": "2024-03-01",
            "start_time": "10:00",
            "end_time": "11:00",
            "reservations": [_reservation("10:00", "11:00", status="pending")],
        },
    )

    assert response.status_code == 409


def test_booking_submission_rejects_unknown_slot() -> None:
    client = _build_test_client()

    response = client.post(
        "/bookings",
        json={"amenity": POOL, "booking_date": "2024-03-01", "start_time": "10:30", "end_time": "11:30"},
    )

    assert response.status_code == 400


def test_inverted_operating_hours_are_rejected() -> None:
    client = _build_test_client()
    amenity = dict(POOL, available_from="22:00", available_to="06:00")

    response = client.post("/bookings/slots", json={"amenity": amenity, "date": "2024-03-01"})

    assert response.status_code == 400


def test_calendar_month_projects_whole_weeks() -> None:
    client = _build_test_client()

    response = client.post(
        "/calendar/month",
        json={
            "year": 2024,
            "month": 3,
            "sources": {
                "events": [{"id": "agm", "title": "AGM", "event_date": "2024-03-05"}],
                "maintenance": [
                    {"id": "lift", "title": "Lift", "scheduled_date": "2024-01-05", "recurrence": "monthly"}
                ],
            },
        },
    )

    assert response.status_code == 200
    days = response.json()["days"]
    assert len(days) == 42
    assert days[0]["day"] == "2024-02-25"
    busy = next(day for day in days if day["day"] == "2024-03-05")
    assert [event["category"] for event in busy["events"]] == ["event", "maintenance"]


def test_calendar_day_lists_tagged_events() -> None:
    client = _build_test_client()

    response = client.post(
        "/calendar/day",
        json={
            "day": "2024-03-05",
            "sources": {"residents": [{"id": "r1", "full_name": "Lee", "move_out_date": "2024-03-05"}]},
        },
    )

    assert response.status_code == 200
    assert response.json()["events"] == [
        {"category": "resident", "source_id": "r1", "title": "Lee", "direction": "move_out"}
    ]


def test_capital_forecast_report() -> None:
    client = _build_test_client()
    assets = [
        {"id": "lift", "name": "Lift", "installation_date": "2014-01-01", "lifecycle_years": 10,
         "replacement_cost": "1000", "risk_rating": "high"},
        {"id": "roof", "name": "Roof", "installation_date": "2020-06-01", "lifecycle_years": 14,
         "replacement_cost": "2500.50"},
        {"id": "pump", "name": "Pump", "installation_date": "2022-01-01", "lifecycle_years": 5,
         "replacement_cost": "300"},
        {"id": "ghost", "name": "Ghost", "installation_date": None, "lifecycle_years": 10,
         "replacement_cost": "500"},
    ]

    response = client.post("/capital/forecast", json={"as_of": "2024-06-01", "assets": assets})

    assert response.status_code == 200
    body = response.json()
    assert body["forecast_period"] == "2024 - 2034"
    assert len(body["yearly_breakdown"]) == 11
    assert Decimal(str(body["total_forecast_cost"])) == Decimal("3800.50")
    assert body["critical_assets"] == 1
    assert body["due_soon_assets"] == 2
    assert body["total_assets"] == 4


def test_capital_forecast_rejects_negative_horizon() -> None:
    client = _build_test_client()

    response = client.post("/capital/forecast", json={"as_of": "2024-06-01", "horizon_years": -1})

    assert response.status_code == 422


def test_capital_forecast_survives_non_finite_cost() -> None:
    client = _build_test_client()
    assets = [
        {"id": "bad", "name": "Bad", "installation_date": "2019-01-01", "lifecycle_years": 10,
         "replacement_cost": "NaN"},
        {"id": "good", "name": "Good", "installation_date": "2019-01-01", "lifecycle_years": 10,
         "replacement_cost": "5000"},
    ]

    response = client.post("/capital/forecast", json={"as_of": "2024-06-01", "assets": assets})

    assert response.status_code == 200
    body = response.json()
    assert Decimal(str(body["total_forecast_cost"])) == Decimal("5000")
    bucket = next(row for row in body["yearly_breakdown"] if row["year"] == 2029)
    assert bucket["asset_count"] == 2


def test_calendar_month_at_first_representable_year() -> None:
    client = _build_test_client()

    response = client.post("/calendar/month", json={"year": 1, "month": 1})

    assert response.status_code == 200
    days = response.json()["days"]
    assert days[0]["day"] == "0001-01-01"
    assert all(day["events"] == [] for day in days)
