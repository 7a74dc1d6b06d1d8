from datetime import datetime, timedelta

import pytest

from app.utils.dates import utcnow
from conftest import API, auth_headers, today_at


@pytest.fixture
def staff_headers(make_user):
    return auth_headers(make_user("showroom"))


def test_summary_counts_unique_phones_and_rounds_half_up(client, seed, staff_headers):
    for phone in ("p1", "p2", "p2", "p3", "p4"):
        seed.visit("Gulshan", phone)
    seed.feedback("Gulshan", "p1")
    seed.feedback("Gulshan", "p2")
    for phone in ("q1", "q2", "q3"):
        seed.visit("Banani", phone)
    seed.feedback("Banani", "q1")
    seed.feedback("Banani", "q1")
    seed.feedback("Banani", "q2")

    response = client.get(f"{API}/analytics/showroom-summary", headers=staff_headers)

    assert response.status_code == 200
    assert response.headers["cache-control"] == "private, max-age=30"
    body = response.json()
    items = {item["showroom"]: item for item in body["items"]}
    assert items["Gulshan"]["uniqueCustomers"] == 4
    assert items["Gulshan"]["uniqueFeedbacks"] == 2
    assert items["Gulshan"]["accuracy"] == 50
    assert items["Banani"]["accuracy"] == 67
    assert items["Banani"]["performance"] == items["Banani"]["accuracy"]
    assert items["Banani"]["status"] == "Active"
    # (50 + 67) / 2 = 58.5 -> 59
    assert body["avgAccuracy"] == 59
    assert body["avgPerformance"] == 59


def test_summary_feedback_only_showroom_has_zero_accuracy(client, seed, staff_headers):
    seed.feedback("Uttara", "x1")

    body = client.get(f"{API}/analytics/showroom-summary", headers=staff_headers).json()

    assert body["items"] == [{
        "showroom": "Uttara",
        "uniqueCustomers": 0,
        "uniqueFeedbacks": 1,
        "lastActivity": None,
        "accuracy": 0,
        "performance": 0,
        "status": "Inactive",
    }]


def test_summary_hides_inactive_registry_showrooms(client, seed, staff_headers):
    seed.showroom("Gulshan")
    seed.showroom("Closed", active=False, status="Inactive")
    seed.showroom("Legacy", active=False, status=None)
    seed.visit("Gulshan", "p1")
    seed.visit("Closed", "p2")
    seed.visit("Legacy", "p3")
    seed.visit("Unknown", "p4")

    body = client.get(f"{API}/analytics/showroom-summary", headers=staff_headers).json()

    assert sorted(item["showroom"] for item in body["items"]) == ["Gulshan", "Legacy"]


def test_summary_default_window_is_trailing_thirty_days(client, seed, staff_headers):
    seed.visit("Gulshan", "recent")
    seed.visit("Gulshan", "edge", at=today_at(1, days=-29))
    seed.visit("Gulshan", "old", at=today_at(23, days=-31))

    body = client.get(f"{API}/analytics/showroom-summary", headers=staff_headers).json()

    assert body["items"][0]["uniqueCustomers"] == 2


def test_summary_invalid_range_matches_nothing(client, seed, staff_headers):
    seed.visit("Gulshan", "p1")

    body = client.get(
        f"{API}/analytics/showroom-summary", params={"start": "not-a-date"}, headers=staff_headers
    ).json()

    assert body["items"] == []
    assert body["from"] is None
    assert body["to"] is not None
    assert body["avgAccuracy"] == 0


def test_summary_accepts_from_and_to_aliases(client, seed, staff_headers):
    seed.visit("Gulshan", "yesterday", at=today_at(10, days=-1))
    seed.visit("Gulshan", "today")

    day = today_at(0).isoformat() + "Z"
    body = client.get(
        f"{API}/analytics/showroom-summary", params={"from": day}, headers=staff_headers
    ).json()

    assert body["items"][0]["uniqueCustomers"] == 1


def test_report_groups_by_showroom_and_category(client, seed, staff_headers):
    seed.visit("Gulshan", "p1", category="Sofa")
    seed.visit("Gulshan", "p2", category="Bed")
    seed.feedback("Gulshan", "p1", category="Sofa")

    body = client.get(f"{API}/analytics/showroom-report", headers=staff_headers).json()

    rows = {(row["showroom"], row["category"]): row for row in body["rows"]}
    assert rows[("Gulshan", "Sofa")]["customerCount"] == 1
    assert rows[("Gulshan", "Sofa")]["feedbackCount"] == 1
    assert rows[("Gulshan", "Bed")]["feedbackCount"] == 0


def test_report_category_filter_collapses_to_showroom(client, seed, staff_headers):
    seed.visit("Gulshan", "p1", category="Sofa")
    seed.visit("Gulshan", "p2", category="SOFA")
    seed.visit("Gulshan", "p3", category="Bed")
    seed.feedback("Gulshan", "p1", category="sofa")

    body = client.get(
        f"{API}/analytics/showroom-report", params={"category": "Sofa", "showroom": "gulshan"},
        headers=staff_headers,
    ).json()

    assert body["rows"] == [
        {"showroom": "Gulshan", "category": "Sofa", "customerCount": 2, "feedbackCount": 1}
    ]


def test_daily_trend_only_lists_days_with_data(client, seed, staff_headers):
    seed.visit("Gulshan", "p3", at=today_at(10, days=-1))
    seed.visit("Gulshan", "p1")
    seed.visit("Gulshan", "p2")
    seed.visit("Banani", "b1")
    seed.feedback("Gulshan", "p1")
    seed.sale("Gulshan", 100.5)
    seed.sale("Gulshan", 50)

    body = client.get(
        f"{API}/analytics/showroom-daily", params={"showroom": "Gulshan"}, headers=staff_headers
    ).json()

    assert [day["visitors"] for day in body["days"]] == [1, 2]
    assert body["days"][0]["accuracy"] == 0
    assert body["days"][1]["accuracy"] == 50
    assert body["days"][1]["sales"] == pytest.approx(150.5)
    assert body["days"][0]["day"] < body["days"][1]["day"]
    assert body["totalVisitors"] == 3
    # Trung bình chỉ tính các ngày có độ chính xác khác 0.
    assert body["avgAccuracy"] == 50


def test_analytics_requires_token(client):
    response = client.get(f"{API}/analytics/showroom-summary")

    assert response.status_code == 401
    assert response.json() == {"message": "No token"}


def test_analytics_rejects_suspended_user(client, make_user):
    user = make_user("officeAdmin", status="Suspend")

    response = client.get(f"{API}/analytics/showroom-daily", headers=auth_headers(user))

    assert response.status_code == 403


def test_summary_window_excludes_end_bound(client, seed, staff_headers):
    seed.visit("Gulshan", "start", at=datetime(2026, 3, 1, 0, 0))
    seed.visit("Gulshan", "end", at=datetime(2026, 3, 2, 0, 0))

    body = client.get(
        f"{API}/analytics/showroom-summary",
        params={"start": "2026-03-01T00:00:00Z", "end": "2026-03-02T00:00:00Z"},
        headers=staff_headers,
    ).json()

    assert [item["uniqueCustomers"] for item in body["items"]] == [1]


def test_summary_of_empty_range(client, staff_headers):
    body = client.get(f"{API}/analytics/showroom-summary", headers=staff_headers).json()

    assert body["items"] == []
    assert body["avgAccuracy"] == 0
    assert body["avgPerformance"] == 0


def test_summary_marks_stale_showroom_inactive(client, seed, staff_headers):
    seed.visit("Gulshan", "p1", at=utcnow() - timedelta(hours=30))

    item = client.get(f"{API}/analytics/showroom-summary", headers=staff_headers).json()["items"][0]

    assert item["lastActivity"] is not None
    assert item["status"] == "Inactive"


def test_report_without_filter_keeps_literal_categories_apart(client, seed, staff_headers):
    seed.visit("Gulshan", "p1", category="Sofa")
    seed.feedback("Gulshan", "p1", category="sofa")

    body = client.get(f"{API}/analytics/showroom-report", headers=staff_headers).json()

    assert body["rows"] == [
        {"showroom": "Gulshan", "category": "Sofa", "customerCount": 1, "feedbackCount": 0},
        {"showroom": "Gulshan", "category": "sofa", "customerCount": 0, "feedbackCount": 1},
    ]


def test_report_hides_inactive_registry_showrooms(client, seed, staff_headers):
    seed.showroom("Gulshan")
    seed.showroom("Closed", active=False, status="Inactive")
    seed.visit("Gulshan", "p1")
    seed.visit("Closed", "p2")

    body = client.get(f"{API}/analytics/showroom-report", headers=staff_headers).json()

    assert [row["showroom"] for row in body["rows"]] == ["Gulshan"]


def test_report_filter_ignores_case_beyond_ascii(client, seed, staff_headers):
    seed.visit("Đà Nẵng", "p1", category="Ghế")
    seed.visit("Gulshan", "p2", category="Ghế")

    body = client.get(
        f"{API}/analytics/showroom-report", params={"showroom": "đà nẵng", "category": "GHẾ"},
        headers=staff_headers,
    ).json()

    assert [(row["showroom"], row["customerCount"]) for row in body["rows"]] == [("Đà Nẵng", 1)]
