from datetime import timedelta
from unittest import mock

import pytest
import requests

from app.models import MessageSettings, ShowroomCustomer
from app.utils.dates import local_date
from conftest import API, auth_headers, today_at


@pytest.fixture
def staff_headers(make_user):
    return auth_headers(make_user("showroom"))


# --- Danh mục & showroom ---

def test_category_lifecycle(client, admin_headers):
    created = client.post(f"{API}/create-categories", json={"name": "Sofa"}, headers=admin_headers)
    assert created.status_code == 201
    category_id = created.json()["category"]["id"]

    assert client.post(f"{API}/create-categories", json={"name": "Sofa"}, headers=admin_headers).status_code == 409

    public = client.get(f"{API}/categories-public")
    assert public.status_code == 200
    assert public.headers["cache-control"].startswith("public, max-age=300")
    assert [c["name"] for c in public.json()["categories"]] == ["Sofa"]

    renamed = client.put(f"{API}/categories/{category_id}", json={"name": "Bed"}, headers=admin_headers)
    assert renamed.json()["category"]["name"] == "Bed"
    assert client.delete(f"{API}/categories/{category_id}", headers=admin_headers).json() == {"message": "Deleted"}


def test_public_showrooms_only_lists_active(client, admin_headers):
    client.post(f"{API}/showrooms", json={"name": "Gulshan"}, headers=admin_headers)
    closed = client.post(f"{API}/showrooms", json={"name": "Closed"}, headers=admin_headers).json()["showroom"]
    client.put(f"{API}/showrooms/{closed['id']}", json={"active": False}, headers=admin_headers)

    body = client.get(f"{API}/showrooms-public").json()

    assert [s["name"] for s in body["showrooms"]] == ["Gulshan"]
    assert client.post(f"{API}/showrooms", json={"name": "Gulshan"}, headers=admin_headers).status_code == 409


# --- Phản hồi ---

def test_public_feedback_submission_and_listing(client, staff_headers, admin_headers):
    payload = {"name": "Karim", "email": "k@example.com", "phone": "01711", "message": "Great", "showroom": "Gulshan"}
    assert client.post(f"{API}/feedback", json=payload).status_code == 201
    assert client.post(f"{API}/feedback", json={**payload, "showroom": "Banani"}).status_code == 201

    listed = client.get(f"{API}/feedbacks", params={"showroom": "Gulshan"}, headers=staff_headers).json()
    assert len(listed["feedbacks"]) == 1
    assert "total" not in listed

    paged = client.get(f"{API}/feedbacks", params={"page": 1, "limit": 1}, headers=staff_headers).json()
    assert paged["total"] == 2
    assert paged["limit"] == 1
    assert paged["feedbacks"][0]["showroom"] == "Banani"

    feedback_id = listed["feedbacks"][0]["id"]
    assert client.put(
        f"{API}/feedbacks/{feedback_id}/status", json={"status": "archived"}, headers=admin_headers
    ).status_code == 400
    reviewed = client.put(f"{API}/feedbacks/{feedback_id}/status", json={"status": "reviewed"}, headers=admin_headers)
    assert reviewed.json()["feedback"]["status"] == "reviewed"


def test_feedback_requires_contact_fields(client):
    response = client.post(f"{API}/feedback", json={"name": "Karim", "message": "Hi"})

    assert response.status_code == 400
    assert "required" in response.json()["message"]


# --- Khách hàng showroom ---

def _visit_payload(**overrides):
    return {
        "customerName": "Karim",
        "phoneNumber": "01711-000000",
        "category": "Sofa",
        "showroomBranch": "Gulshan",
        **overrides,
    }


def test_customer_is_recorded_and_sms_sent(client, db_session, staff_headers):
    db_session.add(MessageSettings(sms_provider="greenweb", sms_api_key="key", feedback_url="https://fb.example"))
    db_session.commit()
    fake = mock.Mock(ok=True, status_code=200, text="Ok: SMS Sent")

    with mock.patch("app.services.sms.requests.get", return_value=fake) as get:
        response = client.post(f"{API}/showroom/customers", json=_visit_payload(), headers=staff_headers)

    assert response.status_code == 201
    assert response.json()["sms"]["ok"] is True
    params = get.call_args.kwargs["params"]
    assert params["to"] == "8801711000000"
    assert "https://fb.example" in params["message"]


def test_customer_is_kept_when_sms_fails(client, db_session, staff_headers):
    db_session.add(MessageSettings(sms_provider="bulksmsbd", sms_api_key="key"))
    db_session.commit()

    with mock.patch("app.services.sms.requests.post", side_effect=requests.exceptions.ConnectionError("down")):
        response = client.post(f"{API}/showroom/customers", json=_visit_payload(), headers=staff_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Customer recorded, SMS not sent"
    assert body["sms"]["ok"] is False
    assert body["sms"]["provider"] == "bulksmsbd"
    assert db_session.query(ShowroomCustomer).count() == 1


def test_customer_without_sms_key_reports_error(client, staff_headers):
    response = client.post(f"{API}/showroom/customers", json=_visit_payload(), headers=staff_headers)

    assert response.status_code == 201
    assert "SMS_API_KEY" in response.json()["sms"]["error"]


def test_customer_requires_fields(client, staff_headers):
    response = client.post(f"{API}/showroom/customers", json={"customerName": "X"}, headers=staff_headers)

    assert response.status_code == 400


def test_customer_list_filters_and_pages(client, seed, staff_headers):
    seed.visit("Gulshan", "a")
    seed.visit("Gulshan", "b", at=today_at(10, days=-1))
    seed.visit("Banani", "c")

    response = client.get(f"{API}/showroom/customers", params={"showroom": "Gulshan"}, headers=staff_headers)
    assert response.headers["cache-control"] == "private, max-age=15"
    assert len(response.json()["customers"]) == 2

    yesterday = (local_date() - timedelta(days=1)).isoformat()
    dated = client.get(
        f"{API}/showroom/customers", params={"date": yesterday}, headers=staff_headers
    ).json()
    assert [c["phoneNumber"] for c in dated["customers"]] == ["b"]

    paged = client.get(f"{API}/showroom/customers", params={"page": 2, "limit": 2}, headers=staff_headers).json()
    assert paged["total"] == 3
    assert len(paged["customers"]) == 1

    assert client.get(
        f"{API}/showroom/customers", params={"date": "yesterday"}, headers=staff_headers
    ).status_code == 400


def test_customer_update_and_delete(client, seed, staff_headers):
    customer = seed.visit("Gulshan", "a")

    updated = client.put(
        f"{API}/showroom/customers/{customer.id}", json={"status": "Follow-up", "notes": "Call back"},
        headers=staff_headers,
    )
    assert updated.json()["customer"]["status"] == "Follow-up"
    assert client.put(
        f"{API}/showroom/customers/{customer.id}", json={"status": "Maybe"}, headers=staff_headers
    ).status_code == 400

    assert client.delete(f"{API}/showroom/customers/{customer.id}", headers=staff_headers).status_code == 200
    assert client.get(f"{API}/showroom/customers/{customer.id}", headers=staff_headers).status_code == 404


# --- Doanh số ---

def test_sale_with_date_is_pinned_to_local_midnight(client, staff_headers):
    response = client.post(
        f"{API}/sales", json={"showroomBranch": "Gulshan", "amount": 2500, "date": "2026-01-05"},
        headers=staff_headers,
    )

    assert response.status_code == 201
    # 00:00 tại Asia/Dhaka (GMT+6).
    assert response.json()["sale"]["createdAt"].startswith("2026-01-04T18:00:00")


@pytest.mark.parametrize("amount", ["100", None, True])
def test_sale_requires_numeric_amount(client, staff_headers, amount):
    response = client.post(f"{API}/sales", json={"showroomBranch": "Gulshan", "amount": amount}, headers=staff_headers)

    assert response.status_code == 400


def test_sales_list_defaults_to_recent_window(client, seed, staff_headers):
    seed.sale("Gulshan", 10)
    seed.sale("Gulshan", 20, at=today_at(10, days=-45))
    seed.sale("Banani", 30)

    body = client.get(f"{API}/sales", params={"showroom": "Gulshan"}, headers=staff_headers).json()

    assert [item["amount"] for item in body["items"]] == [10]


# --- Cấu hình SMS ---

def test_message_settings_roundtrip(client, admin_headers):
    assert client.get(f"{API}/message-settings", headers=admin_headers).json()["settings"]["smsProvider"] == "greenweb"

    saved = client.put(
        f"{API}/message-settings", json={"smsProvider": "SMSNETBD", "smsApiKey": "k", "feedbackUrl": "https://x"},
        headers=admin_headers,
    )
    assert saved.json()["settings"]["smsProvider"] == "smsnetbd"
    assert client.put(
        f"{API}/message-settings", json={"smsProvider": "twilio"}, headers=admin_headers
    ).status_code == 400


def test_message_settings_are_admin_only(client, make_user):
    response = client.get(f"{API}/message-settings", headers=auth_headers(make_user("officeAdmin")))

    assert response.status_code == 403
