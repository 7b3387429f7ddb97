"""Subscription endpoint tests."""

from datetime import UTC, datetime, timedelta

import pytest

NETFLIX = {
    "name": "Netflix",
    "price": 15.99,
    "frequency": "monthly",
    "startDate": "2024-01-01",
}


def _days_ago(days: int) -> str:
    return (datetime.now(UTC) - timedelta(days=days)).isoformat()


@pytest.fixture
def netflix(client, auth_headers):
    """A monthly Netflix subscription owned by the default test user."""
    response = client.post("/api/v1/subscriptions", headers=auth_headers, json=NETFLIX)
    assert response.status_code == 201
    return response.json()["data"]


def test_create_subscription_scenario(client, auth_headers):
    response = client.post("/api/v1/subscriptions", headers=auth_headers, json=NETFLIX)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    data = body["data"]
    assert data["name"] == "Netflix"
    assert data["price"] == 15.99
    assert data["renewalDate"].startswith("2024-01-31")
    assert data["status"] == "active"
    assert data["userId"] == auth_headers.user_id


def test_create_subscription_defaults(client, auth_headers):
    response = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={"name": "Gym", "price": 30, "startDate": "2024-03-01"},
    )
    data = response.json()["data"]
    assert data["currency"] == "KES"
    assert data["frequency"] == "monthly"
    assert data["category"] == "other"
    assert data["paymentMethod"] == "card"


def test_create_subscription_accepts_snake_case(client, auth_headers):
    response = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={
            "name": "Spotify",
            "price": 9.99,
            "currency": "USD",
            "payment_method": "  BANK ",
            "start_date": "2024-01-01T00:00:00Z",
        },
    )
    assert response.status_code == 201
    assert response.json()["data"]["paymentMethod"] == "bank"


@pytest.mark.parametrize(
    ("frequency", "expected"),
    [
        ("daily", "2024-01-02"),
        ("weekly", "2024-01-08"),
        ("monthly", "2024-01-31"),
        ("yearly", "2024-12-31"),
    ],
)
def test_renewal_offset_per_frequency(client, auth_headers, frequency, expected):
    response = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={
            "name": f"{frequency} plan",
            "price": 1,
            "frequency": frequency,
            "startDate": "2024-01-01",
            "renewalDate": "2030-01-01",
        },
    )
    assert response.status_code == 201
    assert response.json()["data"]["renewalDate"].startswith(expected)


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "N", "price": 1, "startDate": "2024-01-01"},
        {"name": "x" * 101, "price": 1, "startDate": "2024-01-01"},
        {"name": "Negative", "price": -1, "startDate": "2024-01-01"},
        {"name": "Euro", "price": 1, "currency": "EUR", "startDate": "2024-01-01"},
        {"name": "Hourly", "price": 1, "frequency": "hourly", "startDate": "2024-01-01"},
        {"name": "Food", "price": 1, "category": "food", "startDate": "2024-01-01"},
        {"name": "Crypto", "price": 1, "paymentMethod": "crypto", "startDate": "2024-01-01"},
        {"name": "No start", "price": 1},
    ],
)
def test_create_subscription_validation(client, auth_headers, payload):
    response = client.post("/api/v1/subscriptions", headers=auth_headers, json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_subscription_future_start_date(client, auth_headers):
    future = (datetime.now(UTC) + timedelta(days=3)).isoformat()
    response = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={"name": "Later", "price": 1, "startDate": future},
    )
    assert response.status_code == 400
    assert "past" in response.json()["message"]


def test_duplicate_name_conflict(client, auth_headers, netflix):
    response = client.post("/api/v1/subscriptions", headers=auth_headers, json=NETFLIX)
    assert response.status_code == 409
    assert response.json()["success"] is False


def test_same_name_allowed_for_other_owner(client, netflix, other_auth_headers):
    response = client.post("/api/v1/subscriptions", headers=other_auth_headers, json=NETFLIX)
    assert response.status_code == 201


def test_same_name_allowed_after_cancellation(client, auth_headers, netflix):
    client.post(f"/api/v1/subscriptions/{netflix['id']}/cancel", headers=auth_headers)
    response = client.post("/api/v1/subscriptions", headers=auth_headers, json=NETFLIX)
    assert response.status_code == 201


def test_get_subscription(client, auth_headers, netflix):
    response = client.get(f"/api/v1/subscriptions/{netflix['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["id"] == netflix["id"]


def test_get_subscription_not_found(client, auth_headers):
    response = client.get("/api/v1/subscriptions/999999", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Subscription not found"


def test_list_all_subscriptions_is_unscoped(client, auth_headers, other_auth_headers, netflix):
    client.post(
        "/api/v1/subscriptions",
        headers=other_auth_headers,
        json={"name": "Showmax", "price": 5, "startDate": "2024-02-01"},
    )
    response = client.get("/api/v1/subscriptions", headers=auth_headers)
    assert response.status_code == 200
    assert {s["name"] for s in response.json()["data"]} == {"Netflix", "Showmax"}


def test_list_user_subscriptions(client, auth_headers, other_auth_headers, netflix):
    response = client.get(
        f"/api/v1/subscriptions/user/{auth_headers.user_id}", headers=auth_headers
    )
    assert response.status_code == 200
    assert [s["id"] for s in response.json()["data"]] == [netflix["id"]]

    forbidden = client.get(
        f"/api/v1/subscriptions/user/{auth_headers.user_id}", headers=other_auth_headers
    )
    assert forbidden.status_code == 403


def test_update_subscription(client, auth_headers, netflix):
    response = client.put(
        f"/api/v1/subscriptions/{netflix['id']}",
        headers=auth_headers,
        json={
            "name": "Netflix Premium",
            "price": 22.99,
            "frequency": "yearly",
            "category": "entertainment",
            "paymentMethod": "mno",
            "startDate": "2024-02-01",
        },
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Netflix Premium"
    assert data["price"] == 22.99
    assert data["category"] == "entertainment"
    assert data["paymentMethod"] == "mno"
    assert data["renewalDate"].startswith("2025-01-31")
    assert data["renewalDate"] >= data["startDate"]


def test_update_not_found(client, auth_headers):
    response = client.put(
        "/api/v1/subscriptions/999999",
        headers=auth_headers,
        json={"name": "Ghost", "price": 1, "startDate": "2024-01-01"},
    )
    assert response.status_code == 404


def test_non_owner_cannot_modify(client, auth_headers, other_auth_headers, netflix):
    sub_id = netflix["id"]

    update = client.put(
        f"/api/v1/subscriptions/{sub_id}",
        headers=other_auth_headers,
        json={"name": "Hijacked", "price": 0, "startDate": "2024-01-01"},
    )
    cancel = client.post(f"/api/v1/subscriptions/{sub_id}/cancel", headers=other_auth_headers)
    delete = client.delete(f"/api/v1/subscriptions/{sub_id}", headers=other_auth_headers)

    assert update.status_code == 403
    assert cancel.status_code == 403
    assert delete.status_code == 403

    current = client.get(f"/api/v1/subscriptions/{sub_id}", headers=auth_headers).json()["data"]
    assert current["name"] == "Netflix"
    assert current["price"] == 15.99
    assert current["status"] == "active"


def test_cancel_subscription(client, auth_headers, netflix, outbox):
    response = client.post(f"/api/v1/subscriptions/{netflix['id']}/cancel", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Subscription cancelled successfully"
    assert body["data"]["status"] == "cancelled"
    assert outbox.subjects[-1] == "Subscription Cancelled: Netflix"


def test_cancel_survives_mail_failure(client, auth_headers, netflix, outbox):
    outbox.fail = True
    response = client.post(f"/api/v1/subscriptions/{netflix['id']}/cancel", headers=auth_headers)
    assert response.status_code == 200

    current = client.get(f"/api/v1/subscriptions/{netflix['id']}", headers=auth_headers)
    assert current.json()["data"]["status"] == "cancelled"


def test_cancelled_status_survives_update(client, auth_headers, netflix):
    client.post(f"/api/v1/subscriptions/{netflix['id']}/cancel", headers=auth_headers)
    response = client.put(
        f"/api/v1/subscriptions/{netflix['id']}",
        headers=auth_headers,
        json={"name": "Netflix", "price": 15.99, "startDate": _days_ago(1)},
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"


def test_delete_subscription(client, auth_headers, netflix):
    response = client.delete(f"/api/v1/subscriptions/{netflix['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Subscription deleted successfully"

    missing = client.get(f"/api/v1/subscriptions/{netflix['id']}", headers=auth_headers)
    assert missing.status_code == 404


def test_upcoming_renewals(client, auth_headers, other_auth_headers, netflix):
    upcoming = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={"name": "Spotify", "price": 9.99, "startDate": _days_ago(2)},
    ).json()["data"]
    cancelled = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={"name": "Hulu", "price": 7.99, "startDate": _days_ago(2)},
    ).json()["data"]
    client.post(f"/api/v1/subscriptions/{cancelled['id']}/cancel", headers=auth_headers)

    response = client.get(
        f"/api/v1/subscriptions/user/{auth_headers.user_id}/upcoming-renewals",
        headers=auth_headers,
    )
    assert response.status_code == 200
    # Netflix renewed back in 2024 and Hulu is cancelled
    assert [s["id"] for s in response.json()["data"]] == [upcoming["id"]]

    forbidden = client.get(
        f"/api/v1/subscriptions/user/{auth_headers.user_id}/upcoming-renewals",
        headers=other_auth_headers,
    )
    assert forbidden.status_code == 403


@pytest.mark.parametrize("name", ["  X  ", "   ", " " + "x" * 101])
def test_name_length_checked_after_trimming(client, auth_headers, name):
    response = client.post(
        "/api/v1/subscriptions",
        headers=auth_headers,
        json={"name": name, "price": 1, "startDate": "2024-01-01"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_name_is_trimmed(client, auth_headers, netflix):
    response = client.put(
        f"/api/v1/subscriptions/{netflix['id']}",
        headers=auth_headers,
        json={"name": "  Netflix HD  ", "price": 15.99, "startDate": "2024-01-01"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Netflix HD"


def test_padded_short_name_rejected_on_update(client, auth_headers, netflix):
    response = client.put(
        f"/api/v1/subscriptions/{netflix['id']}",
        headers=auth_headers,
        json={"name": " N ", "price": 15.99, "startDate": "2024-01-01"},
    )
    assert response.status_code == 400

    current = client.get(f"/api/v1/subscriptions/{netflix['id']}", headers=auth_headers)
    assert current.json()["data"]["name"] == "Netflix"
