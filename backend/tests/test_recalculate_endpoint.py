import pytest

from app.models import UserRole

URL = "/api/v1/bookings/recalculate"

DETAILS = {
    "mover_team": 2,
    "hourly_rate_is_team_rate": True,
    "packing_help": "none",
    "breakdown": {"destination_fee_cents": 4600, "packing_cost_cents": 9900},
}


@pytest.fixture
def scenario(make_profile, make_business, make_booking):
    customer = make_profile()
    owner = make_profile(UserRole.PROVIDER)
    business = make_business(owner)
    booking = make_booking(
        business,
        customer,
        hourly_rate_cents=15000,
        additional_fees_cents=1000,
        total_price_cents=1,
        service_details=dict(DETAILS),
    )
    return {"customer": customer, "owner": owner, "business": business, "booking": booking}


def test_requires_authentication(client, scenario):
    res = client.post(URL, json={"bookingId": scenario["booking"].id})
    assert res.status_code == 401
    assert res.json()["detail"] == "Unauthorized"


def test_rejects_invalid_token(client, scenario):
    res = client.post(
        URL,
        json={"bookingId": scenario["booking"].id},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert res.status_code == 401


def test_inactive_profile_is_unauthorized(client, scenario, make_profile, auth_header):
    inactive = make_profile(UserRole.ADMIN, is_active=False)
    res = client.post(URL, json={"bookingId": scenario["booking"].id}, headers=auth_header(inactive))
    assert res.status_code == 401


def test_missing_booking_id(client, scenario, auth_header):
    res = client.post(URL, json={}, headers=auth_header(scenario["owner"]))
    assert res.status_code == 400
    assert res.json()["detail"] == "bookingId is required"


def test_unknown_booking(client, scenario, auth_header):
    res = client.post(URL, json={"bookingId": 9999}, headers=auth_header(scenario["owner"]))
    assert res.status_code == 404


def test_customer_cannot_recalculate(client, scenario, auth_header):
    res = client.post(
        URL,
        json={"bookingId": scenario["booking"].id},
        headers=auth_header(scenario["customer"]),
    )
    assert res.status_code == 403


def test_other_provider_cannot_recalculate(client, scenario, make_profile, auth_header):
    stranger = make_profile(UserRole.PROVIDER)
    res = client.post(URL, json={"bookingId": scenario["booking"].id}, headers=auth_header(stranger))
    assert res.status_code == 403


def test_owner_recalculates_and_persists(client, db_session, scenario, auth_header):
    booking = scenario["booking"]
    res = client.post(URL, json={"bookingId": booking.id}, headers=auth_header(scenario["owner"]))

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["totals"]["base_cents"] == 45000
    assert body["totals"]["destination_cents"] == 4600
    # Packing is in the breakdown but was not requested.
    assert body["totals"]["packing_cents"] == 0
    assert body["totals"]["total_due_cents"] == 50600
    assert body["booking"]["base_price_cents"] == 49600
    assert body["booking"]["total_price_cents"] == 50600

    db_session.refresh(booking)
    assert booking.base_price_cents == 49600
    assert booking.total_price_cents == 50600


def test_admin_can_recalculate_via_query_param(client, scenario, make_profile, auth_header):
    admin = make_profile(UserRole.ADMIN)
    res = client.post(f"{URL}?bookingId={scenario['booking'].id}", headers=auth_header(admin))

    assert res.status_code == 200
    assert res.json()["totals"]["total_due_cents"] == 50600


def test_recalculate_is_idempotent(client, scenario, auth_header):
    headers = auth_header(scenario["owner"])
    payload = {"bookingId": scenario["booking"].id}

    first = client.post(URL, json=payload, headers=headers).json()
    second = client.post(URL, json=payload, headers=headers).json()
    assert first["totals"] == second["totals"]


def test_totals_preview_does_not_write(client, db_session, scenario, auth_header):
    booking = scenario["booking"]
    res = client.get(
        f"/api/v1/bookings/{booking.id}/totals",
        headers=auth_header(scenario["customer"]),
    )

    assert res.status_code == 200
    assert res.json()["total_due_cents"] == 50600
    db_session.refresh(booking)
    assert booking.total_price_cents == 1
