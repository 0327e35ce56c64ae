from app.models import UserRole


def test_tier_quote_requires_crew_and_hours(client):
    res = client.post("/api/v1/movers/quote", json={"crewSize": 2})
    assert res.status_code == 400
    assert res.json()["detail"] == "Missing fields"


def test_tier_quote_uses_default_table(client):
    res = client.post(
        "/api/v1/movers/quote",
        json={"crewSize": 2, "estimatedHours": 4, "distanceMiles": 20},
    )

    assert res.status_code == 200
    data = res.json()
    assert data["success"] is True
    assert data["price_total_cents"] == 43530
    assert data["breakdown"]["hourly_cents"] == 20000
    assert data["suggested_deposit_cents"] == 4353


def test_tier_quote_uses_provider_tiers(client, make_profile, make_business, make_provider_config):
    business = make_business(make_profile(UserRole.PROVIDER))
    make_provider_config(
        business,
        tiers=[{"crew_size": 3, "min_hours": 3, "base_rate_cents": 30000, "hourly_rate_cents": 12000}],
    )
    res = client.post(
        "/api/v1/movers/quote",
        json={"providerId": business.id, "crewSize": 3, "estimatedHours": 5},
    )

    assert res.status_code == 200
    assert res.json()["price_total_cents"] == 30000 + 24000


def test_calculate_quote_without_provider(client):
    res = client.post(
        "/api/v1/movers/quotes/calculate",
        json={
            "pickup_address": "100 A St, Los Angeles, CA 91605",
            "dropoff_address": "200 B St, Los Angeles, CA 91610",
            "move_size": "2-bedroom",
            "hourly_rate": 140,
            "mover_team": 2,
        },
    )

    assert res.status_code == 200
    data = res.json()
    assert data["total_cents"] == 42000
    assert data["breakdown"]["base_hourly_cents"] == 42000
    assert data["service_details"]["hourly_rate_is_team_rate"] is True
    assert data["service_details"]["breakdown"]["total_cents"] == 42000


def test_calculate_quote_applies_provider_policies(client, make_profile, make_business, make_provider_config):
    business = make_business(make_profile(UserRole.PROVIDER))
    make_provider_config(
        business,
        policies={"stairs": {"included": False, "per_flight_cents": 2500}},
        tiers=[{"crew_size": 2, "min_hours": 2}],
    )
    res = client.post(
        "/api/v1/movers/quotes/calculate",
        json={
            "business_id": business.id,
            "pickup_address": "100 A St, CA 91605",
            "dropoff_address": "200 B St, CA 91610",
            "hourly_rate": 150,
            "stairs_flights": 2,
        },
    )

    assert res.status_code == 200
    data = res.json()
    assert data["base_hours"] == 2
    assert data["base_hourly_cents"] == 30000
    assert data["stairs_cents"] == 5000
    assert data["total_cents"] == 35000


def test_calculate_quote_validates_rate_bounds(client):
    res = client.post("/api/v1/movers/quotes/calculate", json={"hourly_rate": 50})
    assert res.status_code == 422
