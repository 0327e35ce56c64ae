from app.models import UserRole
from app.utils.redis_cache import business_key


def test_list_only_verified_best_rated_first(client, make_profile, make_business):
    owner = make_profile(UserRole.PROVIDER)
    make_business(owner, name="Okay Movers", rating_avg=3.9)
    make_business(owner, name="Great Movers", rating_avg=4.8)
    make_business(owner, name="New Movers", status="pending")

    res = client.get("/api/v1/businesses/")

    assert res.status_code == 200
    assert [b["name"] for b in res.json()] == ["Great Movers", "Okay Movers"]


def test_list_filters_by_city_and_query(client, make_profile, make_business):
    owner = make_profile(UserRole.PROVIDER)
    make_business(owner, name="Valley Movers", city="Van Nuys")
    make_business(owner, name="Beach Haulers", city="Santa Monica", description="Piano specialists")

    by_city = client.get("/api/v1/businesses/", params={"city": "santa monica"}).json()
    by_text = client.get("/api/v1/businesses/", params={"q": "piano"}).json()

    assert [b["name"] for b in by_city] == ["Beach Haulers"]
    assert [b["name"] for b in by_text] == ["Beach Haulers"]


def test_list_is_cached(client, db_session, make_profile, make_business):
    owner = make_profile(UserRole.PROVIDER)
    make_business(owner, name="Cached Movers")

    first = client.get("/api/v1/businesses/").json()
    make_business(owner, name="Later Movers")
    second = client.get("/api/v1/businesses/").json()

    assert second == first


def test_read_business_detail(client, query_cache, make_profile, make_business):
    owner = make_profile(UserRole.PROVIDER)
    business = make_business(owner, hourly_rate_cents=14000, phone="555-0199")

    res = client.get(f"/api/v1/businesses/{business.id}")

    assert res.status_code == 200
    assert res.json()["hourly_rate_cents"] == 14000
    assert query_cache.get(business_key(business.id))["phone"] == "555-0199"
    assert client.get("/api/v1/businesses/9999").status_code == 404


def test_read_business_detail_hides_unverified(client, query_cache, make_profile, make_business):
    owner = make_profile(UserRole.PROVIDER)
    business = make_business(owner, status="pending", verified=False)

    res = client.get(f"/api/v1/businesses/{business.id}")

    assert res.status_code == 404
    assert query_cache.get(business_key(business.id)) is None


def test_owner_update_invalidates_cache(client, query_cache, make_profile, make_business, auth_header):
    owner = make_profile(UserRole.PROVIDER)
    business = make_business(owner, name="Old Name")
    client.get("/api/v1/businesses/")
    client.get(f"/api/v1/businesses/{business.id}")

    res = client.patch(
        f"/api/v1/businesses/{business.id}",
        json={"name": "New Name"},
        headers=auth_header(owner),
    )

    assert res.status_code == 200
    assert query_cache.get(business_key(business.id)) is None
    assert [b["name"] for b in client.get("/api/v1/businesses/").json()] == ["New Name"]


def test_update_forbidden_for_non_owner(client, make_profile, make_business, auth_header):
    owner = make_profile(UserRole.PROVIDER)
    business = make_business(owner)
    res = client.patch(
        f"/api/v1/businesses/{business.id}",
        json={"name": "Hijacked"},
        headers=auth_header(make_profile(UserRole.PROVIDER)),
    )
    assert res.status_code == 403
