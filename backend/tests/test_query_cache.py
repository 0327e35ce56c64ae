import fakeredis
import redis

from app.utils import redis_cache
from app.utils.redis_cache import QueryCache, business_list_key


def test_set_and_get_round_trip():
    cache = QueryCache(fakeredis.FakeStrictRedis(), ttl_seconds=30)
    cache.set("business:1", {"id": 1, "name": "Valley Movers"})
    assert cache.get("business:1") == {"id": 1, "name": "Valley Movers"}


def test_entries_expire_with_ttl():
    fake = fakeredis.FakeStrictRedis()
    cache = QueryCache(fake, ttl_seconds=30)
    cache.set("business:1", {"id": 1})
    assert 0 < fake.ttl("haulers:query:business:1") <= 30


def test_undecodable_entry_is_dropped():
    fake = fakeredis.FakeStrictRedis()
    fake.set("haulers:query:business:2", "{not json")
    cache = QueryCache(fake)

    assert cache.get("business:2") is None
    assert fake.get("haulers:query:business:2") is None


def test_clear_only_matches_pattern():
    fake = fakeredis.FakeStrictRedis()
    cache = QueryCache(fake)
    cache.set(business_list_key({"page": 1}), [1])
    cache.set(business_list_key({"page": 2}), [2])
    cache.set("business:7", {"id": 7})

    assert cache.clear("businesses:*") == 2
    assert cache.get("business:7") == {"id": 7}


def test_list_key_is_order_independent():
    assert business_list_key({"a": 1, "b": None}) == business_list_key({"b": None, "a": 1})


def test_redis_errors_are_misses():
    class DownRedis:
        def get(self, key):
            raise redis.exceptions.ConnectionError()

        def setex(self, *args, **kwargs):
            raise redis.exceptions.ConnectionError()

    cache = QueryCache(DownRedis())
    cache.set("business:1", {"id": 1})
    assert cache.get("business:1") is None


def test_disabled_redis_url_uses_null_client(monkeypatch):
    monkeypatch.setattr(redis_cache, "_redis_client", None)
    monkeypatch.setattr(redis_cache.settings, "REDIS_URL", "disabled")

    client = redis_cache.get_redis_client()
    cache = QueryCache(client)
    cache.set("business:1", {"id": 1})
    assert cache.get("business:1") is None
    assert cache.clear() == 0
