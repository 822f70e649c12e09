import pytest

from higo.ratelimit import (
    Bucket,
    GCache,
    RequestContext,
    client_ip,
    ip_limiter,
    limiter,
    param_limiter,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def ok_handler(ctx):
    return "ok"


def test_bucket_rejects_bad_arguments():
    with pytest.raises(ValueError, match="error cap"):
        Bucket(0, 1)
    with pytest.raises(ValueError, match="error cap"):
        Bucket(1, 0)


def test_bucket_allows_cap_then_rejects():
    clock = FakeClock()
    bucket = Bucket(3, 1, clock=clock)
    results = [bucket.is_accept() for _ in range(4)]
    assert results == [True, True, True, False]


def test_bucket_refills_over_time():
    clock = FakeClock()
    bucket = Bucket(2, 1, clock=clock)
    while bucket.is_accept():
        pass
    clock.now += 1
    assert bucket.is_accept() is True
    assert bucket.is_accept() is False


def test_bucket_never_exceeds_cap():
    clock = FakeClock()
    bucket = Bucket(2, 5, clock=clock)
    bucket.is_accept()
    clock.now += 100
    bucket.is_accept()
    assert bucket.tokens < bucket.cap


def test_gcache_get_set_and_expiry():
    clock = FakeClock()
    cache = GCache(clock=clock, cleanup_interval=None)
    cache.set("a", "value", 5)
    assert cache.get("a") == "value"
    clock.now += 6
    assert cache.get("a") is None
    assert len(cache) == 0


def test_gcache_zero_ttl_does_not_expire_soon():
    clock = FakeClock()
    cache = GCache(clock=clock, cleanup_interval=None)
    cache.set("a", "value", 0)
    clock.now += 60 * 60 * 24
    assert cache.get("a") == "value"


def test_gcache_evicts_least_recently_used():
    cache = GCache(max_size=2, clock=FakeClock(), cleanup_interval=None)
    cache.set("a", 1, 10)
    cache.set("b", 2, 10)
    cache.get("a")
    cache.set("c", 3, 10)
    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_gcache_overwrite_keeps_size():
    cache = GCache(max_size=2, clock=FakeClock(), cleanup_interval=None)
    cache.set("a", 1, 10)
    cache.set("a", 2, 10)
    assert len(cache) == 1
    assert cache.get("a") == 2


def test_gcache_remove_expired_and_items_order():
    clock = FakeClock()
    cache = GCache(clock=clock, cleanup_interval=None)
    cache.set("old", "x", 1)
    cache.set("a", "y", 100)
    cache.set("b", "z", 100)
    clock.now += 2
    cache.remove_expired()
    assert "old" not in cache
    assert list(cache.items()) == [("b", "z"), ("a", "y")]


def test_request_context_query_and_abort():
    ctx = RequestContext(query_params={"id": "1"})
    assert ctx.query("id") == "1"
    assert ctx.query("missing") == ""
    ctx.abort_with_status_json(429, {"message": "m"})
    assert (ctx.status, ctx.body, ctx.aborted) == (429, {"message": "m"}, True)


@pytest.mark.parametrize(
    "headers, remote, expected",
    [
        ({"X-Forwarded-For": " 10.0.0.1 , 10.0.0.2"}, "127.0.0.1:80", "10.0.0.1"),
        ({"x-real-ip": " 10.0.0.3 "}, "127.0.0.1:80", "10.0.0.3"),
        ({}, "127.0.0.1:8080", "127.0.0.1"),
        ({}, "[::1]:8080", "::1"),
        ({}, "127.0.0.1", ""),
        ({}, "::1", ""),
    ],
)
def test_client_ip(headers, remote, expected):
    assert client_ip(headers, remote) == expected


def test_limiter_rejects_after_cap():
    wrapped = limiter(1, 1)(ok_handler)
    assert wrapped(RequestContext()) == "ok"
    ctx = RequestContext()
    assert wrapped(ctx) is None
    assert ctx.status == 429
    assert ctx.body == {"message": "too many requests"}


def test_param_limiter_only_limits_with_param():
    wrapped = param_limiter(1, 1, "id")(ok_handler)
    assert wrapped(RequestContext(query_params={"id": "1"})) == "ok"
    ctx = RequestContext(query_params={"id": "1"})
    assert wrapped(ctx) is None
    assert ctx.body == {"message": "too many requests-param"}
    assert wrapped(RequestContext()) == "ok"


def test_ip_limiter_separates_clients():
    cache = GCache(max_size=10, cleanup_interval=None)
    wrapped = ip_limiter(1, 1, "id", cache)(ok_handler)
    first = RequestContext(query_params={"id": "1"}, remote_addr="10.0.0.1:1")
    assert wrapped(first) == "ok"
    again = RequestContext(query_params={"id": "1"}, remote_addr="10.0.0.1:2")
    assert wrapped(again) is None
    assert again.status == 429
    other = RequestContext(query_params={"id": "1"}, remote_addr="10.0.0.2:1")
    assert wrapped(other) == "ok"
    assert isinstance(cache.get("10.0.0.1"), Bucket)
    assert wrapped(RequestContext(remote_addr="10.0.0.1:3")) == "ok"