"""Token-bucket rate limiting, an expiring LRU cache and request-handler wrappers."""

from __future__ import annotations

import threading
import time
import weakref
from collections import OrderedDict
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

__all__ = [
    "Bucket",
    "GCache",
    "NOT_EXPIRE_TTL",
    "RequestContext",
    "TOO_MANY_REQUESTS",
    "client_ip",
    "ip_limiter",
    "limiter",
    "param_limiter",
]

TOO_MANY_REQUESTS = 429
NOT_EXPIRE_TTL = 60 * 60 * 24 * 365
IP_CACHE_MAX = 10000
IP_CACHE_TTL = 5

Clock = Callable[[], float]
Handler = Callable[["RequestContext"], Any]


class Bucket:
    """A token bucket refilled by ``rate`` tokens per elapsed second, up to ``cap``."""

    def __init__(self, cap: int, rate: int, clock: Clock = time.time) -> None:
        if cap <= 0 or rate <= 0:
            raise ValueError("error cap")
        self.cap = cap
        self.rate = rate
        self.tokens = cap
        self._last_time = 0
        self._clock = clock
        self._lock = threading.Lock()

    def is_accept(self) -> bool:
        """Take a token if one is available."""
        with self._lock:
            now = int(self._clock())
            self.tokens = min(self.cap, self.tokens + (now - self._last_time) * self.rate)
            self._last_time = now
            if self.tokens > 0:
                self.tokens -= 1
                return True
            return False


@dataclass
class _Entry:
    value: Any
    expire: float


class GCache:
    """A thread-safe LRU cache whose entries expire after a time to live."""

    def __init__(
        self,
        max_size: int = 0,
        clock: Clock = time.time,
        cleanup_interval: float | None = 1.0,
    ) -> None:
        self.max_size = max_size if max_size > 0 else 0
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()
        if cleanup_interval is not None:
            _start_cleaner(self, cleanup_interval)

    def get(self, key: str) -> Any:
        """Return the value for ``key``, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expire:
                del self._entries[key]
                return None
            self._entries.move_to_end(key, last=False)
            return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store ``value`` for ``ttl`` seconds; a ttl of 0 means a year."""
        with self._lock:
            expire = self._clock() + (NOT_EXPIRE_TTL if ttl == 0 else ttl)
            existed = key in self._entries
            self._entries[key] = _Entry(value, expire)
            self._entries.move_to_end(key, last=False)
            if not existed and self.max_size and len(self._entries) > self.max_size:
                self._entries.popitem(last=True)

    def remove_expired(self) -> None:
        with self._lock:
            now = self._clock()
            for key in [k for k, entry in self._entries.items() if now > entry.expire]:
                del self._entries[key]

    def items(self) -> Iterator[tuple[str, Any]]:
        """Yield live entries from the most to the least recently used."""
        with self._lock:
            now = self._clock()
            snapshot = [
                (key, entry.value)
                for key, entry in self._entries.items()
                if now <= entry.expire
            ]
        yield from snapshot

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


def _start_cleaner(cache: GCache, interval: float) -> None:
    ref = weakref.ref(cache)
    stop = threading.Event()

    def run() -> None:
        while not stop.wait(interval):
            target = ref()
            if target is None:
                return
            target.remove_expired()
            del target

    weakref.finalize(cache, stop.set)
    threading.Thread(target=run, daemon=True).start()


@dataclass
class RequestContext:
    """The parts of an HTTP request and response the limiters work with."""

    query_params: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    remote_addr: str = ""
    status: int | None = None
    body: Any = None
    aborted: bool = False

    def query(self, key: str) -> str:
        return self.query_params.get(key, "")

    def abort_with_status_json(self, status: int, body: Any) -> None:
        self.status = status
        self.body = body
        self.aborted = True


def _header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return ""


def _split_host(address: str) -> str | None:
    if address.startswith("["):
        end = address.find("]")
        if end < 0 or address[end + 1 : end + 2] != ":":
            return None
        return address[1:end]
    if address.count(":") != 1:
        return None
    return address.partition(":")[0]


def client_ip(headers: Mapping[str, str], remote_addr: str) -> str:
    """The client address from X-Forwarded-For, X-Real-Ip or the peer address."""
    ip = _header(headers, "X-Forwarded-For").split(",")[0].strip()
    if ip:
        return ip
    ip = _header(headers, "X-Real-Ip").strip()
    if ip:
        return ip
    host = _split_host(remote_addr.strip())
    return host if host is not None else ""


def limiter(cap: int, rate: int) -> Callable[[Handler], Handler]:
    """Wrap handlers so that all requests share one bucket."""
    bucket = Bucket(cap, rate)

    def decorate(handler: Handler) -> Handler:
        def wrapped(ctx: RequestContext) -> Any:
            if bucket.is_accept():
                return handler(ctx)
            ctx.abort_with_status_json(TOO_MANY_REQUESTS, {"message": "too many requests"})
            return None

        return wrapped

    return decorate


def _limited(bucket: Bucket, key: str, handler: Handler, ctx: RequestContext) -> Any:
    if ctx.query(key) != "" and not bucket.is_accept():
        ctx.abort_with_status_json(
            TOO_MANY_REQUESTS, {"message": "too many requests-param"}
        )
        return None
    return handler(ctx)


def param_limiter(cap: int, rate: int, key: str) -> Callable[[Handler], Handler]:
    """Limit only requests that carry the query parameter ``key``."""
    bucket = Bucket(cap, rate)

    def decorate(handler: Handler) -> Handler:
        def wrapped(ctx: RequestContext) -> Any:
            return _limited(bucket, key, handler, ctx)

        return wrapped

    return decorate


@lru_cache(maxsize=None)
def _default_ip_cache() -> GCache:
    return GCache(max_size=IP_CACHE_MAX)


def ip_limiter(
    cap: int, rate: int, key: str, cache: GCache | None = None
) -> Callable[[Handler], Handler]:
    """Limit requests carrying ``key`` with one bucket per client address."""

    def decorate(handler: Handler) -> Handler:
        def wrapped(ctx: RequestContext) -> Any:
            store = cache if cache is not None else _default_ip_cache()
            ip = client_ip(ctx.headers, ctx.remote_addr)
            bucket = store.get(ip)
            if bucket is None:
                bucket = Bucket(cap, rate)
                store.set(ip, bucket, IP_CACHE_TTL)
            return _limited(bucket, key, handler, ctx)

        return wrapped

    return decorate