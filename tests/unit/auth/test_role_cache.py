from __future__ import annotations

import threading

from propdesk.auth.role_cache import RoleCacheRegistry, UserRoleCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _Fetcher:
    def __init__(self, roles: dict[str, str | None]) -> None:
        self.roles = roles
        self.calls: list[str] = []

    def __call__(self, user_id: str) -> str | None:
        self.calls.append(user_id)
        return self.roles.get(user_id)


def test_role_is_cached_until_ttl_expires():
    clock = _Clock()
    fetcher = _Fetcher({"u1": "admin"})
    cache = UserRoleCache(fetch_role=fetcher, ttl_seconds=300, clock=clock)
    cache.bind("u1")

    assert cache.get_role() == "admin"
    clock.now = 299
    assert cache.get_role() == "admin"
    assert fetcher.calls == ["u1"]

    clock.now = 301
    assert cache.get_role() == "admin"
    assert fetcher.calls == ["u1", "u1"]
    assert cache.is_admin
    assert cache.has_role(["admin", "agente"])
    assert not cache.has_role("inquilino")


def test_force_refresh_bypasses_fresh_entry():
    fetcher = _Fetcher({"u1": "agente"})
    cache = UserRoleCache(fetch_role=fetcher, clock=_Clock())
    cache.bind("u1")
    cache.get_role()

    fetcher.roles["u1"] = "admin"
    assert cache.get_role() == "agente"
    assert cache.get_role(force=True) == "admin"


def test_unbound_cache_returns_none_without_fetching():
    fetcher = _Fetcher({})
    cache = UserRoleCache(fetch_role=fetcher)
    assert cache.get_role() is None
    assert fetcher.calls == []
    assert not cache.has_role("admin")


def test_binding_another_identity_resets_state():
    fetcher = _Fetcher({"u1": "admin", "u2": "inquilino"})
    cache = UserRoleCache(fetch_role=fetcher, clock=_Clock())
    cache.bind("u1")
    cache.get_role()

    cache.bind("u1")
    assert cache.role == "admin"

    cache.bind("u2")
    assert cache.role is None
    assert cache.get_role() == "inquilino"
    assert cache.is_tenant

    cache.clear()
    assert cache.role is None
    assert cache.user_id == "u2"


def test_failed_lookup_records_error():
    def _broken(user_id):
        raise RuntimeError("db down")

    cache = UserRoleCache(fetch_role=_broken)
    cache.bind("u1")

    assert cache.get_role() is None
    assert isinstance(cache.error, RuntimeError)
    assert not cache.loading


def test_missing_profile_is_an_error():
    cache = UserRoleCache(fetch_role=_Fetcher({}))
    cache.bind("ghost")

    assert cache.get_role() is None
    assert cache.error is not None


def test_concurrent_callers_share_one_lookup():
    release = threading.Event()
    started = threading.Event()
    calls = []

    def _slow(user_id):
        calls.append(user_id)
        started.set()
        release.wait(timeout=5)
        return "agente"

    cache = UserRoleCache(fetch_role=_slow)
    cache.bind("u1")
    results = []

    def _call():
        results.append(cache.get_role())

    first = threading.Thread(target=_call)
    first.start()
    assert started.wait(timeout=5)
    assert cache.loading

    followers = [threading.Thread(target=_call) for _ in range(4)]
    for thread in followers:
        thread.start()
    release.set()
    for thread in [first, *followers]:
        thread.join(timeout=5)

    assert calls == ["u1"]
    assert results == ["agente"] * 5
    assert not cache.loading


def test_registry_keeps_one_cache_per_user_and_invalidates():
    fetcher = _Fetcher({"u1": "admin", "u2": "agente"})
    registry = RoleCacheRegistry(fetch_role=fetcher, clock=_Clock())

    assert registry.get_role("u1") == "admin"
    assert registry.get_role("u2") == "agente"
    assert registry.get_role("u1") == "admin"
    assert fetcher.calls == ["u1", "u2"]
    assert registry.for_user("u1") is registry.for_user("u1")

    registry.invalidate("u1")
    assert registry.get_role("u1") == "admin"
    assert fetcher.calls == ["u1", "u2", "u1"]
    registry.invalidate("never-seen")


def test_registry_drops_expired_entries_when_new_users_arrive():
    clock = _Clock()
    registry = RoleCacheRegistry(fetch_role=lambda user_id: "inquilino", ttl_seconds=60, clock=clock)
    for index in range(50):
        registry.get_role(f"user-{index}")
    assert len(registry) == 50

    clock.now = 61
    registry.get_role("late-user")
    assert len(registry) == 1


def test_registry_is_bounded_and_evicts_least_recently_used():
    fetcher = _Fetcher({f"user-{index}": "agente" for index in range(5000)})
    registry = RoleCacheRegistry(fetch_role=fetcher, clock=_Clock(), max_entries=3)
    for index in range(5000):
        registry.get_role(f"user-{index}")
    assert len(registry) == 3

    registry.get_role("user-4997")
    registry.get_role("user-0")
    calls_before = len(fetcher.calls)
    registry.get_role("user-4997")
    registry.get_role("user-4998")
    assert len(fetcher.calls) == calls_before + 1
