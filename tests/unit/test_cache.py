"""Unit tests for the health result cache"""

from datetime import date
from decimal import Decimal
from budget_gateway.domain.models import ReservePolicy
from budget_gateway.infrastructure.cache import HealthCache, input_hash


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_input_hash_is_stable_and_sensitive():
    payload = {
        "events": [{"date": "2026-10-27", "amount": "400"}],
        "current_balance": Decimal("1000"),
        "today": date(2026, 10, 22),
        "reserve_policy": ReservePolicy("fixed", Decimal("200")),
    }
    reordered = dict(reversed(list(payload.items())))
    changed = dict(payload, current_balance=Decimal("999.99"))

    assert input_hash(payload) == input_hash(reordered)
    assert input_hash(payload) != input_hash(changed)
    assert len(input_hash(payload)) == 64


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = HealthCache(ttl_seconds=60, max_entries=10, clock=clock)
    key = ("hh-1", 10, 2026, "abc")

    cache.put(key, "result")
    clock.now = 59
    assert cache.get(key) == "result"
    clock.now = 60
    assert cache.get(key) is None
    assert len(cache) == 0


def test_least_recently_used_entry_is_evicted():
    cache = HealthCache(ttl_seconds=60, max_entries=2, clock=FakeClock())
    first, second, third = ("hh-1", 10, 2026, "a"), ("hh-2", 10, 2026, "b"), ("hh-3", 10, 2026, "c")

    cache.put(first, 1)
    cache.put(second, 2)
    cache.get(first)
    cache.put(third, 3)

    assert cache.get(first) == 1
    assert cache.get(second) is None
    assert cache.get(third) == 3


def test_invalidate_household_drops_only_its_entries():
    cache = HealthCache(ttl_seconds=60, max_entries=10, clock=FakeClock())
    cache.put(("hh-1", 10, 2026, "a"), 1)
    cache.put(("hh-1", 11, 2026, "b"), 2)
    cache.put(("hh-2", 10, 2026, "c"), 3)

    assert cache.invalidate_household("hh-1") == 2
    assert len(cache) == 1
    assert cache.get(("hh-2", 10, 2026, "c")) == 3
