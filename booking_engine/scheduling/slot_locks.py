"""
In-process locks keyed by (provider, date).

Checking a slot and then writing a booking is two steps. Holding the
lock for every provider/day a write touches makes the pair atomic for
threads sharing one lock registry. Locks are always taken in sorted
key order so two carts touching the same days cannot deadlock.
"""

import threading
from contextlib import contextmanager
from typing import Iterable, Iterator

from booking_engine.scheduling.provider_rules import resolve_provider
from booking_engine.scheduling.time_utils import canonical_date
from booking_engine.utils import normalize_name

SlotKey = tuple[str, str]


def provider_day_key(provider_name: str, booking_date: str) -> SlotKey:
    """Lock key shared by every spelling of the same provider."""
    rule = resolve_provider(provider_name)
    provider_key = rule.provider_id if rule else normalize_name(provider_name)
    return provider_key, canonical_date(booking_date) or booking_date.strip()


class ProviderDayLocks:
    """Registry of one lock per (provider, date)."""

    def __init__(self) -> None:
        self._locks: dict[SlotKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: SlotKey) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    @contextmanager
    def hold(self, keys: Iterable[SlotKey]) -> Iterator[None]:
        acquired: list[threading.Lock] = []
        try:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
