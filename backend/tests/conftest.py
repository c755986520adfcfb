"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import asyncio
from typing import Optional

import pytest

from shared.config import get_settings


class FakeClock:
    """Controllable wall clock (seconds)."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedisStore:
    """
    In-memory stand-in for an async Redis client.

    Supports ``get`` and ``set(..., ex=ttl)`` with expiry driven by a
    FakeClock, can be told to fail either operation, and can hold writes
    until ``set_gate`` is set.
    """

    def __init__(self, clock: Optional[FakeClock] = None):
        self.clock = clock or FakeClock()
        self.data: dict[str, tuple[str, Optional[float]]] = {}
        self.fail_get = False
        self.fail_set = False
        self.get_calls = 0
        self.set_calls: list[tuple[str, str, Optional[int]]] = []
        self.closed = False
        self.set_gate: Optional[asyncio.Event] = None

    async def get(self, key: str) -> Optional[str]:
        self.get_calls += 1
        if self.fail_get:
            raise ConnectionError("redis unavailable")
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return None
        return value

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.set_calls.append((key, value, ex))
        if self.set_gate is not None:
            await self.set_gate.wait()
        if self.fail_set:
            raise ConnectionError("redis unavailable")
        expires_at = self.clock() + ex if ex else None
        self.data[key] = (value, expires_at)
        return True

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear the cached settings before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def fake_store(clock: FakeClock) -> FakeRedisStore:
    """Provide an in-memory Redis-like store sharing the test clock."""
    return FakeRedisStore(clock)
