"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

import pytest

from pricesync.config import reset_default_values
from pricesync.data_models import ChangeType, PricePoint


class FakeRedis:
    """In-memory Redis mock for testing."""

    def __init__(self):
        self._data: dict[str, bytes] = {}
        self.ttls: dict[str, Optional[int]] = {}
        self.closed = False
        self.fail_with: Optional[BaseException] = None

    def _maybe_fail(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def set(self, key: str, value: str | bytes, ex: Optional[int] = None) -> bool:
        """Set a string value."""
        self._maybe_fail()
        self._data[key] = value.encode() if isinstance(value, str) else value
        self.ttls[key] = ex
        return True

    async def get(self, key: str) -> bytes | None:
        """Get a string value."""
        self._maybe_fail()
        return self._data.get(key)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def aclose(self) -> None:
        self.closed = True

    def dump_string(self, key: str) -> bytes | None:
        return self._data.get(key)


class FakeClock:
    """Settable epoch clock for cache freshness tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def isolate_runtime_defaults(monkeypatch):
    """Keep developer .env files out of environment lookups."""
    from pricesync.config import runtime

    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", ())
    monkeypatch.setattr(runtime, "_JSON_ENV_CANDIDATES", ())
    reset_default_values()
    yield
    reset_default_values()


def make_point(
    day: date | str,
    price: str | int | Decimal,
    code: str = "CU",
    change_type: ChangeType = ChangeType.UNKNOWN,
) -> PricePoint:
    observed = date.fromisoformat(day) if isinstance(day, str) else day
    return PricePoint(
        instrument_code=code,
        observed_date=observed,
        price_minor=Decimal(str(price)).quantize(Decimal("0.01")),
        change_type=change_type,
    )


@pytest.fixture
def point_factory() -> Callable[..., PricePoint]:
    return make_point


async def wait_until(predicate: Callable[[], Any], timeout: float = 1.0, interval: float = 0.001) -> None:
    """Poll ``predicate`` on the running loop until it is truthy."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


@pytest.fixture
def eventually() -> Callable[..., Any]:
    return wait_until
