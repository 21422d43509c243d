from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from mmm_fuel.config import build_config
from mmm_fuel.models import Coordinates, Station


class FakeResponse:
    def __init__(self, status: int = 200, text: str = "") -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False


class FakeSession:
    """Stands in for ``aiohttp.ClientSession``; ``handler`` decides each answer.

    The handler gets ``(method, url, kwargs)`` and returns a ``FakeResponse``,
    raw text, a JSON-serialisable object, or an exception to raise.
    """

    def __init__(self, handler: Callable[[str, str, dict], Any]) -> None:
        self._handler = handler
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        result = self._handler(method, url, kwargs)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeResponse):
            return result
        if isinstance(result, str):
            return FakeResponse(200, result)
        return FakeResponse(200, json.dumps(result))

    def calls_to(self, fragment: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if fragment in call["url"]]


@pytest.fixture
def fake_session() -> Callable[[Callable[[str, str, dict], Any]], FakeSession]:
    return FakeSession


@pytest.fixture
def make_config():
    def _make(**overrides):
        data: dict[str, Any] = {
            "provider": "tankerkoenig",
            "lat": 52.52,
            "lng": 13.40,
            "radius": 5,
            "types": ["diesel", "e5"],
            "sort_by": "diesel",
            "api_key": "test-key",
        }
        data.update(overrides)
        return build_config(data)

    return _make


def make_station(
    station_id: str,
    prices: dict[str, Any],
    *,
    fuel_type: str | None = None,
    distance: float | None = 0.0,
    is_open: bool = True,
    name: str | None = None,
    address: str = "Test Street 1",
) -> Station:
    return Station(
        id=station_id,
        name=name or f"Station {station_id}",
        address=address,
        prices=dict(prices),
        coordinates=Coordinates(lat=52.5, lng=13.4),
        distance=distance,
        is_open=is_open,
        fuel_type=fuel_type,
    )


@pytest.fixture
def station_factory():
    return make_station
