from __future__ import annotations

import pytest

from conftest import FakeResponse
from mmm_fuel.exceptions import ConfigError, ProviderRequestError
from mmm_fuel.providers.nsw import NswProvider, join_station_prices

STATIONS = [
    {
        "code": 100,
        "brand": "Test Brand",
        "name": "Test Station",
        "address": "123 Test Street, NEWCASTLE NSW 2300",
        "location": {"distance": 1.2, "latitude": -32.9, "longitude": 151.7},
    },
    {
        "code": 200,
        "brand": "Other Brand",
        "name": "Other Station",
        "address": "9 Other Road, NEWCASTLE NSW 2300",
        "location": {"distance": 0.6, "latitude": -32.91, "longitude": 151.71},
    },
]

PRICES = {
    "DL": [{"stationcode": 100, "fueltype": "DL", "price": 189.9}],
    "P95": [
        {"stationcode": 100, "fueltype": "P95", "price": 199.9},
        {"stationcode": 200, "fueltype": "P95", "price": 195.5},
    ],
}


@pytest.fixture
def nsw_config(make_config):
    return make_config(
        provider="nsw",
        lat=-32.8928,
        lng=151.6620,
        radius=10,
        types=["diesel", "e5"],
        sort_by="diesel",
        api_key="test-key",
        secret="test-secret",
    )


def _handler(token_results):
    def handler(method, url, kwargs):
        if "accesstoken" in url:
            return token_results.pop(0)
        fueltype = kwargs["json"]["fueltype"]
        return {"stations": STATIONS, "prices": PRICES.get(fueltype, [])}

    return handler


def test_join_station_prices_skips_unknown_codes():
    joined = join_station_prices(
        {"stations": STATIONS, "prices": [{"stationcode": 100, "price": 1}, {"stationcode": 999, "price": 2}]}
    )
    assert [(j["code"], j["price"]) for j in joined] == [("100", 1)]


@pytest.mark.asyncio
async def test_get_data_merges_fuel_types(fake_session, nsw_config):
    session = fake_session(_handler([{"access_token": "tok-1"}]))
    provider = NswProvider(session, nsw_config)
    await provider.async_refresh_token()

    price_list = await provider.get_data()

    nearby_calls = session.calls_to("prices/nearby")
    assert sorted(call["json"]["fueltype"] for call in nearby_calls) == ["DL", "P95"]
    assert all(call["headers"]["Authorization"] == "Bearer tok-1" for call in nearby_calls)
    assert all(call["headers"]["apikey"] == "test-key" for call in nearby_calls)
    assert all(call["json"]["radius"] == "10" for call in nearby_calls)
    assert price_list.currency == "AUD"
    assert [s.id for s in price_list.by_price] == ["100", "200"]
    assert [s.id for s in price_list.by_distance] == ["200", "100"]
    other = price_list.by_distance[0]
    assert other.prices == {"e5": 195.5, "diesel": ">189.9"}
    assert other.coordinates is not None and other.coordinates.lat == -32.91


@pytest.mark.asyncio
async def test_token_refresh_failure_keeps_previous_token(fake_session, nsw_config, caplog):
    session = fake_session(_handler([{"access_token": "tok-1"}, FakeResponse(500, "boom")]))
    provider = NswProvider(session, nsw_config)

    assert await provider.async_refresh_token() is True
    assert await provider.async_refresh_token() is False

    assert provider._token == "tok-1"
    assert "Failed to refresh nsw access token" in caplog.text


@pytest.mark.asyncio
async def test_token_error_payload_is_a_failed_refresh(fake_session, nsw_config):
    session = fake_session(_handler([{"Error": "invalid client"}]))
    provider = NswProvider(session, nsw_config)
    assert await provider.async_refresh_token() is False
    assert provider._token is None


@pytest.mark.asyncio
async def test_setup_starts_and_close_stops_refresh_task(fake_session, nsw_config):
    session = fake_session(_handler([{"access_token": "tok-1"}]))
    provider = NswProvider(session, nsw_config)

    await provider.async_setup()
    task = provider._refresh_task
    assert provider._token == "tok-1"
    assert task is not None and not task.done()

    await provider.async_close()
    assert task.cancelled()
    assert provider._refresh_task is None


@pytest.mark.asyncio
async def test_unauthorised_request_raises(fake_session, nsw_config):
    def handler(method, url, kwargs):
        if "accesstoken" in url:
            return FakeResponse(401, "denied")
        return FakeResponse(401, "Unauthorized")

    provider = NswProvider(fake_session(handler), nsw_config)
    await provider.async_setup()
    try:
        with pytest.raises(ProviderRequestError, match="401"):
            await provider.get_data()
    finally:
        await provider.async_close()


def test_requires_credentials(fake_session, make_config):
    with pytest.raises(ConfigError):
        NswProvider(fake_session(_handler([])), make_config(provider="nsw", secret=None))
