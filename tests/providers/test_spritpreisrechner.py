from __future__ import annotations

import json

import pytest

from mmm_fuel.exceptions import ConfigError, UpstreamFormatError
from mmm_fuel.providers.spritpreisrechner import SpritpreisrechnerProvider, highest_amount

VIENNA = {"lat": 48.2082, "lng": 16.3738}


def _raw(name: str, lat: float, lng: float, amounts, open_=True):
    return {
        "gasStationName": name,
        "city": "Wien",
        "postalCode": "1010",
        "address": "Ring 1",
        "latitude": str(lat),
        "longitude": str(lng),
        "open": open_,
        "spritPrice": [{"amount": a} for a in amounts],
    }


RESPONSES = {
    "DIE": [
        _raw("Near", 48.21, 16.38, ["1.459", ""]),
        _raw("Far", 48.35, 16.37, ["1.299"]),
        _raw("DieselOnly", 48.20, 16.36, ["1.489", "1.479"]),
    ],
    "SUP": [
        _raw("Near", 48.21, 16.38, ["1.559"]),
        _raw("Far", 48.35, 16.37, ["1.399"]),
    ],
}


def _handler(method, url, kwargs):
    assert method == "POST"
    query = json.loads(kwargs["data"]["data"])
    return RESPONSES[query[1]]


def test_highest_amount():
    assert highest_amount([{"amount": "1.2"}, {"amount": ""}, {"amount": "1.3"}, {}]) == 1.3
    assert highest_amount([]) is None
    assert highest_amount(None) is None


@pytest.mark.asyncio
async def test_get_data_merges_types_and_filters_radius(fake_session, make_config):
    session = fake_session(_handler)
    config = make_config(provider="spritpreisrechner", types=["diesel", "e5"], sort_by="diesel", **VIENNA)
    provider = SpritpreisrechnerProvider(session, config)

    price_list = await provider.get_data()

    assert len(session.calls) == 2
    assert price_list.types == ["diesel", "e5", "gas"]
    assert price_list.unit == "kilometer"
    names = [s.name for s in price_list.by_price]
    assert names == ["Near", "DieselOnly"]
    near, diesel_only = price_list.by_price
    assert near.prices == {"diesel": 1.459, "e5": 1.559}
    assert diesel_only.prices == {"diesel": 1.489, "e5": ">1.559"}
    assert near.address == "1010 Wien - Ring 1"
    assert all(s.distance <= config.radius for s in price_list.by_distance)
    assert [s.name for s in price_list.by_distance] == ["Near", "DieselOnly"]


@pytest.mark.asyncio
async def test_request_uses_bounding_box_and_open_flag(fake_session, make_config):
    session = fake_session(_handler)
    config = make_config(provider="spritpreisrechner", types=["diesel"], show_open_only=True, **VIENNA)
    await SpritpreisrechnerProvider(session, config).get_data()

    query = json.loads(session.calls[0]["data"]["data"])
    include_closed, fuel, tl_lng, tl_lat, br_lng, br_lat = query
    assert include_closed == ""
    assert fuel == "DIE"
    assert tl_lat > VIENNA["lat"] > br_lat
    assert tl_lng < VIENNA["lng"] < br_lng


@pytest.mark.asyncio
async def test_unexpected_payload_raises(fake_session, make_config):
    session = fake_session(lambda method, url, kwargs: {"error": "nope"})
    config = make_config(provider="spritpreisrechner", **VIENNA)
    with pytest.raises(UpstreamFormatError):
        await SpritpreisrechnerProvider(session, config).get_data()


def test_requires_origin(fake_session, make_config):
    with pytest.raises(ConfigError):
        SpritpreisrechnerProvider(
            fake_session(_handler), make_config(provider="spritpreisrechner", lat=None, lng=None)
        )
