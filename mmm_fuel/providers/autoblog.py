"""autoblog.com gas price listings (scraped), USA."""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from ..const import CURRENCY_USD, PROVIDER_AUTOBLOG, UNIT_MILE
from ..exceptions import ConfigError
from ..models import Station, normalize_price
from ..pipeline import name_address_key
from .base import FuelProvider

_LOGGER = logging.getLogger(__name__)

BASE_URL = "https://www.autoblog.com"
PAGE_SIZE = 10
MAX_PAGE = 2


def _text(node, selector: str) -> str:
    found = node.select_one(selector)
    if found is None:
        raise ValueError(f"missing {selector}")
    return found.get_text(" ", strip=True)


def _value(node, selector: str) -> Optional[float]:
    found = node.select_one(selector)
    if found is None:
        return None
    return normalize_price(found.get("value"))


def parse_stations(html: str, fuel_type: str) -> Tuple[int, List[Station]]:
    """Return the number of listed items and the stations that could be read."""
    items = BeautifulSoup(html, "html.parser").select("li.shop ul.details")
    stations: List[Station] = []
    for item in items:
        try:
            name = _text(item, "li.name h4")
            address = _text(item, "li.name address")
        except ValueError as err:
            _LOGGER.debug("Skipping autoblog listing: %s", err)
            continue
        distance = _value(item, "li.dist data.distance")
        stations.append(
            Station(
                id=f"{name}-{address}",
                name=name,
                address=address,
                prices={fuel_type: _value(item, "li.price data.price")},
                distance=distance if distance is not None else 0.0,
                fuel_type=fuel_type,
            )
        )
    return len(items), stations


class AutoblogProvider(FuelProvider):
    name = PROVIDER_AUTOBLOG
    supported_types = ("regular", "premium", "mid-grade", "diesel")
    unit = UNIT_MILE
    currency = CURRENCY_USD
    filter_radius = True

    def __init__(self, session, config) -> None:
        super().__init__(session, config)
        if not self.config.zip:
            raise ConfigError("autoblog requires a zip code")

    station_key = staticmethod(name_address_key)

    def request_paths(self, fuel_type: str) -> List[str]:
        """Listings ordered by distance and by price, so both ends are covered."""
        suffix = "" if fuel_type == "regular" else f"/{fuel_type}"
        base = f"/{self.config.zip}-gas-prices{suffix}"
        return [base, f"{base}/sort-price"]

    async def _async_fetch_paginated(self, fuel_type: str, path: str) -> List[Station]:
        stations: List[Station] = []
        page = 1
        while page <= MAX_PAGE:
            try:
                html = await self._request_text("GET", f"{BASE_URL}{path}/pg-{page}")
            except Exception as err:
                _LOGGER.warning("autoblog page %s of %s failed: %s", page, path, err)
                break
            count, parsed = parse_stations(html, fuel_type)
            stations.extend(parsed)
            if count < PAGE_SIZE:
                break
            page += 1
        return stations

    async def _async_fetch_stations(self) -> List[Station]:
        requests = [
            self._async_fetch_paginated(fuel_type, path)
            for fuel_type in self.config.types
            for path in self.request_paths(fuel_type)
        ]
        responses = await asyncio.gather(*requests)
        return [station for stations in responses for station in stations]
