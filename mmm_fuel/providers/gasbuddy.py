"""gasbuddy.com station listings (scraped), USA and Canada."""
from __future__ import annotations

import asyncio
import logging
from typing import List

from bs4 import BeautifulSoup

from ..const import CURRENCY_USD, PROVIDER_GASBUDDY, UNIT_MILE
from ..exceptions import ConfigError
from ..models import Station, normalize_price
from .base import FuelProvider

_LOGGER = logging.getLogger(__name__)

BASE_URL = "https://www.gasbuddy.com"

FUEL_TYPES = {
    "regular": 1,
    "midgrade": 2,
    "premium": 3,
    "diesel": 4,
    "e85": 5,
    "unl88": 12,
}

ITEM_SELECTOR = "[class*=GenericStationListItem-module__stationListItem___]"
NAME_SELECTOR = "[class*=header__header3___] a[href*=station]"
ADDRESS_SELECTOR = "[class*=StationDisplay-module__address___]"
PRICE_SELECTOR = "[class*=StationDisplayPrice-module__price___]"


def parse_stations(html: str, fuel_type: str) -> List[Station]:
    stations: List[Station] = []
    for item in BeautifulSoup(html, "html.parser").select(ITEM_SELECTOR):
        link = item.select_one(NAME_SELECTOR)
        address = item.select_one(ADDRESS_SELECTOR)
        if link is None or address is None:
            _LOGGER.debug("Skipping gasbuddy listing without name or address")
            continue
        price = item.select_one(PRICE_SELECTOR)
        stations.append(
            Station(
                id=str(link.get("href", "")).replace("/station/", ""),
                name=link.get_text(strip=True),
                address=address.get_text(" ", strip=True),
                prices={fuel_type: normalize_price(price.get_text(strip=True) if price else None)},
                distance=0.0,
                fuel_type=fuel_type,
            )
        )
    return stations


class GasbuddyProvider(FuelProvider):
    name = PROVIDER_GASBUDDY
    supported_types = tuple(FUEL_TYPES)
    unit = UNIT_MILE
    currency = CURRENCY_USD
    # Search is by zip code only, there is no distance to sort by.
    distance_sortable = False

    def __init__(self, session, config) -> None:
        super().__init__(session, config)
        if not self.config.zip:
            raise ConfigError("gasbuddy requires a zip code")

    async def _async_fetch_type(self, fuel_type: str) -> List[Station]:
        params = {
            "search": self.config.zip,
            "fuel": FUEL_TYPES[fuel_type],
            "maxAge": 0,
            "method": "all",
        }
        html = await self._request_text("GET", f"{BASE_URL}/home", params=params)
        return parse_stations(html, fuel_type)

    async def _async_fetch_stations(self) -> List[Station]:
        responses = await asyncio.gather(*(self._async_fetch_type(t) for t in self.config.types))
        return [station for stations in responses for station in stations]
