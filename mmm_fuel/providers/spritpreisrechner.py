"""Spritpreisrechner (E-Control), Austria."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from ..const import CURRENCY_EUR, PROVIDER_SPRITPREISRECHNER, UNIT_KILOMETER
from ..exceptions import ConfigError, UpstreamFormatError
from ..geo import Coordinate, bounding_box
from ..models import Coordinates, Station, normalize_price
from .base import FuelProvider

_LOGGER = logging.getLogger(__name__)

BASE_URL = "http://www.spritpreisrechner.at/espritmap-app/GasStationServlet"

FUEL_TYPES = {
    "diesel": "DIE",
    "e5": "SUP",
    "gas": "GAS",
}


def highest_amount(sprit_prices: Any) -> Optional[float]:
    """The servlet lists one entry per price; the station price is the highest."""
    highest: Optional[float] = None
    for entry in sprit_prices or []:
        if not isinstance(entry, dict):
            continue
        amount = normalize_price(entry.get("amount"))
        if amount is not None and (highest is None or amount > highest):
            highest = amount
    return highest


class SpritpreisrechnerProvider(FuelProvider):
    name = PROVIDER_SPRITPREISRECHNER
    supported_types = tuple(FUEL_TYPES)
    unit = UNIT_KILOMETER
    currency = CURRENCY_EUR
    filter_radius = True

    def __init__(self, session, config) -> None:
        super().__init__(session, config)
        if self.config.origin is None:
            raise ConfigError("spritpreisrechner requires lat and lng")
        self._coordinate = Coordinate().from_point(self.config.lat, self.config.lng)
        self._top_left, self._bottom_right = bounding_box(self.config.origin, self.config.radius)

    def _form_data(self, fuel_type: str) -> Dict[str, str]:
        query = [
            "" if self.config.show_open_only else "checked",
            FUEL_TYPES[fuel_type],
            self._top_left.lng,
            self._top_left.lat,
            self._bottom_right.lng,
            self._bottom_right.lat,
        ]
        return {"data": json.dumps(query)}

    def _map_station(self, raw: Dict[str, Any], fuel_type: str) -> Station:
        coordinates = None
        distance = None
        try:
            coordinates = Coordinates(lat=float(raw["latitude"]), lng=float(raw["longitude"]))
            distance = round(self._coordinate.distance_to(coordinates), 2)
        except (KeyError, TypeError, ValueError):
            _LOGGER.debug("spritpreisrechner station without coordinates: %s", raw.get("gasStationName"))

        name = str(raw.get("gasStationName") or "").strip()
        # No stable id upstream; the composite is the same for every fuel type query.
        station_id = "|".join(
            str(raw.get(field) or "")
            for field in ("city", "postalCode", "gasStationName", "latitude", "longitude")
        )
        return Station(
            id=station_id,
            name=name,
            address=f"{raw.get('postalCode') or ''} {raw.get('city') or ''} - {raw.get('address') or ''}".strip(),
            prices={fuel_type: highest_amount(raw.get("spritPrice"))},
            coordinates=coordinates,
            distance=distance,
            is_open=bool(raw.get("open", True)),
            fuel_type=fuel_type,
        )

    async def _async_fetch_type(self, fuel_type: str) -> List[Station]:
        payload = await self._request_json("POST", BASE_URL, data=self._form_data(fuel_type))
        if not isinstance(payload, list):
            raise UpstreamFormatError(f"spritpreisrechner: unexpected response for {fuel_type}")
        return [self._map_station(raw, fuel_type) for raw in payload if isinstance(raw, dict)]

    async def _async_fetch_stations(self) -> List[Station]:
        responses = await asyncio.gather(*(self._async_fetch_type(t) for t in self.config.types))
        return [station for stations in responses for station in stations]
