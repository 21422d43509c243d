"""Tankerkönig (creativecommons.tankerkoenig.de), Germany."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from ..const import CURRENCY_EUR, PROVIDER_TANKERKOENIG, UNIT_KILOMETER
from ..exceptions import ConfigError, UpstreamFormatError
from ..geo import great_circle_distance_km
from ..models import Coordinates, Station, normalize_price
from .base import FuelProvider

_LOGGER = logging.getLogger(__name__)

BASE_URL = "https://creativecommons.tankerkoenig.de/json"
MAX_RADIUS_KM = 25
MAX_STATION_IDS = 10


def _format_address(raw: Dict[str, Any]) -> str:
    post_code = str(raw.get("postCode") or "").zfill(5)
    house_number = str(raw.get("houseNumber") or "").strip()
    street = f"{raw.get('street') or ''} {house_number}".strip()
    return f"{post_code} {raw.get('place') or ''} - {street}"


class TankerkoenigProvider(FuelProvider):
    name = PROVIDER_TANKERKOENIG
    supported_types = ("diesel", "e5", "e10")
    unit = UNIT_KILOMETER
    currency = CURRENCY_EUR

    def __init__(self, session, config) -> None:
        super().__init__(session, config)
        if not self.config.api_key:
            raise ConfigError("tankerkoenig requires an api_key")
        if self.config.origin is None and not self.config.station_ids:
            raise ConfigError("tankerkoenig requires lat/lng or station_ids")
        self._station_ids = list(self.config.station_ids)
        if len(self._station_ids) > MAX_STATION_IDS:
            _LOGGER.warning(
                "tankerkoenig accepts at most %s station ids, ignoring %s",
                MAX_STATION_IDS,
                self._station_ids[MAX_STATION_IDS:],
            )
            self._station_ids = self._station_ids[:MAX_STATION_IDS]
        self._radius = min(self.config.radius, MAX_RADIUS_KM)
        if self._radius < self.config.radius:
            _LOGGER.warning(
                "tankerkoenig radius is limited to %s km (configured %s)",
                MAX_RADIUS_KM,
                self.config.radius,
            )

    def _check_envelope(self, payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise UpstreamFormatError("tankerkoenig: unexpected response")
        if not payload.get("ok"):
            raise UpstreamFormatError(f"tankerkoenig: {payload.get('message') or 'no fuel data'}")
        return payload

    def _map_station(self, raw: Dict[str, Any]) -> Station:
        coordinates = None
        if raw.get("lat") is not None and raw.get("lng") is not None:
            coordinates = Coordinates(lat=float(raw["lat"]), lng=float(raw["lng"]))

        distance = raw.get("dist")
        if distance is None and coordinates and self.config.origin:
            distance = round(great_circle_distance_km(self.config.origin, coordinates), 1)

        return Station(
            id=str(raw["id"]),
            name=str(raw.get("name") or "").strip(),
            address=_format_address(raw),
            prices={t: normalize_price(raw.get(t)) for t in self.config.types},
            coordinates=coordinates,
            distance=float(distance) if distance is not None else None,
            is_open=bool(raw.get("isOpen", True)),
        )

    async def _async_fetch_radius(self) -> List[Station]:
        if self.config.origin is None:
            return []
        params = {
            "lat": self.config.lat,
            "lng": self.config.lng,
            "rad": self._radius,
            "type": "all",
            "sort": "dist",
            "apikey": self.config.api_key,
        }
        payload = self._check_envelope(
            await self._request_json("GET", f"{BASE_URL}/list.php", params=params)
        )
        stations = payload.get("stations")
        if not isinstance(stations, list):
            raise UpstreamFormatError("tankerkoenig: stations missing from response")
        return [self._map_station(raw) for raw in stations]

    async def _async_fetch_station(self, station_id: str) -> Station:
        params = {"id": station_id, "apikey": self.config.api_key}
        payload = self._check_envelope(
            await self._request_json("GET", f"{BASE_URL}/detail.php", params=params)
        )
        raw = payload.get("station")
        if not isinstance(raw, dict):
            raise UpstreamFormatError(f"tankerkoenig: no details for station {station_id}")
        return self._map_station(raw)

    async def _async_fetch_stations(self) -> List[Station]:
        stations = await self._async_fetch_radius()
        known = {station.id for station in stations}
        missing = [station_id for station_id in self._station_ids if station_id not in known]
        if missing:
            stations.extend(
                await asyncio.gather(*(self._async_fetch_station(sid) for sid in missing))
            )
        return stations
