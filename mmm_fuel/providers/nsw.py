"""NSW FuelCheck (api.onegov.nsw.gov.au), Australia."""
from __future__ import annotations

import asyncio
import base64
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..const import CURRENCY_AUD, PROVIDER_NSW, UNIT_KILOMETER
from ..exceptions import ConfigError, UpstreamFormatError
from ..models import Coordinates, Station, normalize_price
from .base import FuelProvider

_LOGGER = logging.getLogger(__name__)

BASE_URL = "https://api.onegov.nsw.gov.au"
TOKEN_REFRESH_INTERVAL = 6 * 60 * 60

FUEL_TYPES = {
    "diesel": "DL",
    "e5": "P95",
    "e10": "E10",
    "regular": "U91",
    "premium": "P98",
}


def join_station_prices(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Attach each price record to its station metadata by station code."""
    stations = {str(s.get("code")): s for s in payload.get("stations") or []}
    joined: List[Dict[str, Any]] = []
    for price in payload.get("prices") or []:
        code = str(price.get("stationcode"))
        station = stations.get(code)
        if station is None:
            continue
        joined.append(dict(station, code=code, price=price.get("price")))
    return joined


class NswProvider(FuelProvider):
    name = PROVIDER_NSW
    supported_types = tuple(FUEL_TYPES)
    unit = UNIT_KILOMETER
    currency = CURRENCY_AUD

    def __init__(self, session, config, base_url: str = BASE_URL) -> None:
        super().__init__(session, config)
        if not self.config.api_key or not self.config.secret:
            raise ConfigError("nsw requires api_key and secret")
        if self.config.origin is None:
            raise ConfigError("nsw requires lat and lng")
        self._base_url = base_url.rstrip("/")
        self._token: Optional[str] = None
        self._refresh_task: Optional[asyncio.Task] = None

    def _basic_auth_header(self) -> str:
        raw = f"{self.config.api_key}:{self.config.secret}".encode("utf-8")
        encoded = base64.b64encode(raw).decode("ascii")
        return f"Basic {encoded}"

    async def _fetch_access_token(self) -> str:
        url = f"{self._base_url}/oauth/client_credential/accesstoken"
        headers = {"Authorization": self._basic_auth_header(), "Accept": "application/json"}
        params = {"grant_type": "client_credentials"}
        payload = await self._request_json("GET", url, headers=headers, params=params)
        if not isinstance(payload, dict):
            raise UpstreamFormatError("nsw: unexpected token response")
        if payload.get("Error"):
            raise UpstreamFormatError(f"nsw: {payload['Error']}")
        token = payload.get("access_token")
        if not token:
            raise UpstreamFormatError("Access token missing from response.")
        return token

    async def async_refresh_token(self) -> bool:
        """Fetch a new token; on failure the previous one is kept."""
        try:
            token = await self._fetch_access_token()
        except Exception as err:
            _LOGGER.error("Failed to refresh nsw access token: %s", err)
            return False
        self._token = token
        return True

    async def _token_refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(TOKEN_REFRESH_INTERVAL)
            await self.async_refresh_token()

    async def async_setup(self) -> None:
        await self.async_refresh_token()
        if self._refresh_task is None:
            self._refresh_task = asyncio.create_task(self._token_refresh_loop())

    async def async_close(self) -> None:
        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        try:
            await self._refresh_task
        except asyncio.CancelledError:
            pass
        self._refresh_task = None

    @staticmethod
    def _utc_timestamp() -> str:
        return datetime.now(timezone.utc).strftime("%d/%m/%Y %I:%M:%S %p")

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json; charset=utf-8",
            "apikey": self.config.api_key or "",
            "transactionid": str(uuid.uuid4()),
            "requesttimestamp": self._utc_timestamp(),
        }

    def _map_station(self, raw: Dict[str, Any], fuel_type: str) -> Station:
        location = raw.get("location") or {}
        coordinates = None
        if location.get("latitude") is not None and location.get("longitude") is not None:
            coordinates = Coordinates(lat=float(location["latitude"]), lng=float(location["longitude"]))
        distance = location.get("distance")
        return Station(
            id=raw["code"],
            name=str(raw.get("name") or "").strip(),
            address=str(raw.get("address") or "").strip(),
            prices={fuel_type: normalize_price(raw.get("price"))},
            coordinates=coordinates,
            distance=float(distance) if distance is not None else None,
            fuel_type=fuel_type,
        )

    async def _async_fetch_type(self, fuel_type: str) -> List[Station]:
        url = f"{self._base_url}/FuelPriceCheck/v1/fuel/prices/nearby"
        body = {
            "fueltype": FUEL_TYPES[fuel_type],
            "latitude": str(self.config.lat),
            "longitude": str(self.config.lng),
            "radius": str(int(self.config.radius)),
            "sortby": "price",
            "sortascending": "true",
        }
        payload = await self._request_json(
            "POST", url, empty={"stations": [], "prices": []}, headers=self._headers(), json=body
        )
        if not isinstance(payload, dict):
            raise UpstreamFormatError(f"nsw: unexpected response for {fuel_type}")
        return [self._map_station(raw, fuel_type) for raw in join_station_prices(payload)]

    async def _async_fetch_stations(self) -> List[Station]:
        responses = await asyncio.gather(*(self._async_fetch_type(t) for t in self.config.types))
        return [station for stations in responses for station in stations]
