from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from aiohttp import ClientError, ClientSession

from ..config import ProviderConfig
from ..const import USER_AGENT
from ..exceptions import ConfigError, ProviderRequestError, UpstreamFormatError
from ..models import PriceList, Station
from ..pipeline import build_price_list, station_id_key

_LOGGER = logging.getLogger(__name__)


class FuelProvider:
    """Common contract of all upstream adapters.

    Subclasses declare what they can deliver and implement
    ``_async_fetch_stations``; the shared pipeline turns the partial
    stations into a ``PriceList``.
    """

    name: ClassVar[str] = ""
    supported_types: ClassVar[Tuple[str, ...]] = ()
    unit: ClassVar[str] = ""
    currency: ClassVar[str] = ""
    distance_sortable: ClassVar[bool] = True
    # Set when upstream does not restrict results to the radius itself.
    filter_radius: ClassVar[bool] = False

    def __init__(self, session: ClientSession, config: ProviderConfig) -> None:
        self._session = session
        self.config = self._restrict_types(config)

    def _restrict_types(self, config: ProviderConfig) -> ProviderConfig:
        unsupported = [t for t in config.types if t not in self.supported_types]
        if not unsupported:
            return config
        _LOGGER.warning(
            "Provider %s does not support fuel types %s; ignoring them", self.name, unsupported
        )
        remaining = tuple(t for t in config.types if t in self.supported_types)
        if not remaining:
            raise ConfigError(
                f"None of the configured fuel types {list(config.types)} are supported by "
                f"{self.name} ({list(self.supported_types)})"
            )
        return config.with_types(remaining)

    @staticmethod
    def station_key(station: Station) -> str:
        return station_id_key(station)

    async def async_setup(self) -> None:
        return

    async def async_close(self) -> None:
        return

    async def get_data(self) -> PriceList:
        partials = await self._async_fetch_stations()
        return build_price_list(
            partials,
            self.config,
            key_func=self.station_key,
            types=self.supported_types,
            unit=self.unit,
            currency=self.currency,
            radius=self.config.radius if self.filter_radius else None,
            distance_sortable=self.distance_sortable,
        )

    async def _async_fetch_stations(self) -> List[Station]:
        raise NotImplementedError

    async def _request_text(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> str:
        request_headers = {"User-Agent": USER_AGENT}
        request_headers.update(headers or {})
        try:
            async with self._session.request(method, url, headers=request_headers, **kwargs) as resp:
                text = await resp.text()
                if resp.status >= 400:
                    raise ProviderRequestError(resp.status, text)
                return text
        except (ClientError, asyncio.TimeoutError) as err:
            raise ProviderRequestError(None, str(err)) from err

    async def _request_json(self, method: str, url: str, empty: Any = None, **kwargs: Any) -> Any:
        text = await self._request_text(method, url, **kwargs)
        if not text and empty is not None:
            return empty
        if not text:
            raise UpstreamFormatError(f"{self.name}: empty response from {url}")
        try:
            return json.loads(text)
        except ValueError as err:
            raise UpstreamFormatError(f"{self.name}: invalid JSON from {url}") from err
