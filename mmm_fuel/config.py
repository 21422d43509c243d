from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
    CONF_API_KEY,
    CONF_LAT,
    CONF_LNG,
    CONF_PROVIDER,
    CONF_RADIUS,
    CONF_SECRET,
    CONF_SHOW_OPEN_ONLY,
    CONF_SORT_BY,
    CONF_STATION_IDS,
    CONF_TYPES,
    CONF_UPDATE_INTERVAL,
    CONF_ZIP,
    DEFAULT_RADIUS,
    DEFAULT_SHOW_OPEN_ONLY,
    DEFAULT_TYPES,
    DEFAULT_UPDATE_INTERVAL,
)
from .exceptions import ConfigError
from .models import Coordinates

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "MMM_FUEL_"


def _split_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    raw = str(value).replace(",", "|")
    return [v.strip() for v in raw.split("|") if v.strip()]


def _boolean(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _non_empty_list(value: Any) -> list[str]:
    items = _split_list(value)
    if not items:
        raise vol.Invalid("expected at least one entry")
    return items


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_PROVIDER): vol.All(str, vol.Strip, vol.Lower, vol.Length(min=1)),
        vol.Optional(CONF_LAT): vol.Any(None, vol.All(vol.Coerce(float), vol.Range(min=-90, max=90))),
        vol.Optional(CONF_LNG): vol.Any(None, vol.All(vol.Coerce(float), vol.Range(min=-180, max=180))),
        vol.Optional(CONF_RADIUS, default=DEFAULT_RADIUS): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False)),
        vol.Optional(CONF_ZIP): _optional_str,
        vol.Optional(CONF_TYPES, default=DEFAULT_TYPES): _non_empty_list,
        vol.Optional(CONF_SORT_BY): _optional_str,
        vol.Optional(CONF_SHOW_OPEN_ONLY, default=DEFAULT_SHOW_OPEN_ONLY): _boolean,
        vol.Optional(CONF_API_KEY): _optional_str,
        vol.Optional(CONF_SECRET): _optional_str,
        vol.Optional(CONF_STATION_IDS, default=list): _split_list,
        vol.Optional(CONF_UPDATE_INTERVAL, default=DEFAULT_UPDATE_INTERVAL): vol.All(
            vol.Coerce(float), vol.Range(min=1)
        ),
    },
    extra=vol.REMOVE_EXTRA,
)


@dataclass(frozen=True)
class ProviderConfig:
    provider: str
    types: Tuple[str, ...]
    sort_by: str
    radius: float = DEFAULT_RADIUS
    lat: Optional[float] = None
    lng: Optional[float] = None
    zip: Optional[str] = None
    show_open_only: bool = DEFAULT_SHOW_OPEN_ONLY
    api_key: Optional[str] = None
    secret: Optional[str] = None
    station_ids: Tuple[str, ...] = field(default_factory=tuple)
    update_interval: float = DEFAULT_UPDATE_INTERVAL

    @property
    def origin(self) -> Optional[Coordinates]:
        if self.lat is None or self.lng is None:
            return None
        return Coordinates(lat=self.lat, lng=self.lng)

    def with_types(self, types: Tuple[str, ...]) -> "ProviderConfig":
        """Copy restricted to ``types``; ``sort_by`` is re-checked against them."""
        data = dict(self.__dict__)
        data[CONF_TYPES] = list(types)
        return build_config(data)


def build_config(raw: Mapping[str, Any]) -> ProviderConfig:
    try:
        data: Dict[str, Any] = CONFIG_SCHEMA(dict(raw))
    except vol.Invalid as err:
        raise ConfigError(f"Invalid configuration: {err}") from err

    types = tuple(dict.fromkeys(data[CONF_TYPES]))
    sort_by = data.get(CONF_SORT_BY)
    if sort_by not in types:
        if sort_by:
            _LOGGER.warning("sort_by %s is not one of %s; using %s", sort_by, list(types), types[0])
        sort_by = types[0]

    return ProviderConfig(
        provider=data[CONF_PROVIDER],
        types=types,
        sort_by=sort_by,
        radius=data[CONF_RADIUS],
        lat=data.get(CONF_LAT),
        lng=data.get(CONF_LNG),
        zip=data.get(CONF_ZIP),
        show_open_only=data[CONF_SHOW_OPEN_ONLY],
        api_key=data.get(CONF_API_KEY),
        secret=data.get(CONF_SECRET),
        station_ids=tuple(data[CONF_STATION_IDS]),
        update_interval=data[CONF_UPDATE_INTERVAL],
    )


def load_config_from_env() -> ProviderConfig:
    """Read ``MMM_FUEL_*`` variables (a ``.env`` file is honoured)."""
    load_dotenv()
    raw: Dict[str, Any] = {}
    for key in (
        CONF_PROVIDER,
        CONF_LAT,
        CONF_LNG,
        CONF_RADIUS,
        CONF_ZIP,
        CONF_TYPES,
        CONF_SORT_BY,
        CONF_SHOW_OPEN_ONLY,
        CONF_API_KEY,
        CONF_SECRET,
        CONF_STATION_IDS,
        CONF_UPDATE_INTERVAL,
    ):
        value = os.environ.get(f"{ENV_PREFIX}{key.upper()}", "")
        if value != "":
            raw[key] = value
    if CONF_PROVIDER not in raw:
        raise ConfigError(f"Missing {ENV_PREFIX}PROVIDER in environment.")
    return build_config(raw)
