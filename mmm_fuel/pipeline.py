"""Merge, fill, filter and sort stations into a ``PriceList``.

Every provider runs the same two-pass pipeline: per-type partial stations
are merged by a provider supplied key first, because the placeholder for a
missing price needs the highest price seen for that type across all
stations.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .config import ProviderConfig
from .const import UNAVAILABLE
from .models import PriceList, Station, is_real_price

StationKeyFunc = Callable[[Station], str]


@dataclass
class MergeResult:
    stations: List[Station]
    max_prices_by_type: Dict[str, float]


def station_id_key(station: Station) -> str:
    return station.id


def name_address_key(station: Station) -> str:
    return f"{station.name}-{station.address}"


def merge_prices(partials: Iterable[Station], key_func: StationKeyFunc) -> MergeResult:
    """Fold per-type partial stations into one record per station key."""
    indexed: Dict[str, Station] = {}
    max_prices: Dict[str, float] = {}

    for partial in partials:
        key = key_func(partial)
        fuel_types = [partial.fuel_type] if partial.fuel_type else list(partial.prices)

        station = indexed.get(key)
        if station is None:
            station = Station(
                id=partial.id,
                name=partial.name,
                address=partial.address,
                coordinates=partial.coordinates,
                distance=partial.distance,
                is_open=partial.is_open,
            )
            indexed[key] = station

        for fuel_type in fuel_types:
            price = partial.prices.get(fuel_type)
            if is_real_price(price):
                station.prices[fuel_type] = price
                if fuel_type not in max_prices or max_prices[fuel_type] < price:
                    max_prices[fuel_type] = price
            else:
                station.prices.setdefault(fuel_type, None)

    return MergeResult(stations=list(indexed.values()), max_prices_by_type=max_prices)


def fill_missing_prices(
    stations: Iterable[Station], types: Sequence[str], max_prices_by_type: Dict[str, float]
) -> None:
    """Replace unknown prices with ``">max"``, or ``UNAVAILABLE`` without a max."""
    for station in stations:
        for fuel_type in types:
            current = station.prices.get(fuel_type)
            if is_real_price(current) or isinstance(current, str):
                continue
            max_price = max_prices_by_type.get(fuel_type)
            station.prices[fuel_type] = f">{max_price}" if max_price is not None else UNAVAILABLE


def has_price_data(station: Station, types: Sequence[str]) -> bool:
    return any(is_real_price(station.prices.get(fuel_type)) for fuel_type in types)


def filter_stations(
    stations: Iterable[Station], config: ProviderConfig, radius: Optional[float] = None
) -> List[Station]:
    kept: List[Station] = []
    for station in stations:
        if not has_price_data(station, config.types):
            continue
        if config.show_open_only and not station.is_open:
            continue
        if radius is not None and (station.distance is None or station.distance > radius):
            continue
        kept.append(station)
    return kept


def sort_by_distance(stations: Iterable[Station]) -> List[Station]:
    return sorted(stations, key=lambda s: (s.distance is None, s.distance or 0))


def sort_by_price(stations: Iterable[Station], sort_by: str) -> List[Station]:
    """Real prices ascending; placeholders and unknowns after them, in input order."""

    def _key(station: Station):
        price = station.prices.get(sort_by)
        if is_real_price(price):
            return (False, price)
        return (True, 0)

    return sorted(stations, key=_key)


def build_price_list(
    partials: Iterable[Station],
    config: ProviderConfig,
    *,
    key_func: StationKeyFunc,
    types: Sequence[str],
    unit: str,
    currency: str,
    radius: Optional[float] = None,
    distance_sortable: bool = True,
) -> PriceList:
    merged = merge_prices(partials, key_func)
    fill_missing_prices(merged.stations, config.types, merged.max_prices_by_type)
    stations = filter_stations(merged.stations, config, radius=radius)

    if distance_sortable:
        by_distance = sort_by_distance(stations)
        by_price = sort_by_price(by_distance, config.sort_by)
    else:
        by_price = sort_by_price(stations, config.sort_by)
        by_distance = list(by_price)

    return PriceList(
        types=list(types),
        unit=unit,
        currency=currency,
        by_price=by_price,
        by_distance=by_distance,
    )
