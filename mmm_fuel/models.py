from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# float: real price, str: filled placeholder (">1.7" or "-"), None: unknown.
Price = Union[float, str, None]


def normalize_price(value: Any) -> Optional[float]:
    """Map every upstream spelling of "no price" to ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", ".")
        if not value:
            return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if price != price or price <= 0:
        return None
    return price


def is_real_price(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Station:
    id: str
    name: str
    address: str
    prices: Dict[str, Price] = field(default_factory=dict)
    coordinates: Optional[Coordinates] = None
    distance: Optional[float] = None
    is_open: bool = True
    # Set on per-type partials; None when the entry carries all types.
    fuel_type: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "coordinates": self.coordinates.as_dict() if self.coordinates else None,
            "distance": self.distance,
            "isOpen": self.is_open,
            "prices": dict(self.prices),
        }


@dataclass
class PriceList:
    types: List[str]
    unit: str
    currency: str
    by_price: List[Station]
    by_distance: List[Station]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "types": list(self.types),
            "unit": self.unit,
            "currency": self.currency,
            "byPrice": [station.as_dict() for station in self.by_price],
            "byDistance": [station.as_dict() for station in self.by_distance],
        }
