from .base import FuelProvider
from .registry import PROVIDERS, create_provider, get_provider_class

__all__ = ["FuelProvider", "PROVIDERS", "create_provider", "get_provider_class"]
