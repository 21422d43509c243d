"""Explicit map from configured provider name to adapter class."""
from __future__ import annotations

from typing import Dict, Optional, Type

from aiohttp import ClientSession

from ..config import ProviderConfig
from .autoblog import AutoblogProvider
from .base import FuelProvider
from .gasbuddy import GasbuddyProvider
from .nsw import NswProvider
from .spritpreisrechner import SpritpreisrechnerProvider
from .tankerkoenig import TankerkoenigProvider

PROVIDERS: Dict[str, Type[FuelProvider]] = {
    provider.name: provider
    for provider in (
        TankerkoenigProvider,
        SpritpreisrechnerProvider,
        NswProvider,
        AutoblogProvider,
        GasbuddyProvider,
    )
}


def get_provider_class(name: str) -> Optional[Type[FuelProvider]]:
    return PROVIDERS.get(name.strip().lower())


def create_provider(session: ClientSession, config: ProviderConfig) -> Optional[FuelProvider]:
    provider_class = get_provider_class(config.provider)
    if provider_class is None:
        return None
    return provider_class(session, config)
