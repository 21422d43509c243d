"""Nearby fuel prices for the MagicMirror display, from interchangeable providers."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from aiohttp import ClientSession

from .config import ProviderConfig
from .coordinator import PriceListCoordinator, PriceListListener
from .exceptions import ConfigError
from .providers import create_provider

_LOGGER = logging.getLogger(__name__)


async def async_setup(
    config: ProviderConfig,
    session: ClientSession,
    on_price_list: Optional[PriceListListener] = None,
) -> Optional[PriceListCoordinator]:
    """Resolve the configured provider and start polling it.

    Returns ``None`` without polling when the provider cannot be set up.
    """
    try:
        provider = create_provider(session, config)
    except ConfigError as err:
        _LOGGER.error("Couldn't set up provider %s: %s", config.provider, err)
        return None
    if provider is None:
        _LOGGER.error("Couldn't load provider %s", config.provider)
        return None

    coordinator = PriceListCoordinator(
        provider,
        update_interval=timedelta(seconds=config.update_interval),
    )
    if on_price_list is not None:
        coordinator.async_add_listener(on_price_list)
    await coordinator.async_start()
    return coordinator


async def async_unload(coordinator: PriceListCoordinator) -> None:
    await coordinator.async_stop()
