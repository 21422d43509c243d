from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

from aiohttp import ClientSession

from . import async_setup, async_unload
from .config import ENV_PREFIX, load_config_from_env
from .const import NOTIFICATION_PRICELIST
from .exceptions import ConfigError
from .models import PriceList
from .providers import create_provider

_LOGGER = logging.getLogger(__name__)


def send_notification(notification: str, payload: object) -> None:
    print(json.dumps({"notification": notification, "payload": payload}), flush=True)


def send_price_list(price_list: PriceList) -> None:
    send_notification(NOTIFICATION_PRICELIST, price_list.as_dict())


async def fetch_once(config) -> int:
    async with ClientSession() as session:
        try:
            provider = create_provider(session, config)
        except ConfigError as err:
            _LOGGER.error("Couldn't set up provider %s: %s", config.provider, err)
            return 1
        if provider is None:
            _LOGGER.error("Couldn't load provider %s", config.provider)
            return 1
        await provider.async_setup()
        try:
            send_price_list(await provider.get_data())
        except Exception as err:
            _LOGGER.error("Fetching %s data failed: %s", config.provider, err)
            return 1
        finally:
            await provider.async_close()
    return 0


async def run_forever(config) -> int:
    async with ClientSession() as session:
        coordinator = await async_setup(config, session, send_price_list)
        if coordinator is None:
            return 1
        try:
            await asyncio.Event().wait()
        finally:
            await async_unload(coordinator)
    return 0


def main() -> None:
    logging.basicConfig(
        stream=sys.stderr,
        level=os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config_from_env()
    except ConfigError as err:
        raise SystemExit(str(err))

    once = os.environ.get(f"{ENV_PREFIX}ONCE", "").strip().lower() in ("1", "true", "yes")
    runner = fetch_once if once else run_forever
    try:
        exit_code = asyncio.run(runner(config))
    except KeyboardInterrupt:
        exit_code = 0
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
