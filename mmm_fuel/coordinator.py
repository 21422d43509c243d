from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Callable, Dict, Optional, Set

from .exceptions import UpdateFailed
from .models import PriceList
from .providers.base import FuelProvider

_LOGGER = logging.getLogger(__name__)

PriceListListener = Callable[[PriceList], None]


class PriceListCoordinator:
    """Poll one provider on a fixed interval and hand out the last good price list.

    A failed poll is logged and skipped: ``data`` keeps the previous result and
    listeners are not called. A tick that fires while the previous poll is
    still running is skipped as well.
    """

    def __init__(
        self,
        provider: FuelProvider,
        *,
        update_interval: timedelta,
        name: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.name = name or f"mmm_fuel_{provider.name}"
        self.update_interval = update_interval
        self.data: Optional[PriceList] = None
        self.last_update_success = True
        self.last_exception: Optional[Exception] = None
        self._listeners: Dict[int, PriceListListener] = {}
        self._next_listener_id = 0
        self._in_flight = False
        self._poll_task: Optional[asyncio.Task] = None
        self._refresh_tasks: Set[asyncio.Task] = set()

    def async_add_listener(self, listener: PriceListListener) -> Callable[[], None]:
        listener_id = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[listener_id] = listener

        def remove_listener() -> None:
            self._listeners.pop(listener_id, None)

        return remove_listener

    async def _async_update_data(self) -> PriceList:
        try:
            return await self.provider.get_data()
        except Exception as err:
            raise UpdateFailed(f"Fetching {self.name} data failed: {err}") from err

    async def async_refresh(self) -> bool:
        if self._in_flight:
            _LOGGER.debug("Skipping %s refresh, previous one still running", self.name)
            return False

        self._in_flight = True
        try:
            data = await self._async_update_data()
        except UpdateFailed as err:
            if self.last_update_success:
                _LOGGER.error("%s", err)
            else:
                _LOGGER.debug("%s", err)
            self.last_update_success = False
            self.last_exception = err
            return False
        finally:
            self._in_flight = False

        if not self.last_update_success:
            _LOGGER.info("Fetching %s data recovered", self.name)
        self.last_update_success = True
        self.last_exception = None
        self.data = data
        for listener in list(self._listeners.values()):
            try:
                listener(data)
            except Exception:
                _LOGGER.exception("Error delivering %s price list to listener", self.name)
        return True

    def _schedule_refresh(self) -> None:
        task = asyncio.create_task(self.async_refresh())
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    async def _async_poll(self) -> None:
        interval = self.update_interval.total_seconds()
        while True:
            self._schedule_refresh()
            await asyncio.sleep(interval)

    async def async_start(self) -> None:
        if self._poll_task is not None:
            return
        await self.provider.async_setup()
        self._poll_task = asyncio.create_task(self._async_poll())

    async def async_stop(self) -> None:
        tasks = list(self._refresh_tasks)
        if self._poll_task is not None:
            tasks.append(self._poll_task)
            self._poll_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self.provider.async_close()
