from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Awaitable, Callable


class SlotRefreshSession:
    """
    Re-runs a booked-slot refresh on a fixed interval until stopped.

    Owned by a booking wizard while the user is choosing a time. A failing
    refresh is logged and the loop keeps the current data. Usable as an
    async context manager so every exit path cancels the task.
    """

    def __init__(
        self,
        refresh: Callable[[], Awaitable[object]],
        interval_seconds: float = 30.0,
        name: str = "slot-refresh",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._refresh = refresh
        self._interval = interval_seconds
        self._name = name
        self._task: asyncio.Task | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)
        self._logger.debug("Slot refresh started", extra={"reason": self._name})

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        if task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._logger.debug("Slot refresh stopped", extra={"reason": self._name})

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._refresh()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._logger.warning(
                    "Slot refresh failed, keeping current data",
                    extra={"reason": self._name, "error": str(e)},
                )

    async def __aenter__(self) -> SlotRefreshSession:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
