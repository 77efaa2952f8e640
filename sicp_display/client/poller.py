# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Background power polling for a SICP display.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger

if TYPE_CHECKING:
    from .client_impl import SicpDisplayClient

class PowerPoller:
    """Periodically queries a display's power state so the client's local view
    stays fresh without caller-driven traffic.

    Every tick's failure is discarded; the next tick is always scheduled.
    """
    client: SicpDisplayClient
    interval_secs: float
    task: Optional[asyncio.Task[None]] = None
    tick_count: int = 0

    def __init__(self, client: SicpDisplayClient, interval_secs: float):
        self.client = client
        self.interval_secs = interval_secs

    @property
    def enabled(self) -> bool:
        return self.interval_secs > 0

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self) -> None:
        """Starts polling. Has no effect if polling is disabled or already running."""
        if not self.enabled or self.running:
            return
        logger.debug(f"{self}: Starting")
        self.task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_secs)
            await self.tick()

    async def tick(self) -> None:
        """Runs one poll. Never raises (except for cancellation)."""
        self.tick_count += 1
        try:
            await self.client.get_power()
        except Exception as e:
            logger.debug(f"{self}: Poll failed; ignoring: {e!r}")

    async def stop(self) -> None:
        """Stops polling and waits for the polling task to exit."""
        task = self.task
        self.task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def __str__(self) -> str:
        return f"PowerPoller({self.client.config.name}, every {self.interval_secs}s)"

    def __repr__(self) -> str:
        return str(self)
