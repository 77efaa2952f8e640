# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Serializing SICP display client transport.

Provides an implementation of SicpClientTransport that funnels all
transmissions from any number of concurrent callers through a single worker
task, so that at most one transmission to the display is in flight at a time
and transmissions go out in the order they were submitted.

SICP replies carry no request id, and the embedded TCP stacks in the displays
do not cope well with bursts of concurrent connections.
"""

from __future__ import annotations

import asyncio
from asyncio import Future

from ..internal_types import *
from ..exceptions import SicpConnectionError
from ..pkg_logging import logger
from ..protocol import Packet

from .client_transport import SicpClientTransport

PendingRequest = Tuple[Packet, 'Future[bytes]']

class QueuedSicpClientTransport(SicpClientTransport):
    """SICP display client transport that serializes transmissions over
       another transport."""

    child_transport: SicpClientTransport
    """The transport that performs each transmission."""

    requests: asyncio.Queue[Optional[PendingRequest]]
    """FIFO of pending transmissions. None tells the worker to exit."""

    worker_task: Optional[asyncio.Task[None]] = None
    shutting_down: bool = False

    def __init__(self, child_transport: SicpClientTransport) -> None:
        super().__init__()
        self.child_transport = child_transport
        self.requests = asyncio.Queue()

    def is_shutting_down(self) -> bool:
        return self.shutting_down

    def _ensure_worker(self) -> None:
        # a worker cancelled from outside (e.g. at loop teardown) is replaced
        if self.worker_task is None or self.worker_task.done():
            self.worker_task = asyncio.get_running_loop().create_task(self._run_worker())

    async def _run_worker(self) -> None:
        """Processes pending transmissions one at a time, in order.

        Each request resolves its own future; a failed transmission does not affect
        the requests queued behind it.
        """
        while True:
            request = await self.requests.get()
            try:
                if request is None:
                    logger.debug(f"{self}: Worker received EOF; exiting")
                    break
                packet, future = request
                if future.done():
                    # caller gave up (cancelled) before its turn came
                    continue
                try:
                    result = await self.child_transport.transmit(packet)
                except asyncio.CancelledError:
                    if not future.done():
                        future.set_exception(SicpConnectionError(f"{self}: Transport shut down during transmission"))
                    raise
                except Exception as e:
                    logger.debug(f"{self}: Transmission of {packet} failed: {e!r}")
                    if not future.done():
                        future.set_exception(e)
                else:
                    if not future.done():
                        future.set_result(result)
            finally:
                self.requests.task_done()

    # @abstractmethod
    async def transmit(self, command_packet: Packet) -> bytes:
        """Queues a command packet and waits for its turn and its reply bytes."""
        if self.shutting_down:
            raise SicpConnectionError(f"{self}: Transport is shut down")
        self._ensure_worker()
        future: Future[bytes] = asyncio.get_running_loop().create_future()
        self.requests.put_nowait((command_packet, future))
        return await future

    def _fail_pending(self) -> None:
        while not self.requests.empty():
            request = self.requests.get_nowait()
            self.requests.task_done()
            if request is not None:
                _, future = request
                if not future.done():
                    future.set_exception(SicpConnectionError(f"{self}: Transport shut down before transmission"))

    # @abstractmethod
    async def shutdown(self) -> None:
        """Stops accepting new transmissions, fails any that have not started,
        and lets an in-flight transmission finish. Does not wait.
        """
        if self.shutting_down:
            return
        self.shutting_down = True
        self._fail_pending()
        self.requests.put_nowait(None)
        await self.child_transport.shutdown()

    # @abstractmethod
    async def wait(self) -> None:
        """Waits for the worker to exit and the child transport to close."""
        try:
            worker_task = self.worker_task
            if worker_task is not None and not worker_task.done():
                await worker_task
        finally:
            await self.child_transport.wait()

    def __str__(self) -> str:
        return f"QueuedSicpClientTransport({self.child_transport})"

    def __repr__(self) -> str:
        return str(self)
