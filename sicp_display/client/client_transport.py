# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display client abstract transport interface.

A transport carries one framed command packet to a display and hands back
whatever bytes the display sent in reply. It knows nothing about opcodes,
sentinels or display state; those belong to SicpReply and SicpDisplayClient.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import Packet


class SicpClientTransport(ABC):
    @abstractmethod
    async def transmit(
            self,
            command_packet: Packet,
          ) -> bytes:
        """Sends a command packet and returns all reply bytes received.

        An empty result means the display closed the connection without
        replying.

        Raises SicpTimeoutError if no bytes arrived before the deadline,
        SicpConnectionError if the display could not be reached or the
        transport has been shut down.
        """
        raise NotImplementedError()

    @abstractmethod
    async def shutdown(self) -> None:
        """Stops accepting new transmissions. Idempotent; does not wait."""
        raise NotImplementedError()

    async def wait(self) -> None:
        """Waits until transmissions started before shutdown() have finished.

        Transports that hold nothing open between transmissions have nothing
        to wait for.
        """

    async def aclose(self) -> None:
        """Shuts the transport down and waits for it to finish."""
        await self.shutdown()
        await self.wait()

    async def __aenter__(self) -> SicpClientTransport:
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
          ) -> None:
        try:
            await self.aclose()
        except Exception as close_exc:
            if exc is None:
                raise
            # the body's exception wins
            logger.debug(f"{self}: Error while closing after {exc!r}: {close_exc!r}")
