# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display TCP/IP client transport.

Provides an implementation of SicpClientTransport over TCP/IP. A fresh
connection is opened for every transmission; the display firmware is not
known to handle several commands on one connection reliably.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import SicpDisplayError, SicpTimeoutError, SicpConnectionError
from ..constants import DEFAULT_TIMEOUT, DEFAULT_PORT, HALF_CLOSE_DELAY
from ..pkg_logging import logger
from ..protocol import Packet

from .client_transport import SicpClientTransport

READ_CHUNK_SIZE = 1024

class TcpSicpClientTransport(SicpClientTransport):
    """SICP display TCP/IP client transport.

    Not safe for concurrent transmissions to the same display; wrap it in a
    QueuedSicpClientTransport to serialize callers.
    """

    host: str
    port: int
    timeout_secs: float
    half_close_secs: float
    closed: bool = False

    def __init__(
            self,
            host: str,
            port: int=DEFAULT_PORT,
            timeout_secs: float=DEFAULT_TIMEOUT,
            half_close_secs: float=HALF_CLOSE_DELAY,
          ) -> None:
        """Initializes the transport. Does not connect.

           Args:
             host: The hostname or IPV4 address of the display.
             port: The TCP/IP port number of the display's SICP service.
             timeout_secs: The connect timeout, and the maximum time to wait
                   with no reply bytes arriving, in seconds.
             half_close_secs: Seconds after the command is written before this
                   side shuts down writing, prompting displays that hold
                   the connection open to close it.
        """
        super().__init__()
        self.host = host
        self.port = port
        self.timeout_secs = timeout_secs
        self.half_close_secs = half_close_secs

    async def _connect(self) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        logger.debug(f"{self}: Connecting")
        try:
            return await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), self.timeout_secs)
        except asyncio.TimeoutError as e:
            raise SicpTimeoutError(f"{self}: Timed out connecting to display") from e
        except OSError as e:
            raise SicpConnectionError(f"{self}: Unable to connect to display: {e}") from e

    async def _read_reply(self, reader: asyncio.StreamReader) -> bytes:
        """Accumulates reply bytes until the display closes the connection, or
        until no bytes arrive for timeout_secs.
        """
        data = b''
        while True:
            try:
                chunk = await asyncio.wait_for(reader.read(READ_CHUNK_SIZE), self.timeout_secs)
            except asyncio.TimeoutError as e:
                if len(data) == 0:
                    raise SicpTimeoutError(f"{self}: Timed out waiting for reply") from e
                logger.debug(f"{self}: Reply idle timeout with {len(data)} bytes; treating as complete")
                break
            if len(chunk) == 0:
                break
            data += chunk
        return data

    def _half_close(self, writer: asyncio.StreamWriter) -> None:
        try:
            if not writer.is_closing() and writer.can_write_eof():
                logger.debug(f"{self}: Half-closing connection")
                writer.write_eof()
        except OSError:
            logger.debug(f"{self}: Exception while half-closing connection", exc_info=True)

    # @abstractmethod
    async def transmit(self, command_packet: Packet) -> bytes:
        """Opens a connection, writes the packet once, collects the reply, and closes."""
        if self.closed:
            raise SicpConnectionError(f"{self}: Transport is closed")
        reader, writer = await self._connect()
        half_close_timer: Optional[asyncio.TimerHandle] = None
        try:
            logger.debug(f"{self}: Writing {len(command_packet)} bytes: {command_packet.raw_data.hex(' ')}")
            writer.write(command_packet.raw_data)
            try:
                await asyncio.wait_for(writer.drain(), self.timeout_secs)
            except asyncio.TimeoutError as e:
                raise SicpTimeoutError(f"{self}: Timed out writing command") from e
            half_close_timer = asyncio.get_running_loop().call_later(
                self.half_close_secs, self._half_close, writer)
            data = await self._read_reply(reader)
            logger.debug(f"{self}: Read {len(data)} reply bytes: {data.hex(' ')}")
        except (ConnectionError, OSError) as e:
            if isinstance(e, SicpDisplayError):
                raise
            raise SicpConnectionError(f"{self}: Connection failed during transmission: {e}") from e
        finally:
            if half_close_timer is not None:
                half_close_timer.cancel()
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                logger.debug(f"{self}: Exception while waiting for connection to close", exc_info=True)
        return data

    # @abstractmethod
    async def shutdown(self) -> None:
        """Refuses further transmissions. Connections are per-transmission, so
        there is nothing else to release."""
        self.closed = True

    def __str__(self) -> str:
        return f"TcpSicpClientTransport({self.host}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
