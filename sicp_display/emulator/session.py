# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display emulator session.

One session per accepted TCP connection.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import split_packets

if TYPE_CHECKING:
    from .emulator_impl import SicpDisplayEmulator

class SicpDisplayEmulatorSession(asyncio.Protocol):
    emulator: SicpDisplayEmulator
    session_id: int
    transport: Optional[asyncio.Transport] = None
    buffer: bytes
    closed: bool = False

    def __init__(self, emulator: SicpDisplayEmulator):
        super().__init__()
        self.emulator = emulator
        self.buffer = b''
        self.session_id = emulator.alloc_session_id(self)

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport
        logger.debug(f"{self}: Connection made")

    def data_received(self, data: bytes) -> None:
        logger.debug(f"{self}: Received {len(data)} bytes: {data.hex(' ')}")
        self.buffer += data
        packets, self.buffer = split_packets(self.buffer, has_group=self.emulator.group_enabled)
        for packet in packets:
            self.emulator.on_packet_received(self, packet)

    def eof_received(self) -> Optional[bool]:
        logger.debug(f"{self}: EOF received")
        self.emulator.on_eof_received(self)
        # keep the transport open; the emulator closes it after pending replies are written
        return True

    def connection_lost(self, exc: Optional[Exception]) -> None:
        logger.debug(f"{self}: Connection lost: {exc}")
        self.closed = True
        self.emulator.free_session_id(self.session_id)

    def write(self, data: bytes) -> None:
        if self.transport is not None and not self.closed and not self.transport.is_closing():
            self.transport.write(data)

    def close(self) -> None:
        if self.transport is not None and not self.transport.is_closing():
            self.transport.close()

    def __str__(self) -> str:
        return f"SicpDisplayEmulatorSession({self.session_id})"

    def __repr__(self) -> str:
        return str(self)
