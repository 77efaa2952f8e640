# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display emulator.

Provides a simple emulation of a SICP display on TCP/IP.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    Packet,
    Opcode,
    PowerStatus,
    ACK,
    NACK,
    NAV,
    FILLER,
    BROADCAST_TARGET_ID,
  )
from ..constants import DEFAULT_PORT

from .session import SicpDisplayEmulatorSession

# None in place of a packet means the session's client has half-closed
EmulatorRequest = Tuple[SicpDisplayEmulatorSession, Optional[Packet]]

class SicpDisplayEmulator(AsyncContextManager['SicpDisplayEmulator']):
    target_id: int
    group_id: int
    group_enabled: bool
    bind_addr: str
    port: int
    close_after_reply: bool
    silent: bool

    power: PowerStatus
    input_code: Optional[int] = None
    volume: int
    muted: bool
    brightness: int
    step_codes: Dict[int, Tuple[str, int]]
    mute_set_code: Optional[int]
    mute_toggle_code: Optional[int]

    received: List[Packet]
    """Every packet received, in order, valid or not."""

    sessions: Dict[int, SicpDisplayEmulatorSession]
    next_session_id: int = 0
    requests: asyncio.Queue[Optional[EmulatorRequest]]
    server: Optional[asyncio.Server] = None
    handler_task: Optional[asyncio.Task[None]] = None

    def __init__(
            self,
            target_id: int = 1,
            group_id: int = 0,
            group_enabled: bool = True,
            bind_addr: Optional[str] = None,
            port: int = DEFAULT_PORT,
            *,
            power_on: bool = False,
            volume: int = 15,
            brightness: int = 50,
            volume_up_code: Optional[int] = None,
            volume_down_code: Optional[int] = None,
            brightness_up_code: Optional[int] = None,
            brightness_down_code: Optional[int] = None,
            mute_set_code: Optional[int] = None,
            mute_toggle_code: Optional[int] = None,
            close_after_reply: bool = False,
            silent: bool = False,
          ):
        """Creates an emulated display.

           Args:
             target_id, group_id, group_enabled:
                   The display's address. Packets for other targets are ignored;
                   broadcast packets are applied without reply.
             bind_addr, port: Where to listen. Port 0 picks a free port; see bound_port.
             volume_up_code ... mute_toggle_code:
                   Optional codes the emulated model understands for relative
                   volume/brightness and for mute.
             close_after_reply:
                   If True, the connection is closed as soon as the reply is sent,
                   rather than when the client half-closes.
             silent:
                   If True, nothing is ever sent and connections are held open
                   until the client gives up.
        """
        self.target_id = target_id
        self.group_id = group_id
        self.group_enabled = group_enabled
        self.bind_addr = '127.0.0.1' if bind_addr is None else bind_addr
        self.port = port
        self.close_after_reply = close_after_reply
        self.silent = silent
        self.power = PowerStatus.ON if power_on else PowerStatus.OFF
        self.volume = volume
        self.muted = False
        self.brightness = brightness
        self.step_codes = {}
        for code, axis, delta in (
                (volume_up_code, "volume", 1),
                (volume_down_code, "volume", -1),
                (brightness_up_code, "brightness", 1),
                (brightness_down_code, "brightness", -1),
              ):
            if code is not None:
                self.step_codes[code] = (axis, delta)
        self.mute_set_code = mute_set_code
        self.mute_toggle_code = mute_toggle_code
        self.received = []
        self.sessions = {}
        self.requests = asyncio.Queue()

    @property
    def bound_port(self) -> int:
        """The port actually being listened on (useful when port=0)."""
        if self.server is None or not self.server.sockets:
            return self.port
        return self.server.sockets[0].getsockname()[1]

    def alloc_session_id(self, session: SicpDisplayEmulatorSession) -> int:
        result = self.next_session_id
        self.next_session_id += 1
        self.sessions[result] = session
        return result

    def free_session_id(self, session_id: int) -> None:
        self.sessions.pop(session_id, None)

    def on_packet_received(self, session: SicpDisplayEmulatorSession, packet: Packet) -> None:
        """Called when a packet is received from a session."""
        self.requests.put_nowait((session, packet))

    def on_eof_received(self, session: SicpDisplayEmulatorSession) -> None:
        """Called when a session's client shuts down its write side."""
        self.requests.put_nowait((session, None))

    def _reply_packet(self, payload: ByteSequence) -> Packet:
        return Packet.encode(self.target_id, self.group_id if self.group_enabled else None, payload)

    def ack(self) -> Packet:
        return self._reply_packet([0x00, ACK])

    def nack(self) -> Packet:
        return self._reply_packet([0x00, NACK])

    def not_available(self) -> Packet:
        return self._reply_packet([0x00, NAV])

    def handle_command(self, payload: bytes) -> List[Packet]:
        """Applies a command payload to the emulated state and returns the reply packets."""
        if len(payload) == 0:
            return [self.nack()]
        opcode = payload[0]
        params = payload[1:]

        if opcode == Opcode.POWER_GET:
            return [self.ack(), self._reply_packet([Opcode.POWER_GET, self.power])]

        if opcode == Opcode.POWER_SET:
            if len(params) < 1 or params[0] not in (PowerStatus.ON, PowerStatus.OFF):
                return [self.nack()]
            self.power = PowerStatus(params[0])
            logger.debug(f"Emulator: power -> {self.power.name}")
            return [self.ack()]

        if self.power != PowerStatus.ON:
            return [self.not_available()]

        if opcode == Opcode.INPUT_SET and len(params) >= 1:
            self.input_code = params[0]
        elif opcode == Opcode.VOLUME_SET and len(params) >= 1:
            self.volume = params[0]
        elif opcode == Opcode.VIDEO_PARAMETERS_SET and len(params) >= 1:
            if params[0] != FILLER:
                self.brightness = params[0]
        elif opcode in self.step_codes:
            axis, delta = self.step_codes[opcode]
            setattr(self, axis, max(0, min(100, getattr(self, axis) + delta)))
        elif opcode == self.mute_set_code and len(params) >= 1:
            self.muted = params[0] != 0
        elif opcode == self.mute_toggle_code:
            self.muted = not self.muted
        else:
            return [self.not_available()]
        return [self.ack()]

    def handle_request_packet(self, packet: Packet) -> List[Packet]:
        """Handle a single request packet, and return reply packets."""
        self.received.append(packet)
        if not packet.is_valid:
            logger.debug(f"Emulator: Invalid packet {packet}; sending NACK")
            return [self.nack()]
        if packet.target_id == BROADCAST_TARGET_ID:
            self.handle_command(packet.payload)
            return []
        if packet.target_id != self.target_id:
            logger.debug(f"Emulator: Ignoring packet for target {packet.target_id}")
            return []
        return self.handle_command(packet.payload)

    async def handle_requests(self) -> None:
        """Handle requests from sessions."""
        while True:
            request = await self.requests.get()
            try:
                if request is None:
                    logger.debug("Emulator handler: Received EOF; exiting")
                    break
                session, packet = request
                try:
                    if packet is None:
                        if not self.silent:
                            session.close()
                        continue
                    logger.debug(f"{session}: Emulator handler: received packet: {packet}")
                    reply_packets = self.handle_request_packet(packet)
                    if self.silent:
                        continue
                    for reply_packet in reply_packets:
                        logger.debug(f"{session}: Emulator handler: Sending reply packet: {reply_packet}")
                        session.write(reply_packet.raw_data)
                    if self.close_after_reply:
                        session.close()
                except Exception as e:
                    logger.exception(f"{session}: Handler task: Exception while handling request; killing session: {e}")
                    session.close()
            finally:
                self.requests.task_done()

    async def start(self) -> None:
        """Starts the request handler and begins listening."""
        loop = asyncio.get_running_loop()
        self.handler_task = loop.create_task(self.handle_requests())
        try:
            self.server = await loop.create_server(
                lambda: SicpDisplayEmulatorSession(self),
                host=self.bind_addr,
                port=self.port)
        except BaseException:
            await self.close()
            raise
        logger.debug(f"Emulator: Listening on {self.bind_addr}:{self.bound_port}")

    async def serve_forever(self) -> None:
        """Runs the emulator until the calling task is cancelled."""
        async with self:
            assert self.server is not None
            await self.server.serve_forever()

    async def close(self) -> None:
        """Stops listening, drops open connections and stops the request handler.
           Requests already queued are handled first."""
        server = self.server
        self.server = None
        if server is not None:
            server.close()
            for session in list(self.sessions.values()):
                session.close()
            await server.wait_closed()
        handler_task = self.handler_task
        self.handler_task = None
        if handler_task is not None:
            self.requests.put_nowait(None)
            await handler_task

    async def __aenter__(self) -> SicpDisplayEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        await self.close()
