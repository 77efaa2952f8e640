# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display client.

Translates high-level intents (power, input, volume, mute, brightness) into
SICP commands, and keeps the local view of the display's state.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import (
    SicpDisplayError,
    DeviceRejectedError,
    UnknownInputError,
  )
from ..constants import BACKLIGHT_ON_MIN_BRIGHTNESS
from ..pkg_logging import logger
from ..protocol import (
    SicpCommand,
    SicpReply,
    PowerStatus,
    DEFAULT_BRIGHTNESS_CODE,
  )

from .client_transport import SicpClientTransport
from .client_config import SicpDisplayConfig, InputDefinition
from .state import (
    PowerState,
    ControlAxisState,
    DisplayState,
    StateChange,
    StateListener,
  )
from .poller import PowerPoller

class SicpDisplayClient:
    """SICP display client.

    All state in self.state is committed only after the command that changes it
    has been answered by the display without NACK or "not available". Failed
    operations raise and leave the state unchanged; only get_power() swallows
    failures, assuming an unreachable display is off.
    """

    transport: SicpClientTransport
    config: SicpDisplayConfig
    state: DisplayState
    inputs_by_id: Dict[int, InputDefinition]
    poller: PowerPoller
    _listeners: List[StateListener]

    def __init__(
            self,
            transport: SicpClientTransport,
            config: Optional[SicpDisplayConfig]=None,
          ):
        self.transport = transport
        self.config = SicpDisplayConfig(base_config=config)
        self.inputs_by_id = { inp.identifier: inp for inp in self.config.inputs }
        initial_input = self.config.inputs[0].identifier if len(self.config.inputs) > 0 else None
        self.state = DisplayState(self.config.volume, self.config.brightness, active_input=initial_input)
        self.poller = PowerPoller(self, self.config.poll_interval_secs)
        self._listeners = []

    # ---- state-change notification ----

    def add_state_listener(self, listener: StateListener) -> None:
        """Registers a callback invoked with a StateChange after every committed change."""
        self._listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, field: str, value: Any) -> None:
        change = StateChange(field, value)
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception(f"{self}: State listener raised on {change}; ignoring")

    # ---- wire ----

    async def transact(self, command: SicpCommand) -> SicpReply:
        """Sends a command and classifies the reply. Does not interpret the classification."""
        packet = command.to_packet(self.config.target_id, self.config.packet_group_id)
        raw_reply = await self.transport.transmit(packet)
        reply = SicpReply(raw_reply)
        logger.debug(f"{self}: {command} -> {reply}")
        return reply

    async def transact_checked(self, command: SicpCommand) -> SicpReply:
        """Sends a command; raises DeviceRejectedError if the display refuses it.

        Indeterminate replies (including empty ones) are returned without error.
        """
        try:
            reply = await self.transact(command)
        except SicpDisplayError as e:
            logger.warning(f"{self}: {command.name} failed: {e}")
            raise
        if reply.is_rejected:
            logger.warning(f"{self}: {command.name} rejected by display: {reply}")
            raise DeviceRejectedError(f"{self}: Display rejected {command}: {reply}", reply)
        return reply

    # ---- power ----

    @property
    def power(self) -> PowerState:
        return self.state.power

    def _commit_power(self, power: PowerState) -> None:
        previous = self.state.power
        self.state.power = power
        if power != previous:
            self._notify("power", power)
            if power == PowerState.OFF:
                self._notify("inputs_cleared", None)

    async def get_power(self) -> PowerState:
        """Queries the display's power state. Never raises.

        An unreachable display, or a rejected or indeterminate reply, is taken
        to mean the display is off. An acknowledged reply that carries no
        recognizable status leaves the known power state unchanged.
        """
        try:
            reply = await self.transact(SicpCommand.power_get())
        except SicpDisplayError as e:
            logger.warning(f"{self}: Power query failed (display unreachable?); assuming off: {e}")
            self._commit_power(PowerState.OFF)
            return PowerState.OFF
        status = reply.power_status(has_group=self.config.group_enabled)
        if status is not None:
            power = PowerState.ON if status == PowerStatus.ON else PowerState.OFF
        elif reply.is_ack:
            logger.debug(f"{self}: No power status in acknowledged reply {reply}; keeping {self.state.power.value}")
            return self.state.power
        else:
            logger.debug(f"{self}: Unusable power reply {reply}; assuming off")
            power = PowerState.OFF
        self._commit_power(power)
        return power

    async def set_power(self, on: Union[bool, PowerState]) -> None:
        """Turns the display on or off."""
        if isinstance(on, PowerState):
            on = on == PowerState.ON
        await self.transact_checked(SicpCommand.power_set(on))
        self._commit_power(PowerState.ON if on else PowerState.OFF)

    async def ensure_on(self) -> None:
        """Turns the display on if it is not known to be on, then waits for it to settle.

        Does nothing if the display is already on.
        """
        if self.state.power != PowerState.ON:
            await self.set_power(True)
            await asyncio.sleep(self.config.power_settle_secs)

    async def get_active_state(self) -> bool:
        return (await self.get_power()) == PowerState.ON

    async def set_active_state(self, on: bool) -> None:
        await self.set_power(on)

    # ---- input ----

    def get_active_input(self) -> Optional[int]:
        return self.state.active_input

    async def set_input(self, identifier: int) -> None:
        """Selects the input with the given identifier, powering the display on first if necessary."""
        inp = self.inputs_by_id.get(identifier)
        if inp is None:
            raise UnknownInputError(f"{self}: Unknown input identifier {identifier}")
        await self.ensure_on()
        await self.transact_checked(SicpCommand.input_set(inp.code))
        self.state.active_input = identifier
        self._notify("active_input", identifier)

    # ---- control axes ----

    async def _drive_axis(
            self,
            name: str,
            axis: ControlAxisState,
            target: int,
            fallback_code: Optional[int]=None,
          ) -> bool:
        """Sends the commands that move an axis to target. Returns False if the
           axis is unconfigured and there is no fallback code."""
        config = axis.config
        mode = config.mode
        if mode == "absolute":
            assert config.set_code is not None
            await self.transact_checked(
                SicpCommand.absolute_set(f"{name}.set", config.set_code, target, fill_count=config.fill_count))
        elif mode == "relative":
            assert config.up_code is not None and config.down_code is not None
            steps = target - axis.current
            if steps > 0:
                command = SicpCommand.step(f"{name}.up", config.up_code)
            else:
                command = SicpCommand.step(f"{name}.down", config.down_code)
            for _ in range(abs(steps)):
                await self.transact_checked(command)
                await asyncio.sleep(config.step_delay_secs)
        elif fallback_code is not None:
            logger.debug(f"{self}: No {name} codes configured; using default command 0x{fallback_code:02X}")
            await self.transact_checked(
                SicpCommand.absolute_set(f"{name}.set", fallback_code, target, fill_count=config.fill_count))
        else:
            return False
        return True

    def get_volume(self) -> int:
        return self.state.volume.current

    async def set_volume(self, value: Union[int, float]) -> None:
        """Sets the volume, clamped to the configured range, powering the display on first if necessary."""
        volume = self.state.volume
        target = volume.clamp(value)
        await self.ensure_on()
        if not await self._drive_axis("volume", volume, target):
            logger.warning(f"{self}: Volume codes not configured; volume {target} not sent to display")
        volume.current = target
        self._notify("volume", target)

    def get_mute(self) -> bool:
        return self.state.volume.muted

    async def set_mute(self, muted: bool) -> None:
        """Mutes or unmutes, powering the display on first if necessary.

        In toggle mode, nothing is sent if the display is already in the requested state.
        """
        volume = self.state.volume
        config = volume.config
        muted = bool(muted)
        mode = config.mute_mode
        if mode == "unconfigured":
            logger.warning(f"{self}: Mute codes not configured; ignoring mute={muted}")
            return
        await self.ensure_on()
        if mode == "absolute":
            assert config.mute_set_code is not None
            await self.transact_checked(SicpCommand.mute_set(config.mute_set_code, muted))
        elif muted != volume.muted:
            assert config.mute_toggle_code is not None
            await self.transact_checked(SicpCommand.mute_toggle(config.mute_toggle_code))
        volume.muted = muted
        self._notify("mute", muted)

    def get_brightness(self) -> int:
        return self.state.brightness.current

    async def set_brightness(self, value: Union[int, float]) -> None:
        """Sets the backlight brightness, clamped to the configured range.

        Ignored (not an error) while the display is off; brightness changes never
        power the display on.
        """
        brightness = self.state.brightness
        target = brightness.clamp(value)
        if self.state.power != PowerState.ON:
            logger.info(f"{self}: Ignoring brightness {target} because display is off")
            return
        await self._drive_axis("brightness", brightness, target, fallback_code=DEFAULT_BRIGHTNESS_CODE)
        brightness.current = target
        self._notify("brightness", target)

    def get_backlight_on(self) -> bool:
        """True iff the display is on and brightness is above its minimum."""
        brightness = self.state.brightness
        return self.state.power == PowerState.ON and brightness.current > brightness.min_value

    async def set_backlight_on(self, on: bool) -> None:
        """Switches the backlight on or off by brightness.

        Off sets brightness to its minimum. On is ignored while the display is off;
        otherwise, if brightness is at its minimum, it is raised to a usable level.
        """
        brightness = self.state.brightness
        if not on:
            await self.set_brightness(brightness.min_value)
            return
        if self.state.power != PowerState.ON:
            logger.info(f"{self}: Ignoring backlight on because display is off")
            return
        if brightness.current <= brightness.min_value:
            await self.set_brightness(max(brightness.min_value + 1, BACKLIGHT_ON_MIN_BRIGHTNESS))

    # ---- lifecycle ----

    def snapshot(self) -> JsonableDict:
        result = self.state.to_jsonable()
        result['name'] = self.config.name
        result['backlight_on'] = self.get_backlight_on()
        return result

    def start_polling(self) -> None:
        """Starts background power polling, unless the poll interval is 0."""
        self.poller.start()

    async def _async_dispose(self) -> None:
        try:
            await self.poller.stop()
        finally:
            await self.transport.aclose()

    async def __aenter__(self) -> SicpDisplayClient:
        logger.debug(f"{self}: Entering async context manager")
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc_val: Optional[BaseException],
            exc_tb: Optional[TracebackType]
          ) -> None:
        logger.debug(f"{self}: Exiting async context manager, exc={exc_val}")
        await self._async_dispose()

    def __str__(self) -> str:
        return f"SicpDisplayClient({self.config.name})"

    def __repr__(self) -> str:
       return str(self)

    async def aclose(self) -> None:
       await self._async_dispose()
