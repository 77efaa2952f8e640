# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Local view of a SICP display's state.

Owned and mutated only by SicpDisplayClient.
"""

from __future__ import annotations

from enum import Enum

from ..internal_types import *
from .client_config import AxisConfig, VolumeConfig, clamp

class PowerState(Enum):
    OFF = "off"
    ON = "on"

class ControlAxisState:
    """Current value of a bounded control axis. current is always within [min_value, max_value]."""
    config: AxisConfig
    current: int

    def __init__(self, config: AxisConfig):
        self.config = config
        self.current = config.initial

    @property
    def min_value(self) -> int:
        return self.config.min_value

    @property
    def max_value(self) -> int:
        return self.config.max_value

    def clamp(self, value: Union[int, float]) -> int:
        return clamp(int(round(value)), self.config.min_value, self.config.max_value)

class VolumeState(ControlAxisState):
    config: VolumeConfig
    muted: bool = False

    def __init__(self, config: VolumeConfig):
        super().__init__(config)
        self.muted = False

class DisplayState:
    power: PowerState
    active_input: Optional[int]
    volume: VolumeState
    brightness: ControlAxisState

    def __init__(
            self,
            volume_config: VolumeConfig,
            brightness_config: AxisConfig,
            active_input: Optional[int]=None,
          ):
        self.power = PowerState.OFF
        self.active_input = active_input
        self.volume = VolumeState(volume_config)
        self.brightness = ControlAxisState(brightness_config)

    def to_jsonable(self) -> JsonableDict:
        return dict(
            power=self.power.value,
            active_input=self.active_input,
            volume=self.volume.current,
            muted=self.volume.muted,
            brightness=self.brightness.current,
          )

    def __str__(self) -> str:
        return f"DisplayState({self.to_jsonable()})"

    def __repr__(self) -> str:
        return str(self)

class StateChange:
    """Notification delivered to state listeners after a committed change."""
    field: str
    """One of "power", "active_input", "volume", "mute", "brightness", "inputs_cleared"."""
    value: Any

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateChange):
            return NotImplemented
        return self.field == other.field and self.value == other.value

    def __str__(self) -> str:
        return f"StateChange({self.field}={self.value!r})"

    def __repr__(self) -> str:
        return str(self)

StateListener = Callable[[StateChange], None]
