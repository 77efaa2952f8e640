# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display client configuration.

Provides the per-display configuration object: addressing, timing, inputs,
and the command codes for the volume and brightness control axes.
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import SicpDisplayError, UnconfiguredAxisError
from ..constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_STEP_DELAY,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_VOLUME,
    DEFAULT_BRIGHTNESS,
    POWER_SETTLE_DELAY,
  )

def parse_code(raw: Union[int, str, None]) -> Optional[int]:
    """Parses a one-byte command code given as an int, a decimal string, or a
       "0x"-prefixed hex string. Returns None if raw is None or empty."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise SicpDisplayError(f"Invalid command code: {raw!r}")
    if isinstance(raw, int):
        return raw & 0xFF
    s = str(raw).strip().lower()
    if s == '':
        return None
    try:
        value = int(s, 16) if s.startswith('0x') else int(s, 10)
    except ValueError as e:
        raise SicpDisplayError(f"Invalid command code: {raw!r}") from e
    return value & 0xFF

def clamp(value: int, min_value: int, max_value: int) -> int:
    return max(min_value, min(max_value, value))

class InputDefinition:
    """A selectable video input: a caller-facing identifier, a label, and the
       SICP input code sent to select it."""
    identifier: int
    label: str
    code: int

    def __init__(self, identifier: int, label: Optional[str]=None, code: Union[int, str]=0):
        if isinstance(identifier, bool) or not isinstance(identifier, int) or identifier <= 0:
            raise SicpDisplayError(f"Input identifier must be a positive integer: {identifier!r}")
        parsed_code = parse_code(code)
        if parsed_code is None:
            raise SicpDisplayError(f"Input {identifier} has no code")
        self.identifier = identifier
        self.label = label if label else f"Input {identifier}"
        self.code = parsed_code

    @classmethod
    def from_jsonable(cls, data: JsonableDict, index: int) -> Self:
        identifier = data.get('identifier')
        if not isinstance(identifier, int):
            identifier = index + 1
        label = data.get('label')
        return cls(identifier, label=label if isinstance(label, str) else None, code=data.get('code'))  # type: ignore[arg-type]

    def to_jsonable(self) -> JsonableDict:
        return dict(identifier=self.identifier, label=self.label, code=f"0x{self.code:02X}")

    def __str__(self) -> str:
        return f"InputDefinition({self.identifier}, {self.label!r}, 0x{self.code:02X})"

    def __repr__(self) -> str:
        return str(self)

DEFAULT_INPUTS: List[Tuple[int, str, int]] = [
    (1, 'HDMI 1', 0x0D),
    (2, 'HDMI 2', 0x06),
    (3, 'HDMI 3', 0x0F),
    (4, 'HDMI 4', 0x19),
  ]

class AxisConfig:
    """Configuration of a bounded control axis (brightness, or volume via VolumeConfig).

    The axis is driven in absolute mode if set_code is given, in relative mode if
    both up_code and down_code are given, and is otherwise unconfigured.
    """
    min_value: int
    max_value: int
    initial: int
    set_code: Optional[int]
    up_code: Optional[int]
    down_code: Optional[int]
    step_delay_secs: float
    fill_count: Optional[int]

    def __init__(
            self,
            min_value: int=0,
            max_value: int=100,
            initial: int=DEFAULT_BRIGHTNESS,
            *,
            set_code: Union[int, str, None]=None,
            up_code: Union[int, str, None]=None,
            down_code: Union[int, str, None]=None,
            step_delay_secs: float=DEFAULT_STEP_DELAY,
            fill_count: Optional[int]=None,
          ) -> None:
        if min_value > max_value:
            raise SicpDisplayError(f"Axis min {min_value} is greater than max {max_value}")
        self.min_value = min_value
        self.max_value = max_value
        self.initial = clamp(initial, min_value, max_value)
        self.set_code = parse_code(set_code)
        self.up_code = parse_code(up_code)
        self.down_code = parse_code(down_code)
        if self.set_code is None and ((self.up_code is None) != (self.down_code is None)):
            raise UnconfiguredAxisError(
                f"Relative axis needs both an up code and a down code (up={up_code!r}, down={down_code!r})")
        self.step_delay_secs = step_delay_secs
        self.fill_count = fill_count

    @property
    def mode(self) -> str:
        """One of "absolute", "relative", "unconfigured"."""
        if self.set_code is not None:
            return "absolute"
        if self.up_code is not None and self.down_code is not None:
            return "relative"
        return "unconfigured"

    @classmethod
    def _kwargs_from_jsonable(cls, data: JsonableDict, default_initial: int) -> Dict[str, Any]:
        min_value = int(data.get('min', 0))           # type: ignore[arg-type]
        max_value = int(data.get('max', 100))         # type: ignore[arg-type]
        step_delay_ms = data.get('stepDelayMs')
        fill_count = data.get('fillCount')
        return dict(
            min_value=min_value,
            max_value=max_value,
            initial=int(data.get('initial', default_initial)),    # type: ignore[arg-type]
            set_code=data.get('setCode'),
            up_code=data.get('upCode'),
            down_code=data.get('downCode'),
            step_delay_secs=DEFAULT_STEP_DELAY if step_delay_ms is None else float(step_delay_ms) / 1000.0,  # type: ignore[arg-type]
            fill_count=None if fill_count is None else int(fill_count),  # type: ignore[arg-type]
          )

    @classmethod
    def from_jsonable(cls, data: Optional[JsonableDict]) -> Self:
        return cls(**cls._kwargs_from_jsonable(data or {}, DEFAULT_BRIGHTNESS))

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.mode}, [{self.min_value}, {self.max_value}])"

    def __repr__(self) -> str:
        return str(self)

class VolumeConfig(AxisConfig):
    """Volume axis configuration, with optional mute control.

    Mute is absolute if mute_set_code is given, a toggle if mute_toggle_code is
    given, and otherwise unconfigured.
    """
    mute_set_code: Optional[int]
    mute_toggle_code: Optional[int]

    def __init__(
            self,
            min_value: int=0,
            max_value: int=100,
            initial: int=DEFAULT_VOLUME,
            *,
            mute_set_code: Union[int, str, None]=None,
            mute_toggle_code: Union[int, str, None]=None,
            **kwargs: Any,
          ) -> None:
        super().__init__(min_value, max_value, initial, **kwargs)
        self.mute_set_code = parse_code(mute_set_code)
        self.mute_toggle_code = parse_code(mute_toggle_code)

    @property
    def mute_mode(self) -> str:
        """One of "absolute", "toggle", "unconfigured"."""
        if self.mute_set_code is not None:
            return "absolute"
        if self.mute_toggle_code is not None:
            return "toggle"
        return "unconfigured"

    @classmethod
    def from_jsonable(cls, data: Optional[JsonableDict]) -> Self:
        data = data or {}
        return cls(
            mute_set_code=data.get('muteSetCode'),          # type: ignore[arg-type]
            mute_toggle_code=data.get('muteToggleCode'),    # type: ignore[arg-type]
            **cls._kwargs_from_jsonable(data, DEFAULT_VOLUME),
          )

def _first_present(data: JsonableDict, *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None

class SicpDisplayConfig:
    """SICP display client configuration."""
    name: str
    host: Optional[str]
    port: int
    target_id: int
    group_enabled: bool
    group_id: int
    timeout_secs: float
    poll_interval_secs: float
    power_settle_secs: float
    inputs: List[InputDefinition]
    volume: VolumeConfig
    brightness: AxisConfig

    def __init__(
            self,
            host: Optional[str]=None,
            *,
            name: Optional[str]=None,
            port: Optional[int]=None,
            target_id: Optional[int]=None,
            group_enabled: Optional[bool]=None,
            group_id: Optional[int]=None,
            timeout_secs: Optional[float]=None,
            poll_interval_secs: Optional[float]=None,
            power_settle_secs: Optional[float]=None,
            inputs: Optional[Iterable[InputDefinition]]=None,
            volume: Optional[VolumeConfig]=None,
            brightness: Optional[AxisConfig]=None,
            base_config: Optional[SicpDisplayConfig]=None
          ) -> None:
        """Creates a configuration for one SICP display.

           Args:
             host: The hostname or IPV4 address of the display.
                   may optionally be prefixed with "tcp://".
                   May be suffixed with ":<port>" to specify a
                   non-default port, which will override the port argument.
                   If None, the host will be taken from the
                     SICP_DISPLAY_HOST environment variable.
             name: A friendly name for the display. Defaults to the host.
             port: The default TCP/IP port number to use.
                    If None, the port will be taken from SICP_DISPLAY_PORT.
                    If that environment variable is not found, the default
                    SICP port (5000) will be used.
             target_id:
                   The display (monitor) id commands are addressed to. 0 is
                   broadcast. Default 1.
             group_enabled:
                   If True (the default), a group id byte is included in every
                   packet.
             group_id:
                   The group id byte, used when group_enabled. Default 0.
             timeout_secs:
                   The connect and reply timeout, in seconds. If None, the
                   timeout will be taken from the SICP_DISPLAY_TIMEOUT
                   environment variable, or DEFAULT_TIMEOUT.
             poll_interval_secs:
                   Seconds between background power queries. 0 disables polling.
             power_settle_secs:
                   Seconds to wait after power-on before further commands.
             inputs:
                   The selectable inputs. Identifiers must be unique. Defaults
                   to HDMI 1-4.
             volume:
                   The volume axis and mute configuration.
             brightness:
                   The brightness axis configuration.
             base_config:
                     An optional base configuration to use.
        """
        if base_config is None:
            self.init_from_defaults()
        else:
            self.init_from_base_config(base_config)

        if host is not None and host != '':
            self.host = host

        if name is not None and name != '':
            self.name = name
        elif self.name == '' and self.host is not None:
            self.name = self.host

        if port is not None and port > 0:
            self.port = port

        if target_id is not None:
            self.target_id = target_id & 0xFF

        if group_enabled is not None:
            self.group_enabled = group_enabled

        if group_id is not None:
            self.group_id = group_id & 0xFF

        if timeout_secs is not None:
            self.timeout_secs = timeout_secs

        if poll_interval_secs is not None:
            self.poll_interval_secs = max(0.0, poll_interval_secs)

        if power_settle_secs is not None:
            self.power_settle_secs = power_settle_secs

        if inputs is not None:
            self.inputs = list(inputs)

        if volume is not None:
            self.volume = volume

        if brightness is not None:
            self.brightness = brightness

        seen: Dict[int, InputDefinition] = {}
        for inp in self.inputs:
            if inp.identifier in seen:
                raise SicpDisplayError(f"Duplicate input identifier {inp.identifier}: {seen[inp.identifier]}, {inp}")
            seen[inp.identifier] = inp

    def init_from_defaults(self) -> None:
        """Initializes the configuration from defaults."""
        self.host = os.environ.get('SICP_DISPLAY_HOST') or None
        self.name = ''
        default_port_str = os.environ.get('SICP_DISPLAY_PORT')
        if default_port_str is None or default_port_str == '':
            self.port = DEFAULT_PORT
        else:
            self.port = int(default_port_str)
        timeout_str = os.environ.get('SICP_DISPLAY_TIMEOUT')
        if timeout_str is None or timeout_str == '':
            self.timeout_secs = DEFAULT_TIMEOUT
        else:
            self.timeout_secs = float(timeout_str)
        self.target_id = 1
        self.group_enabled = True
        self.group_id = 0
        self.poll_interval_secs = DEFAULT_POLL_INTERVAL
        self.power_settle_secs = POWER_SETTLE_DELAY
        self.inputs = [InputDefinition(i, label, code) for i, label, code in DEFAULT_INPUTS]
        self.volume = VolumeConfig()
        self.brightness = AxisConfig()

    def init_from_base_config(self, base_config: SicpDisplayConfig) -> None:
        """Initializes the configuration from a base configuration."""
        self.host = base_config.host
        self.name = base_config.name
        self.port = base_config.port
        self.target_id = base_config.target_id
        self.group_enabled = base_config.group_enabled
        self.group_id = base_config.group_id
        self.timeout_secs = base_config.timeout_secs
        self.poll_interval_secs = base_config.poll_interval_secs
        self.power_settle_secs = base_config.power_settle_secs
        self.inputs = list(base_config.inputs)
        self.volume = base_config.volume
        self.brightness = base_config.brightness

    @property
    def packet_group_id(self) -> Optional[int]:
        """The group id to put in packets, or None if group addressing is disabled."""
        return self.group_id if self.group_enabled else None

    @classmethod
    def from_jsonable(
            cls,
            data: JsonableDict,
            base_config: Optional[SicpDisplayConfig]=None,
          ) -> Self:
        """Creates a configuration from a JSON display entry, e.g.:

            {
              "name": "Lobby", "host": "10.0.0.20", "monitorId": 1,
              "inputs": [{"identifier": 1, "label": "HDMI 1", "code": "0x0D"}],
              "volume": {"setCode": "0x44", "muteSetCode": "0x47"},
              "brightness": {"upCode": "0x11", "downCode": "0x12", "stepDelayMs": 150}
            }
        """
        raw_inputs = data.get('inputs')
        inputs: Optional[List[InputDefinition]] = None
        if isinstance(raw_inputs, list) and len(raw_inputs) > 0:
            inputs = [
                InputDefinition.from_jsonable(x, i) for i, x in enumerate(raw_inputs) if isinstance(x, dict)
              ]
        target_id = _first_present(data, 'targetId', 'monitorId')
        group_enabled = _first_present(data, 'groupEnabled', 'includeGroup')
        poll_interval = _first_present(data, 'pollIntervalSeconds', 'pollInterval')
        timeout_ms = data.get('timeoutMs')
        raw_volume = data.get('volume')
        raw_brightness = data.get('brightness')
        return cls(
            host=data.get('host'),                          # type: ignore[arg-type]
            name=data.get('name'),                          # type: ignore[arg-type]
            port=data.get('port'),                          # type: ignore[arg-type]
            target_id=None if target_id is None else int(target_id),
            group_enabled=None if group_enabled is None else bool(group_enabled),
            group_id=data.get('groupId'),                   # type: ignore[arg-type]
            timeout_secs=None if timeout_ms is None else float(timeout_ms) / 1000.0,  # type: ignore[arg-type]
            poll_interval_secs=None if poll_interval is None else float(poll_interval),
            inputs=inputs,
            volume=None if raw_volume is None else VolumeConfig.from_jsonable(raw_volume),         # type: ignore[arg-type]
            brightness=None if raw_brightness is None else AxisConfig.from_jsonable(raw_brightness),  # type: ignore[arg-type]
            base_config=base_config,
          )

    def __str__(self) -> str:
        return (
            f"SicpDisplayConfig("
            f"name={self.name!r}, "
            f"host={self.host}, "
            f"port={self.port}, "
            f"target_id={self.target_id}, "
            f"group_id={self.packet_group_id})"
          )

    def __repr__(self) -> str:
        return str(self)
