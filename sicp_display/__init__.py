# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package sicp_display provides an API for controlling Philips signage
displays via their proprietary SICP protocol over TCP/IP.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    SicpDisplayError,
    SicpTimeoutError,
    SicpConnectionError,
    DeviceRejectedError,
    UnknownInputError,
    UnconfiguredAxisError,
  )

from .constants import (
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    HALF_CLOSE_DELAY,
    POWER_SETTLE_DELAY,
    DEFAULT_STEP_DELAY,
    DEFAULT_POLL_INTERVAL,
  )

from .protocol import (
    Packet,
    SicpReply,
    SicpCommand,
    encode_packet,
    classify_reply,
  )

from .client import (
    SicpDisplayClient,
    SicpDisplayConfig,
    AxisConfig,
    VolumeConfig,
    InputDefinition,
    SicpClientTransport,
    TcpSicpClientTransport,
    QueuedSicpClientTransport,
    SicpDisplayConnector,
    TcpSicpDisplayConnector,
    PowerPoller,
    PowerState,
    StateChange,
    resolve_display_tcp_host,
    sicp_display_connect,
  )
