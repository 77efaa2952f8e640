# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display client.

Provides transports, configuration, and the stateful display client.
"""

from .resolve_host import resolve_display_tcp_host
from .client_config import (
    SicpDisplayConfig,
    AxisConfig,
    VolumeConfig,
    InputDefinition,
    parse_code,
  )
from .client_transport import SicpClientTransport
from .tcp_client_transport import TcpSicpClientTransport
from .queued_client_transport import QueuedSicpClientTransport
from .connector import SicpDisplayConnector
from .tcp_connector import TcpSicpDisplayConnector
from .state import (
    PowerState,
    StateChange,
    DisplayState,
  )
from .poller import PowerPoller
from .client_impl import (
    SicpDisplayClient,
  )
from .simple import sicp_display_connect
