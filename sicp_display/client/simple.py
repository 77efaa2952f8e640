# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display simple client connection API.
"""

from __future__ import annotations

from ..internal_types import *
from .connector import SicpDisplayConnector
from .tcp_connector import TcpSicpDisplayConnector
from .client_config import SicpDisplayConfig
from .client_impl import SicpDisplayClient

async def sicp_display_connect(
        host: Optional[str]=None,
        config: Optional[SicpDisplayConfig]=None,
        connector: Optional[SicpDisplayConnector]=None,
        start_polling: bool=True,
      ) -> SicpDisplayClient:
    """Create a SICP display client from a configuration.

    Args:
        host: The hostname or IPV4 address of the display.
                may optionally be prefixed with "tcp://".
                May be suffixed with ":<port>" to specify a
                non-default port.
                If None, the host will be taken from the config, or the
                SICP_DISPLAY_HOST environment variable.
        config: A SicpDisplayConfig object that specifies
                the addressing, inputs, axes, etc. to use.
                If None, a default config will be created.
        connector: The connector used to create the transport. If None,
                a TcpSicpDisplayConnector for the config is used.
        start_polling:
                If True, background power polling is started (unless the
                config's poll interval is 0).
    """
    config = SicpDisplayConfig(
        host=host,
        base_config=config
      )
    if connector is None:
        connector = TcpSicpDisplayConnector(config=config)
    transport = await connector.connect()
    try:
        client = SicpDisplayClient(
            transport=transport,
            config=config,
        )
    except BaseException:
        await transport.aclose()
        raise

    if start_polling:
        client.start_polling()
    return client
