# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display TCP/IP client connector.

Provides a connector for a serialized SicpClientTransport over TCP/IP.
"""

from __future__ import annotations

from ..internal_types import *
from ..pkg_logging import logger
from .connector import SicpDisplayConnector
from .client_transport import SicpClientTransport
from .client_config import SicpDisplayConfig
from .resolve_host import resolve_display_tcp_host
from .tcp_client_transport import TcpSicpClientTransport
from .queued_client_transport import QueuedSicpClientTransport

class TcpSicpDisplayConnector(SicpDisplayConnector):
    """SICP display TCP/IP client transport connector."""

    config: SicpDisplayConfig
    host: str
    port: int

    def __init__(
            self,
            host: Optional[str]=None,
            port: Optional[int]=None,
            timeout_secs: Optional[float] = None,
            config: Optional[SicpDisplayConfig]=None,
          ) -> None:
        """Creates a connector that can create transports to
           a SICP display that is reachable over TCP/IP.

              Args:
                host: The hostname or IPV4 address of the display.
                      may optionally be prefixed with "tcp://".
                      May be suffixed with ":<port>" to specify a
                      non-default port, which will override the port argument.
                      If None, the host will be taken from the config, or
                        from the SICP_DISPLAY_HOST environment variable.
                port: The default TCP/IP port number to use. If None, the port
                      will be taken from the config.
                timeout_secs: The connect and reply timeout. If not provided,
                        the config's timeout is used.
                config: A SicpDisplayConfig object that specifies
                        the default host, port, timeout, etc to use.
                        If None, a default config will be created.
        """
        super().__init__()
        self.config = SicpDisplayConfig(
            host=host,
            port=port,
            timeout_secs=timeout_secs,
            base_config=config
          )
        # validate the host specifier early
        self.host, self.port = resolve_display_tcp_host(self.config.host, self.config.port)

    # @abstractmethod
    async def connect(self) -> SicpClientTransport:
        """Create a serialized TCP/IP client transport for the display associated
           with this connector. Connections are opened per transmission, so this
           does not touch the network.
        """
        logger.debug(f"{self}: Creating transport")
        return QueuedSicpClientTransport(
            TcpSicpClientTransport(self.host, port=self.port, timeout_secs=self.config.timeout_secs))

    def __str__(self) -> str:
        return f"TcpSicpDisplayConnector(host='{self.host}', port={self.port})"

    def __repr__(self) -> str:
        return str(self)
