# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
SICP display host IP/Port resolver.

Provides a method that can resolve host specifiers and environment variables
into a display address and port.
"""

from __future__ import annotations

import os

from ..internal_types import *
from ..exceptions import SicpDisplayError
from ..constants import DEFAULT_PORT

def resolve_display_tcp_host(
        host: Optional[str]=None,
        default_port: Optional[int]=None,
      ) -> Tuple[str, int]:
    """Resolves a display host string into a hostname and port.

        Args:
            host: The hostname or IPV4 address of the display.
                    may optionally be prefixed with "tcp://".
                    May be suffixed with ":<port>" to specify a
                    non-default port, which will override the default_port argument.
                    If None, the host will be taken from the
                    SICP_DISPLAY_HOST environment variable.
            default_port: The default TCP/IP port number to use. If None, the port
                    will be taken from the SICP_DISPLAY_PORT. If that
                    environment variable is not found, the default SICP
                    port (5000) will be used.

        Returns:
            A tuple of (hostname: str, port: int).
    """
    if host is None or host == '':
        host = os.environ.get('SICP_DISPLAY_HOST')
        if host is None or host == '':
            raise SicpDisplayError("No display host specified and SICP_DISPLAY_HOST is not set")

    if default_port is None or default_port <= 0:
        default_port_str = os.environ.get('SICP_DISPLAY_PORT')
        if default_port_str is None or default_port_str == '':
            default_port = DEFAULT_PORT
        else:
            default_port = int(default_port_str)

    if host.startswith('tcp://'):
        host = host[6:]
    elif '://' in host:
        raise SicpDisplayError(f"Invalid host protocol specifier for TCP transport: '{host}'")

    port: int
    if ':' in host:
        host, port_str = host.rsplit(':', 1)
        try:
            port = int(port_str)
        except ValueError as e:
            raise SicpDisplayError(f"Invalid port in host specifier: '{port_str}'") from e
    else:
        port = default_port

    if host == '':
        raise SicpDisplayError("Empty display hostname")

    return (host, port)
