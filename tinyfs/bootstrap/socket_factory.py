"""Listening socket creation."""

import socket

from tinyfs.bootstrap.config import ServerConfig


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind and listen on the configured address.

    The socket times out after one shutdown poll interval so blocked
    acceptors wake up and observe a shutdown request.
    """
    family = socket.AF_INET6 if ":" in config.host else socket.AF_INET
    server_socket = socket.create_server((config.host, config.port), family=family)
    server_socket.settimeout(config.shutdown_poll_interval)
    return server_socket
