"""
Client configuration module.

This module handles client-side configuration settings.
"""

from common.constants import DEFAULT_HOST, DEFAULT_PORT


class ClientConfig:
    """Client configuration class."""

    def __init__(self, username: str, password: str, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
        self.host = host
        self.port = port
        self.username = username
        self.password = password

    def get_url(self) -> str:
        """Websocket URL of the server."""
        return f"ws://{self.host}:{self.port}"

    def get_connection_info(self):
        """Get connection information."""
        return {
            'host': self.host,
            'port': self.port,
            'username': self.username
        }
