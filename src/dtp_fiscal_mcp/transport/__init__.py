"""Byte transports to the printer."""

from .tcp_connection import DEFAULT_PORT, TcpConnection, open_connection
