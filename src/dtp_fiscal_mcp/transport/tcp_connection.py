"""TCP connection to a DTP-80i fiscal printer.

A thin byte pipe on top of an asyncio transport. It knows nothing about
frames: inbound chunks, socket errors and the end of the connection are
forwarded as events to a single subscriber (the command client).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from ..errors import ConnectError, ConnectTimeout, NotConnected

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3010

DataCallback = Callable[[bytes], None]
ErrorCallback = Callable[[Exception], None]
ClosedCallback = Callable[[], None]


class _StreamProtocol(asyncio.Protocol):
    """Forwards asyncio protocol callbacks to the owning connection."""

    def __init__(self, connection: TcpConnection) -> None:
        self._connection = connection

    def data_received(self, data: bytes) -> None:
        self._connection._on_data(data)

    def eof_received(self) -> bool:
        # Let the transport close itself; connection_lost follows.
        return False

    def connection_lost(self, exc: Exception | None) -> None:
        self._connection._on_lost(exc)


class TcpConnection:
    """Manages the TCP socket to the printer.

    Usage::

        conn = TcpConnection("192.168.1.10", 3010)
        await conn.open(timeout=3.0)
        conn.subscribe(on_data, on_error, on_closed)
        conn.write(frame_bytes)
        conn.close()
    """

    def __init__(self, host: str, port: int = DEFAULT_PORT) -> None:
        self._host = host
        self._port = port
        self._transport: asyncio.Transport | None = None
        self._on_data_cb: DataCallback | None = None
        self._on_error_cb: ErrorCallback | None = None
        self._on_closed_cb: ClosedCallback | None = None

    @property
    def connected(self) -> bool:
        return self._transport is not None

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    async def open(self, timeout: float) -> None:
        """Open the TCP connection.

        Args:
            timeout: Seconds to wait for the connection to be established.

        Raises:
            ConnectTimeout: If the peer did not accept within ``timeout``.
            ConnectError: On refusal, name resolution or network failure.
        """
        loop = asyncio.get_running_loop()
        try:
            transport, _ = await asyncio.wait_for(
                loop.create_connection(
                    lambda: _StreamProtocol(self), self._host, self._port
                ),
                timeout,
            )
        except asyncio.TimeoutError as e:
            raise ConnectTimeout(
                f"Connect timeout after {timeout}s: {self.address}"
            ) from e
        except OSError as e:
            raise ConnectError(f"Could not connect to {self.address}: {e}") from e

        self._transport = transport
        logger.info("Connected to %s", self.address)

    def subscribe(
        self,
        on_data: DataCallback,
        on_error: ErrorCallback,
        on_closed: ClosedCallback,
    ) -> None:
        """Register the single listener for data, error and closed events."""
        self._on_data_cb = on_data
        self._on_error_cb = on_error
        self._on_closed_cb = on_closed

    def write(self, data: bytes) -> None:
        """Write raw bytes to the socket.

        Raises:
            NotConnected: If the connection is not open.
        """
        if self._transport is None:
            raise NotConnected(f"Not connected to {self.address}")
        logger.debug("-> %s", data.hex(" "))
        self._transport.write(data)

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        transport = self._transport
        self._transport = None
        self._unsubscribe()
        if transport is None:
            return
        transport.close()
        logger.info("Disconnected from %s", self.address)

    def _unsubscribe(self) -> None:
        self._on_data_cb = None
        self._on_error_cb = None
        self._on_closed_cb = None

    def _on_data(self, data: bytes) -> None:
        logger.debug("<- %s", data.hex(" "))
        if self._on_data_cb is not None:
            self._on_data_cb(data)

    def _on_lost(self, exc: Exception | None) -> None:
        if self._transport is None:
            # Closed locally; close() already unsubscribed
            return
        on_error = self._on_error_cb
        on_closed = self._on_closed_cb
        self._transport = None
        self._unsubscribe()

        if exc is not None:
            logger.warning("Connection to %s lost: %s", self.address, exc)
            if on_error is not None:
                on_error(exc)
        else:
            logger.info("Connection to %s closed by peer", self.address)

        if on_closed is not None:
            on_closed()


async def open_connection(
    host: str, port: int = DEFAULT_PORT, timeout: float = 3.0
) -> TcpConnection:
    """Create and open a :class:`TcpConnection`."""
    connection = TcpConnection(host, port)
    await connection.open(timeout)
    return connection
