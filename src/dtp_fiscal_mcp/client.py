"""Command client for the DTP-80i: one request in flight at a time.

The printer's protocol carries no request id, so a response can only be
matched to a request by never having more than one outstanding. The client
enforces that: a second :meth:`DtpClient.send` while one is pending fails
with :class:`~dtp_fiscal_mcp.errors.CommandInFlight` instead of queueing.

Usage::

    client = DtpClient("192.168.1.10", 3010)
    await client.connect()
    fields = await client.send(["C0"])
    client.close()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Sequence

from .errors import CommandInFlight, CommandTimeout, ConnectionClosed, NotConnected
from .protocol.framing import STX, encode_frame, try_extract_frame
from .transport.tcp_connection import DEFAULT_PORT, open_connection

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 3.0
DEFAULT_COMMAND_TIMEOUT = 10.0


class Connection(Protocol):
    """What the client needs from a transport (see ``TcpConnection``)."""

    def subscribe(
        self,
        on_data: Callable[[bytes], None],
        on_error: Callable[[Exception], None],
        on_closed: Callable[[], None],
    ) -> None: ...

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


ConnectionFactory = Callable[[str, int, float], Awaitable[Connection]]


@dataclass
class _PendingCommand:
    command: str
    future: asyncio.Future
    timer: asyncio.TimerHandle | None = None


class DtpClient:
    """Stateful session with a single DTP printer.

    Args:
        host: Printer IP address or host name.
        port: Printer TCP port.
        connect_timeout: Seconds allowed for the TCP handshake.
        command_timeout: Seconds to wait for each response frame.
        connection_factory: Coroutine opening the transport; defaults to
            :func:`~dtp_fiscal_mcp.transport.tcp_connection.open_connection`.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        command_timeout: float = DEFAULT_COMMAND_TIMEOUT,
        connection_factory: ConnectionFactory = open_connection,
    ) -> None:
        self._host = host
        self._port = port
        self._connect_timeout = connect_timeout
        self._command_timeout = command_timeout
        self._connection_factory = connection_factory
        self._connection: Connection | None = None
        self._buffer = bytearray()
        self._pending: _PendingCommand | None = None
        # Concurrent connect() calls share one socket
        self._connect_lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._connection is not None

    @property
    def busy(self) -> bool:
        """True while a command is awaiting its response."""
        return self._pending is not None

    async def connect(self) -> None:
        """Open the session. Does nothing when already connected.

        Raises:
            ConnectTimeout: If the printer did not accept in time.
            ConnectError: If the printer could not be reached.
        """
        async with self._connect_lock:
            if self._connection is not None:
                return

            connection = await self._connection_factory(
                self._host, self._port, self._connect_timeout
            )
            connection.subscribe(self._on_data, self._on_error, self._on_closed)
            self._connection = connection
            self._buffer.clear()

    def close(self) -> None:
        """Release the session and drop any buffered bytes.

        A command still awaiting its response fails with
        :class:`ConnectionClosed`.
        """
        connection = self._connection
        self._connection = None
        self._buffer.clear()
        if connection is not None:
            connection.close()

        pending = self._settle()
        if pending is not None:
            _fail(pending, ConnectionClosed(f"Session closed during {pending.command}"))

    async def send(self, fields: Sequence[str]) -> list[str]:
        """Send one command frame and wait for the response frame.

        Args:
            fields: Command mnemonic followed by its arguments.

        Returns:
            The response fields; field 0 is the result code.

        Raises:
            NotConnected: If :meth:`connect` has not succeeded.
            CommandInFlight: If another command is still pending.
            CommandTimeout: If no response arrived in time.
            ConnectionClosed: If the printer closed the session first.
            OSError: If the socket reported an error first.
        """
        command = fields[0] if fields else ""
        if self._connection is None:
            raise NotConnected(f"Socket not connected, cannot send {command!r}")
        if self._pending is not None:
            raise CommandInFlight(command)

        loop = asyncio.get_running_loop()
        pending = _PendingCommand(command=command, future=loop.create_future())
        pending.timer = loop.call_later(self._command_timeout, self._on_timeout, pending)
        self._pending = pending

        try:
            self._connection.write(encode_frame(fields))
        except Exception:
            self._settle()
            raise

        try:
            return await pending.future
        finally:
            # Only still pending when the awaiting task was cancelled.
            if self._pending is pending:
                self._settle()

    def _settle(self) -> _PendingCommand | None:
        """Detach the pending command and stop its deadline timer."""
        pending = self._pending
        if pending is None:
            return None
        self._pending = None
        if pending.timer is not None:
            pending.timer.cancel()
        return pending

    def _on_timeout(self, pending: _PendingCommand) -> None:
        if self._pending is not pending:
            return
        self._pending = None
        logger.warning("No response to %s within %ss", pending.command, self._command_timeout)
        _fail(pending, CommandTimeout(pending.command))

    def _on_data(self, data: bytes) -> None:
        self._buffer.extend(data)

        frame = try_extract_frame(self._buffer)
        if frame is None:
            # Bytes before the first STX can never start a frame
            start = self._buffer.find(STX)
            if start == -1:
                self._buffer.clear()
            elif start > 0:
                del self._buffer[:start]
            return

        fields, remainder = frame
        self._buffer = bytearray(remainder)

        pending = self._settle()
        if pending is None:
            logger.debug("Dropping frame with no command pending: %r", fields)
            return

        logger.debug("%s -> %r", pending.command, fields)
        if not pending.future.done():
            pending.future.set_result(fields)

    def _on_error(self, exc: Exception) -> None:
        pending = self._settle()
        if pending is None:
            logger.debug("Ignoring socket error with no command pending: %s", exc)
            return
        _fail(pending, exc)

    def _on_closed(self) -> None:
        self._connection = None
        self._buffer.clear()
        pending = self._settle()
        if pending is None:
            return
        _fail(pending, ConnectionClosed(f"Socket closed during {pending.command}"))


def _fail(pending: _PendingCommand, exc: BaseException) -> None:
    if not pending.future.done():
        pending.future.set_exception(exc)
