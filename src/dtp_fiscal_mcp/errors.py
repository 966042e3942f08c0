"""Exception hierarchy for the DTP session and protocol layers.

Each error also derives from the closest builtin so callers that already
catch ``ConnectionError`` or ``TimeoutError`` keep working.
"""

from __future__ import annotations


class DtpError(Exception):
    """Base class for all DTP client errors."""


class ConnectTimeout(DtpError, TimeoutError):
    """The TCP connection was not established within the connect timeout."""


class ConnectError(DtpError, ConnectionError):
    """The TCP connection was refused or the host could not be reached."""


class NotConnected(DtpError, ConnectionError):
    """An operation was attempted with no live session."""


class CommandInFlight(DtpError, RuntimeError):
    """A command was sent while another one was still awaiting its response."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Another command is in flight, rejected {command!r}")
        self.command = command


class CommandTimeout(DtpError, TimeoutError):
    """No response frame arrived before the command deadline."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command timeout: {command}")
        self.command = command


class ConnectionClosed(DtpError, ConnectionError):
    """The session closed while a command was awaiting its response."""


class DeviceError(DtpError):
    """The printer answered a command with a non-zero result code."""

    def __init__(self, command: str, code: int) -> None:
        super().__init__(f"{command} failed: code {code}")
        self.command = command
        self.code = code
