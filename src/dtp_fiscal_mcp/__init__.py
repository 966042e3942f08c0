"""Client and MCP server for DTP-80i fiscal printers over TCP."""

from .client import DtpClient
from .errors import (
    CommandInFlight,
    CommandTimeout,
    ConnectError,
    ConnectionClosed,
    ConnectTimeout,
    DeviceError,
    DtpError,
    NotConnected,
)
from .sequencer import ExecutionResult, execute_commands
