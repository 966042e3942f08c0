"""Replay a document's command list against a connected printer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from . import printer
from .errors import DeviceError
from .models.document_commands import (
    CloseFiscalDocument,
    CloseNonFiscalDocument,
    DocumentCommand,
    FiscalComment,
    FiscalItem,
    FiscalPayment,
    ForeignCurrencyPayment,
    NonFiscalLine,
    OpenFiscalDocument,
    OpenNonFiscalDocument,
    Subtotal,
)
from .protocol.parser import CloseFiscalDocResponse, Response

if TYPE_CHECKING:
    from .client import DtpClient

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of a sequence; filled in when a fiscal document was closed."""

    document_number: int | None = None
    total_amount: int | None = None


async def _run(client: DtpClient, command: DocumentCommand) -> Response:
    """Dispatch one command variant to its printer operation."""
    if isinstance(command, OpenFiscalDocument):
        return await printer.open_fiscal_doc(client, command)
    if isinstance(command, FiscalItem):
        return await printer.add_fiscal_item(client, command)
    if isinstance(command, Subtotal):
        return await printer.subtotal_fiscal_doc(
            client, command.mode, command.foreign_currency_amount
        )
    if isinstance(command, FiscalPayment):
        return await printer.pay_fiscal_doc(client, command)
    if isinstance(command, ForeignCurrencyPayment):
        return await printer.pay_fiscal_doc_foreign_currency(client, command)
    if isinstance(command, CloseFiscalDocument):
        return await printer.close_fiscal_doc(client, command.additional_line)
    if isinstance(command, FiscalComment):
        return await printer.add_fiscal_comment(
            client, command.text, command.size, command.align, command.style
        )
    if isinstance(command, OpenNonFiscalDocument):
        return await printer.open_non_fiscal_doc(client)
    if isinstance(command, NonFiscalLine):
        return await printer.add_non_fiscal_line(
            client, command.text, command.size, command.align, command.style
        )
    if isinstance(command, CloseNonFiscalDocument):
        return await printer.close_non_fiscal_doc(client)
    raise TypeError(f"Unknown DTP command: {command!r}")


async def execute_commands(
    client: DtpClient, commands: Iterable[DocumentCommand]
) -> ExecutionResult:
    """Run ``commands`` in order, stopping at the first failure.

    Nothing is rolled back when a command fails; the printer may be left
    with an open document (see :func:`printer.cancel_open_document`).

    Returns:
        The document number and total of the closed fiscal document, if any.

    Raises:
        DeviceError: On the first non-zero result code.
        TypeError: If a command is not a known variant.
    """
    result = ExecutionResult()
    for command in commands:
        response = await _run(client, command)
        if response.code != 0:
            logger.error("%s failed with code %d", command.MNEMONIC, response.code)
            raise DeviceError(command.MNEMONIC, response.code)
        if isinstance(response, CloseFiscalDocResponse):
            result.document_number = response.document_number
            result.total_amount = response.total_amount
    return result
