"""Typed DTP-80i operations on top of :class:`~dtp_fiscal_mcp.client.DtpClient`.

Each coroutine sends one command and returns the parsed response. A
non-zero result code is returned as data (``response.code``), not raised;
deciding what a failure means is left to the caller.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from .models.document_commands import (
    FiscalItem,
    FiscalPayment,
    ForeignCurrencyPayment,
    OpenFiscalDocument,
)
from .protocol.commands import (
    build_add_fiscal_comment,
    build_add_fiscal_item,
    build_add_non_fiscal_line,
    build_cancel_fiscal_doc,
    build_close_fiscal_doc,
    build_close_non_fiscal_doc,
    build_finish_fiscal_memory_report,
    build_get_counters,
    build_get_fiscal_day_info,
    build_get_fiscal_memory_report_data,
    build_get_fiscalization_data,
    build_get_payment_method,
    build_get_serialization_data,
    build_get_status,
    build_open_fiscal_doc,
    build_open_non_fiscal_doc,
    build_pay,
    build_pay_foreign_currency,
    build_report,
    build_search_reprint,
    build_set_payment_method,
    build_start_fiscal_memory_report,
    build_subtotal,
)
from .protocol.parser import (
    CloseFiscalDocResponse,
    CountersResponse,
    DocumentNumberResponse,
    FiscalDayInfoResponse,
    FiscalItemResponse,
    FiscalizationResponse,
    FiscalMemoryReportResponse,
    PaymentMethodResponse,
    PaymentResponse,
    PrintedLinesResponse,
    Response,
    SerializationResponse,
    StatusResponse,
    SubtotalResponse,
    ZReportResponse,
    parse_close_fiscal_doc,
    parse_counters,
    parse_document_number,
    parse_fiscal_comment,
    parse_fiscal_day_info,
    parse_fiscal_item,
    parse_fiscal_memory_report,
    parse_fiscalization,
    parse_non_fiscal_line,
    parse_open_fiscal_doc,
    parse_payment,
    parse_payment_method,
    parse_response,
    parse_serialization,
    parse_status,
    parse_subtotal,
    parse_z_report,
)

if TYPE_CHECKING:
    from .client import DtpClient

logger = logging.getLogger(__name__)


# ─── STATUS ──────────────────────────────────────────────────────────

async def get_status(client: DtpClient) -> StatusResponse:
    """C0: printer state. Cheap enough to use as a ping."""
    return parse_status(await client.send(build_get_status()))


async def cancel_open_document(client: DtpClient) -> Response | None:
    """Cancel the fiscal document left open by an interrupted sale.

    Returns:
        The F6 response, or ``None`` when no document was open.
    """
    status = await get_status(client)
    if not (status.ok and status.fiscal_doc_open):
        return None
    logger.info("Fiscal document open, cancelling it")
    return await cancel_fiscal_doc(client)


# ─── FISCAL DOCUMENT ─────────────────────────────────────────────────

async def open_fiscal_doc(
    client: DtpClient, doc: OpenFiscalDocument
) -> DocumentNumberResponse:
    return parse_open_fiscal_doc(await client.send(build_open_fiscal_doc(doc)))


async def add_fiscal_item(client: DtpClient, item: FiscalItem) -> FiscalItemResponse:
    return parse_fiscal_item(await client.send(build_add_fiscal_item(item)))


async def add_fiscal_comment(
    client: DtpClient, text: str, size: int = 0, align: int = 0, style: int = 0
) -> PrintedLinesResponse:
    fields = build_add_fiscal_comment(text, size, align, style)
    return parse_fiscal_comment(await client.send(fields))


async def subtotal_fiscal_doc(
    client: DtpClient, mode: int = 0, foreign_currency_amount: int = 0
) -> SubtotalResponse:
    fields = build_subtotal(mode, foreign_currency_amount)
    return parse_subtotal(await client.send(fields))


async def pay_fiscal_doc(client: DtpClient, payment: FiscalPayment) -> PaymentResponse:
    return parse_payment(await client.send(build_pay(payment)))


async def pay_fiscal_doc_foreign_currency(
    client: DtpClient, payment: ForeignCurrencyPayment
) -> PaymentResponse:
    return parse_payment(await client.send(build_pay_foreign_currency(payment)))


async def close_fiscal_doc(
    client: DtpClient, additional_line: str = ""
) -> CloseFiscalDocResponse:
    return parse_close_fiscal_doc(await client.send(build_close_fiscal_doc(additional_line)))


async def cancel_fiscal_doc(client: DtpClient) -> Response:
    return parse_response(await client.send(build_cancel_fiscal_doc()))


# ─── NON-FISCAL DOCUMENT ─────────────────────────────────────────────

async def open_non_fiscal_doc(client: DtpClient) -> Response:
    return parse_response(await client.send(build_open_non_fiscal_doc()))


async def add_non_fiscal_line(
    client: DtpClient, text: str, size: int = 0, align: int = 0, style: int = 0
) -> PrintedLinesResponse:
    fields = build_add_non_fiscal_line(text, size, align, style)
    return parse_non_fiscal_line(await client.send(fields))


async def close_non_fiscal_doc(client: DtpClient) -> DocumentNumberResponse:
    return parse_document_number(await client.send(build_close_non_fiscal_doc()))


# ─── DEVICE DATA AND CONFIGURATION ───────────────────────────────────

async def get_serialization_data(client: DtpClient) -> SerializationResponse:
    return parse_serialization(await client.send(build_get_serialization_data()))


async def get_fiscalization_data(client: DtpClient) -> FiscalizationResponse:
    return parse_fiscalization(await client.send(build_get_fiscalization_data()))


async def get_payment_method(
    client: DtpClient, payment_method_id: int
) -> PaymentMethodResponse:
    fields = build_get_payment_method(payment_method_id)
    return parse_payment_method(await client.send(fields))


async def set_payment_method(
    client: DtpClient, payment_method_id: int, name: str
) -> Response:
    fields = build_set_payment_method(payment_method_id, name)
    return parse_response(await client.send(fields))


# ─── REPORTS ─────────────────────────────────────────────────────────

async def report_x(client: DtpClient, no_open_drawer: bool = False) -> DocumentNumberResponse:
    fields = build_report(z_report=False, no_open_drawer=no_open_drawer)
    return parse_document_number(await client.send(fields))


async def report_z(client: DtpClient, no_open_drawer: bool = False) -> ZReportResponse:
    """Z report: closes the fiscal day."""
    fields = build_report(z_report=True, no_open_drawer=no_open_drawer)
    return parse_z_report(await client.send(fields))


async def get_fiscal_day_info(client: DtpClient) -> FiscalDayInfoResponse:
    return parse_fiscal_day_info(await client.send(build_get_fiscal_day_info()))


async def get_counters(client: DtpClient) -> CountersResponse:
    return parse_counters(await client.send(build_get_counters()))


async def search_reprint(
    client: DtpClient,
    document_type: int,
    document_number: int,
    print_copy: bool = True,
) -> Response:
    fields = build_search_reprint(document_type, document_number, print_copy)
    return parse_response(await client.send(fields))


async def start_fiscal_memory_report(
    client: DtpClient, report_type: int, start_date: date, end_date: date
) -> FiscalMemoryReportResponse:
    fields = build_start_fiscal_memory_report(report_type, start_date, end_date)
    return parse_fiscal_memory_report(await client.send(fields))


async def get_fiscal_memory_report_data(client: DtpClient) -> Response:
    return parse_response(await client.send(build_get_fiscal_memory_report_data()))


async def finish_fiscal_memory_report(client: DtpClient) -> Response:
    return parse_response(await client.send(build_finish_fiscal_memory_report()))
