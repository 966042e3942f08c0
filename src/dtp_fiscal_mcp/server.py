"""MCP server entry point for DTP-80i fiscal printers.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP

from . import printer
from .client import DtpClient
from .config import DtpSettings
from .documents import (
    build_credit_note_commands,
    build_invoice_commands,
    build_receipt_commands,
)
from .errors import DeviceError, NotConnected
from .models.document_commands import DocumentCommand
from .models.order import Order
from .protocol.parser import Response
from .sequencer import execute_commands

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "dtp-fiscal",
    instructions="MCP server for DTP-80i fiscal printers over TCP",
)

# Global connection state
_client: DtpClient | None = None
_settings: DtpSettings | None = None
# The printer handles one command at a time; tool calls must not interleave.
_lock = asyncio.Lock()


def _get_settings() -> DtpSettings:
    global _settings
    if _settings is None:
        _settings = DtpSettings.from_env()
    return _settings


def _get_client() -> DtpClient:
    """Get the active printer client, raising if not connected."""
    if _client is None or not _client.connected:
        raise NotConnected("Not connected to printer. Use the 'connect' tool first.")
    return _client


def _as_dict(response: Response) -> dict[str, Any]:
    data = asdict(response)
    data.pop("raw", None)
    data["ok"] = response.ok
    return data


async def _print_document(commands: list[DocumentCommand]) -> dict[str, Any]:
    async with _lock:
        client = _get_client()
        try:
            result = await execute_commands(client, commands)
        except DeviceError as e:
            return {"printed": False, "command": e.command, "code": e.code}
    return {
        "printed": True,
        "document_number": result.document_number,
        "total_amount": result.total_amount,
    }


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
async def connect(host: str | None = None, port: int | None = None) -> dict[str, Any]:
    """Open a TCP connection to the fiscal printer.

    Args:
        host: Printer address. Defaults to ``DTP_HOST``.
        port: Printer port. Defaults to ``DTP_PORT`` (3010).
    """
    global _client
    settings = _get_settings()
    host = host or settings.host
    port = port or settings.port

    async with _lock:
        if _client is not None and _client.connected:
            return {"connected": True, "message": "Already connected"}

        # Published only once the printer answered, so disconnect() never
        # sees a half-open client
        client = DtpClient(
            host,
            port,
            connect_timeout=settings.connect_timeout,
            command_timeout=settings.command_timeout,
        )
        try:
            await client.connect()
            status = await printer.get_status(client)
        except BaseException:
            client.close()
            raise
        _client = client

    return {"connected": True, "host": host, "port": port, "status": _as_dict(status)}


@mcp.tool()
async def disconnect() -> dict[str, bool]:
    """Close the connection to the printer."""
    global _client
    if _client is None:
        return {"disconnected": True}
    _client.close()
    _client = None
    return {"disconnected": True}


@mcp.tool()
async def get_status() -> dict[str, Any]:
    """Query the printer state (C0).

    ``state == 2`` means a fiscal document is open.
    """
    async with _lock:
        status = await printer.get_status(_get_client())
    return _as_dict(status)


@mcp.tool()
async def get_device_info() -> dict[str, Any]:
    """Read the printer serials (C2) and taxpayer data with tax rates (C3)."""
    async with _lock:
        client = _get_client()
        serialization = await printer.get_serialization_data(client)
        fiscalization = await printer.get_fiscalization_data(client)
    return {
        "serialization": _as_dict(serialization),
        "fiscalization": _as_dict(fiscalization),
    }


@mcp.tool()
async def cancel_document() -> dict[str, Any]:
    """Cancel a fiscal document left open by an interrupted sale (F6)."""
    async with _lock:
        response = await printer.cancel_open_document(_get_client())
    if response is None:
        return {"cancelled": False, "message": "No fiscal document open"}
    return {"cancelled": response.ok, "code": response.code}


# ─── DOCUMENT TOOLS ──────────────────────────────────────────────────

@mcp.tool()
async def print_invoice(order: dict[str, Any], payment_method: str) -> dict[str, Any]:
    """Print a fiscal invoice for a completed order.

    Args:
        order: ``{"customer": {"id", "name"}, "items": [{"name", "sku",
            "price", "quantity", "tax_id"}], "payments": [{"amount",
            "payment_method"}]}``.
        payment_method: ``cash_nat``, ``pos_debit``, ``pos_credit``,
            ``pos_debit_credit_int`` or ``cash_int``. Foreign-currency
            methods add the 3% IGTF line.
    """
    commands = build_invoice_commands(
        Order.from_dict(order), payment_method, store_name=_get_settings().store_name
    )
    return await _print_document(commands)


@mcp.tool()
async def print_credit_note(
    order: dict[str, Any],
    reference_invoice_number: int,
    reference_invoice_date: str,
    payment_method: str,
    reference_invoice_serial: str = "",
) -> dict[str, Any]:
    """Print a credit note against an earlier invoice.

    Args:
        order: Returned items, same shape as for ``print_invoice``.
        reference_invoice_number: Number of the original invoice.
        reference_invoice_date: Date of the original invoice (YYYY-MM-DD).
        payment_method: Refund payment method.
        reference_invoice_serial: Printer serial of the original invoice.
    """
    commands = build_credit_note_commands(
        Order.from_dict(order),
        reference_invoice_number,
        date.fromisoformat(reference_invoice_date),
        payment_method,
        reference_invoice_serial=reference_invoice_serial,
        store_name=_get_settings().store_name,
    )
    return await _print_document(commands)


@mcp.tool()
async def print_receipt(
    order_id: str,
    amount_paid: float,
    payment_method: str,
    organization_name: str | None = None,
    card_last4: str | None = None,
) -> dict[str, Any]:
    """Print a non-fiscal payment receipt."""
    commands = build_receipt_commands(
        order_id,
        amount_paid,
        payment_method,
        organization_name=organization_name,
        card_last4=card_last4,
    )
    result = await _print_document(commands)
    # Receipts have no fiscal number
    result.pop("document_number", None)
    result.pop("total_amount", None)
    return result


@mcp.tool()
async def reprint_document(
    document_type: int, document_number: int, print_copy: bool = True
) -> dict[str, Any]:
    """Reprint a stored document from the electronic journal (R8).

    Args:
        document_type: Document type as stored by the printer (invoice,
            credit note...).
        document_number: Number of the document to reprint.
        print_copy: Print a copy instead of only searching.
    """
    async with _lock:
        response = await printer.search_reprint(
            _get_client(), document_type, document_number, print_copy
        )
    return _as_dict(response)


# ─── REPORT TOOLS ────────────────────────────────────────────────────

@mcp.tool()
async def report_x(no_open_drawer: bool = False) -> dict[str, Any]:
    """Print an X report (daily totals, day stays open)."""
    async with _lock:
        response = await printer.report_x(_get_client(), no_open_drawer)
    return _as_dict(response)


@mcp.tool()
async def report_z(no_open_drawer: bool = False) -> dict[str, Any]:
    """Print a Z report. This closes the fiscal day and cannot be undone."""
    async with _lock:
        response = await printer.report_z(_get_client(), no_open_drawer)
    logger.info("Z report finished with code %d", response.code)
    return _as_dict(response)


@mcp.tool()
async def get_counters() -> dict[str, Any]:
    """Last document numbers per document type (R9)."""
    async with _lock:
        response = await printer.get_counters(_get_client())
    return _as_dict(response)


@mcp.tool()
async def get_fiscal_day_info() -> dict[str, Any]:
    """Current fiscal day data: last Z, last invoice and note numbers (R1)."""
    async with _lock:
        response = await printer.get_fiscal_day_info(_get_client())
    return _as_dict(response)


@mcp.tool()
async def fiscal_memory_report(
    report_type: int, start_date: str, end_date: str
) -> dict[str, Any]:
    """Read the fiscal memory between two dates.

    Starts the report (R2), reads each record (R3) and finishes it (R4).

    Args:
        report_type: Report type as defined by the printer.
        start_date: First day (YYYY-MM-DD).
        end_date: Last day (YYYY-MM-DD).
    """
    start = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    if end < start:
        return {"error": "end_date must not be before start_date"}

    async with _lock:
        client = _get_client()
        started = await printer.start_fiscal_memory_report(client, report_type, start, end)
        if not started.ok:
            return {"code": started.code, "records": []}

        records: list[list[str]] = []
        for _ in range(max(started.record_count, 0)):
            data = await printer.get_fiscal_memory_report_data(client)
            if not data.ok:
                logger.warning("R3 failed with code %d", data.code)
                break
            records.append(data.raw[1:])
        finished = await printer.finish_fiscal_memory_report(client)

    return {
        "code": finished.code,
        "record_count": started.record_count,
        "records": records,
    }


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("dtp://device/status")
def resource_device_status() -> str:
    """Connection state of the printer client."""
    if _client is None or not _client.connected:
        return json.dumps({"connected": False})
    return json.dumps({"connected": True, "busy": _client.busy})


# ─── MCP PROMPTS ─────────────────────────────────────────────────────

@mcp.prompt()
def close_fiscal_day() -> str:
    """Guide the end-of-day closing of the printer."""
    return """Close the fiscal day on the printer.
Steps:
- Use get_status and make sure no fiscal document is open. If one is
  (state 2), use cancel_document first.
- Use report_x to print the day's totals and review them.
- Use get_counters to record the last invoice and credit note numbers.
- Only then use report_z. A Z report cannot be undone."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    settings = _get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
