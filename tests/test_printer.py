"""Tests for the typed printer operations, using a scripted client."""

from __future__ import annotations

import asyncio
from datetime import date
from unittest.mock import AsyncMock

from dtp_fiscal_mcp import printer
from dtp_fiscal_mcp.models.document_commands import (
    FiscalItem,
    FiscalPayment,
    OpenFiscalDocument,
)
from dtp_fiscal_mcp.protocol.parser import MALFORMED_RESPONSE_CODE, parse_code


def _client(*responses: list[str]) -> AsyncMock:
    """A client whose send() returns ``responses`` in order."""
    client = AsyncMock()
    client.send.side_effect = list(responses)
    return client


def _sent(client: AsyncMock) -> list[list[str]]:
    return [call.args[0] for call in client.send.call_args_list]


def test_get_status():
    client = _client(["0", "0", "2", "0", "0", "65535", ""])
    status = asyncio.run(printer.get_status(client))
    assert _sent(client) == [["C0"]]
    assert status.ok
    assert status.state == 2
    assert status.block == 0
    assert status.last_command_response == 65535
    assert status.fiscal_doc_open


def test_get_status_error_leaves_fields_unset():
    status = asyncio.run(printer.get_status(_client(["257", ""])))
    assert status.code == 257
    assert not status.ok
    assert status.state == -1


def test_malformed_code():
    """An empty or non-numeric first field reads as code 16."""
    status = asyncio.run(printer.get_status(_client([""])))
    assert status.code == MALFORMED_RESPONSE_CODE
    status = asyncio.run(printer.get_status(_client(["OK"])))
    assert status.code == MALFORMED_RESPONSE_CODE


def test_empty_response_reads_as_code_16():
    """A response with no fields at all is malformed, not a crash."""
    assert parse_code([]) == MALFORMED_RESPONSE_CODE == 16
    status = asyncio.run(printer.get_status(_client([])))
    assert status.code == 16
    assert status.state == -1


def test_open_fiscal_doc():
    client = _client(["0", "42", ""])
    doc = OpenFiscalDocument(
        customer_name="Cliente Test",
        customer_rif="V12345678",
        reference_date=date(2024, 1, 15),
    )
    response = asyncio.run(printer.open_fiscal_doc(client, doc))
    assert _sent(client)[0][:4] == ["F0", "0", "Cliente Test", "V12345678"]
    assert response.document_number == 42


def test_add_fiscal_item():
    client = _client(["0", "1", "30000", "17", ""])
    item = FiscalItem(description="Producto 1", code="SKU001", quantity=2000, price=1050, tax=1)
    response = asyncio.run(printer.add_fiscal_item(client, item))
    assert response.item_count == 1
    assert response.item_total == 30000
    assert response.printed_lines == 17


def test_subtotal_reads_total_from_field_11():
    fields = ["0"] + ["1"] * 10 + ["34800"] + ["0"] * 3 + [""]
    client = _client(fields)
    response = asyncio.run(printer.subtotal_fiscal_doc(client, 1))
    assert _sent(client) == [["F2", "1", "0"]]
    assert response.total_amount == 34800


def test_pay_fiscal_doc():
    client = _client(["0", "0", "0", "27", ""])
    payment = FiscalPayment(method=1, description="EFECTIVO", amount=34800)
    response = asyncio.run(printer.pay_fiscal_doc(client, payment))
    assert _sent(client) == [["F4", "0", "1", "EFECTIVO", "34800"]]
    assert response.amount_due == 0
    assert response.change_amount == 0
    assert response.printed_lines == 27


def test_close_fiscal_doc():
    client = _client(["0", "42", "34800", ""])
    response = asyncio.run(printer.close_fiscal_doc(client))
    assert _sent(client) == [["F5", ""]]
    assert response.document_number == 42
    assert response.total_amount == 34800


def test_add_fiscal_comment():
    client = _client(["0", "18", ""])
    response = asyncio.run(printer.add_fiscal_comment(client, "Gracias", 1, 1, 0))
    assert _sent(client) == [["F7", "Gracias", "1", "1", "0"]]
    assert response.printed_lines == 18


def test_non_fiscal_document():
    client = _client(["0", ""], ["0", "12", ""], ["0", "7", ""])

    async def scenario():
        opened = await printer.open_non_fiscal_doc(client)
        line = await printer.add_non_fiscal_line(client, "RECIBO DE PAGO")
        closed = await printer.close_non_fiscal_doc(client)
        return opened, line, closed

    opened, line, closed = asyncio.run(scenario())
    assert opened.ok
    assert line.printed_lines == 12
    assert closed.document_number == 7
    assert [f[0] for f in _sent(client)] == ["N0", "N1", "N3"]


def test_serialization_data():
    client = _client(["0", "SERIAL1", "PRINTER1", "KIT1", "MF1", "MA1", ""])
    response = asyncio.run(printer.get_serialization_data(client))
    assert response.fiscal_serial == "SERIAL1"
    assert response.printer_serial == "PRINTER1"
    assert response.kit_serial == "KIT1"
    assert response.mf_serial == "MF1"
    assert response.ma_serial == "MA1"


def test_fiscalization_data():
    client = _client(
        ["0", "Acme Inc", "Calle 1", "J-12345678", "Store", "Dist", "J-999",
         "16", "8", "0", "0", ""]
    )
    response = asyncio.run(printer.get_fiscalization_data(client))
    assert response.taxpayer_name == "Acme Inc"
    assert response.taxpayer_rif == "J-12345678"
    assert response.distributor_rif == "J-999"
    assert response.tax_rate_1 == 16.0
    assert response.tax_rate_2 == 8.0
    assert response.tax_rate_4 == 0.0


def test_payment_methods():
    client = _client(["0", "EFECTIVO", ""], ["0", ""])

    async def scenario():
        method = await printer.get_payment_method(client, 1)
        updated = await printer.set_payment_method(client, 12, "EFECTIVO USD")
        return method, updated

    method, updated = asyncio.run(scenario())
    assert method.name == "EFECTIVO"
    assert updated.ok
    assert _sent(client) == [["C9", "1"], ["C10", "12", "EFECTIVO USD"]]


def test_reports():
    client = _client(["0", "55", ""], ["0", "12", ""])

    async def scenario():
        x = await printer.report_x(client, no_open_drawer=True)
        z = await printer.report_z(client)
        return x, z

    x, z = asyncio.run(scenario())
    assert _sent(client) == [["R0", "0", "1"], ["R0", "1"]]
    assert x.document_number == 55
    assert z.report_number == 12


def test_get_counters():
    client = _client(["0", "10", "0", "2", "1", "3", "4", ""])
    response = asyncio.run(printer.get_counters(client))
    assert response.last_invoice == 10
    assert response.last_voided_invoice == 0
    assert response.last_credit_note == 2
    assert response.last_debit_note == 1
    assert response.last_non_fiscal == 3
    assert response.last_z_report == 4


def test_fiscal_day_info():
    fields = ["0"] + [""] * 83
    fields[1] = "12"
    fields[2] = "14012024"
    fields[67] = "100"
    fields[71] = "5"
    fields[75] = "1"
    response = asyncio.run(printer.get_fiscal_day_info(_client(fields)))
    assert response.z_number == 12
    assert response.z_date == "14012024"
    assert response.last_invoice_number == 100
    assert response.last_credit_note_number == 5
    assert response.last_debit_note_number == 1


def test_fiscal_day_info_short_response():
    response = asyncio.run(printer.get_fiscal_day_info(_client(["0", "12"])))
    assert response.ok
    assert response.z_number == -1


def test_fiscal_memory_report():
    client = _client(["0", "2", ""], ["0", "a"], ["0", "b"], ["0", ""])

    async def scenario():
        start = await printer.start_fiscal_memory_report(
            client, 1, date(2024, 1, 1), date(2024, 1, 31)
        )
        data = [await printer.get_fiscal_memory_report_data(client) for _ in range(2)]
        finish = await printer.finish_fiscal_memory_report(client)
        return start, data, finish

    start, data, finish = asyncio.run(scenario())
    assert start.record_count == 2
    assert [d.raw[1] for d in data] == ["a", "b"]
    assert finish.ok
    assert [f[0] for f in _sent(client)] == ["R2", "R3", "R3", "R4"]


def test_search_reprint():
    client = _client(["0", ""])
    response = asyncio.run(printer.search_reprint(client, 0, 42))
    assert _sent(client) == [["R8", "1", "0", "42"]]
    assert response.ok


def test_cancel_open_document_when_open():
    client = _client(["0", "0", "2", "0", "0", "0", ""], ["0", ""])
    response = asyncio.run(printer.cancel_open_document(client))
    assert _sent(client) == [["C0"], ["F6"]]
    assert response.ok


def test_cancel_open_document_when_idle():
    client = _client(["0", "0", "1", "0", "0", "0", ""])
    assert asyncio.run(printer.cancel_open_document(client)) is None
    assert _sent(client) == [["C0"]]
