"""Response parsing for DTP-80i answers.

Field 0 of every response is the result code. Other fields are read by
position; a missing or unparseable number becomes ``-1`` and a missing
string becomes ``""``. Responses are never rejected: a malformed answer
shows up as :data:`MALFORMED_RESPONSE_CODE`.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Result code reported for a response with no usable first field
MALFORMED_RESPONSE_CODE = 16

# Printer state while a fiscal document is open
STATE_FISCAL_DOC_OPEN = 2

FISCAL_DAY_INFO_MIN_FIELDS = 84


def parse_code(fields: list[str], index: int = 0) -> int:
    """Read the result code, falling back to the malformed-response sentinel."""
    try:
        return int(fields[index])
    except (IndexError, ValueError):
        return MALFORMED_RESPONSE_CODE


def int_field(fields: list[str], index: int, default: int = -1) -> int:
    try:
        return int(fields[index])
    except (IndexError, ValueError):
        return default


def float_field(fields: list[str], index: int, default: float = -1.0) -> float:
    try:
        return float(fields[index])
    except (IndexError, ValueError):
        return default


def str_field(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


@dataclass
class Response:
    """Result code plus the raw response fields."""

    code: int
    raw: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.code == 0


@dataclass
class StatusResponse(Response):
    """Parsed C0 response."""

    state: int = -1
    block: int = -1
    fiscal_status: str = ""
    last_command_response: int = -1

    @property
    def fiscal_doc_open(self) -> bool:
        return self.state == STATE_FISCAL_DOC_OPEN


@dataclass
class DocumentNumberResponse(Response):
    """Parsed F0, N3 or R0 (X report) response."""

    document_number: int = -1


@dataclass
class FiscalItemResponse(Response):
    """Parsed F1 response."""

    item_count: int = -1
    item_total: int = -1
    printed_lines: int = -1


@dataclass
class SubtotalResponse(Response):
    """Parsed F2 response. The document total sits at field 11."""

    total_amount: int = -1


@dataclass
class PaymentResponse(Response):
    """Parsed F4 or F11 response."""

    amount_due: int = -1
    change_amount: int = -1
    printed_lines: int = -1


@dataclass
class PrintedLinesResponse(Response):
    """Parsed F7 or N1 response."""

    printed_lines: int = -1


@dataclass
class CloseFiscalDocResponse(Response):
    """Parsed F5 response."""

    document_number: int = -1
    total_amount: int = -1


@dataclass
class SerializationResponse(Response):
    """Parsed C2 response."""

    fiscal_serial: str = ""
    printer_serial: str = ""
    kit_serial: str = ""
    mf_serial: str = ""
    ma_serial: str = ""


@dataclass
class FiscalizationResponse(Response):
    """Parsed C3 response (taxpayer registration and tax rates)."""

    taxpayer_name: str = ""
    fiscal_address: str = ""
    taxpayer_rif: str = ""
    commercial_name: str = ""
    distributor_name: str = ""
    distributor_rif: str = ""
    tax_rate_1: float = -1.0
    tax_rate_2: float = -1.0
    tax_rate_3: float = -1.0
    tax_rate_4: float = -1.0


@dataclass
class PaymentMethodResponse(Response):
    """Parsed C9 response."""

    name: str = ""


@dataclass
class ZReportResponse(Response):
    """Parsed R0 response for a Z report."""

    report_number: int = -1


@dataclass
class FiscalDayInfoResponse(Response):
    """Parsed R1 response. Only filled when the printer sent every field."""

    z_number: int = -1
    z_date: str = ""
    z_time: str = ""
    z_start_date: str = ""
    z_start_time: str = ""
    last_invoice_number: int = -1
    last_invoice_date: str = ""
    last_invoice_time: str = ""
    last_credit_note_number: int = -1
    last_debit_note_number: int = -1


@dataclass
class CountersResponse(Response):
    """Parsed R9 response."""

    last_invoice: int = -1
    last_voided_invoice: int = -1
    last_credit_note: int = -1
    last_debit_note: int = -1
    last_non_fiscal: int = -1
    last_z_report: int = -1


@dataclass
class FiscalMemoryReportResponse(Response):
    """Parsed R2 response."""

    record_count: int = -1


def parse_response(fields: list[str]) -> Response:
    """Parse a response that carries nothing but the result code."""
    return Response(code=parse_code(fields), raw=fields)


def parse_status(fields: list[str]) -> StatusResponse:
    code = parse_code(fields)
    if code != 0:
        return StatusResponse(code=code, raw=fields)
    return StatusResponse(
        code=code,
        raw=fields,
        state=int_field(fields, 2),
        block=int_field(fields, 3),
        fiscal_status=str_field(fields, 4),
        last_command_response=int_field(fields, 5),
    )


def parse_open_fiscal_doc(fields: list[str]) -> DocumentNumberResponse:
    return DocumentNumberResponse(
        code=parse_code(fields), raw=fields, document_number=int_field(fields, 1)
    )


def parse_fiscal_item(fields: list[str]) -> FiscalItemResponse:
    return FiscalItemResponse(
        code=parse_code(fields),
        raw=fields,
        item_count=int_field(fields, 1),
        item_total=int_field(fields, 2),
        printed_lines=int_field(fields, 3),
    )


def parse_subtotal(fields: list[str]) -> SubtotalResponse:
    return SubtotalResponse(
        code=parse_code(fields), raw=fields, total_amount=int_field(fields, 11)
    )


def parse_payment(fields: list[str]) -> PaymentResponse:
    return PaymentResponse(
        code=parse_code(fields),
        raw=fields,
        amount_due=int_field(fields, 1),
        change_amount=int_field(fields, 2),
        printed_lines=int_field(fields, 3),
    )


def parse_fiscal_comment(fields: list[str]) -> PrintedLinesResponse:
    return PrintedLinesResponse(
        code=parse_code(fields), raw=fields, printed_lines=int_field(fields, 1)
    )


def parse_close_fiscal_doc(fields: list[str]) -> CloseFiscalDocResponse:
    return CloseFiscalDocResponse(
        code=parse_code(fields),
        raw=fields,
        document_number=int_field(fields, 1),
        total_amount=int_field(fields, 2),
    )


def parse_non_fiscal_line(fields: list[str]) -> PrintedLinesResponse:
    code = parse_code(fields)
    if code != 0:
        return PrintedLinesResponse(code=code, raw=fields)
    return PrintedLinesResponse(code=code, raw=fields, printed_lines=int_field(fields, 1))


def parse_document_number(fields: list[str]) -> DocumentNumberResponse:
    """Parse an N3 or X report answer; the number is only trusted on success."""
    code = parse_code(fields)
    if code != 0:
        return DocumentNumberResponse(code=code, raw=fields)
    return DocumentNumberResponse(
        code=code, raw=fields, document_number=int_field(fields, 1)
    )


def parse_serialization(fields: list[str]) -> SerializationResponse:
    code = parse_code(fields)
    if code != 0:
        return SerializationResponse(code=code, raw=fields)
    return SerializationResponse(
        code=code,
        raw=fields,
        fiscal_serial=str_field(fields, 1),
        printer_serial=str_field(fields, 2),
        kit_serial=str_field(fields, 3),
        mf_serial=str_field(fields, 4),
        ma_serial=str_field(fields, 5),
    )


def parse_fiscalization(fields: list[str]) -> FiscalizationResponse:
    code = parse_code(fields)
    if code != 0:
        return FiscalizationResponse(code=code, raw=fields)
    return FiscalizationResponse(
        code=code,
        raw=fields,
        taxpayer_name=str_field(fields, 1),
        fiscal_address=str_field(fields, 2),
        taxpayer_rif=str_field(fields, 3),
        commercial_name=str_field(fields, 4),
        distributor_name=str_field(fields, 5),
        distributor_rif=str_field(fields, 6),
        tax_rate_1=float_field(fields, 7),
        tax_rate_2=float_field(fields, 8),
        tax_rate_3=float_field(fields, 9),
        tax_rate_4=float_field(fields, 10),
    )


def parse_payment_method(fields: list[str]) -> PaymentMethodResponse:
    code = parse_code(fields)
    if code != 0:
        return PaymentMethodResponse(code=code, raw=fields)
    return PaymentMethodResponse(code=code, raw=fields, name=str_field(fields, 1))


def parse_z_report(fields: list[str]) -> ZReportResponse:
    code = parse_code(fields)
    if code != 0:
        return ZReportResponse(code=code, raw=fields)
    return ZReportResponse(code=code, raw=fields, report_number=int_field(fields, 1))


def parse_fiscal_day_info(fields: list[str]) -> FiscalDayInfoResponse:
    code = parse_code(fields)
    if code != 0 or len(fields) < FISCAL_DAY_INFO_MIN_FIELDS:
        return FiscalDayInfoResponse(code=code, raw=fields)
    return FiscalDayInfoResponse(
        code=code,
        raw=fields,
        z_number=int_field(fields, 1),
        z_date=fields[2],
        z_time=fields[3],
        z_start_date=fields[4],
        z_start_time=fields[5],
        last_invoice_number=int_field(fields, 67),
        last_invoice_date=fields[68],
        last_invoice_time=fields[69],
        last_credit_note_number=int_field(fields, 71),
        last_debit_note_number=int_field(fields, 75),
    )


def parse_counters(fields: list[str]) -> CountersResponse:
    code = parse_code(fields)
    if code != 0:
        return CountersResponse(code=code, raw=fields)
    return CountersResponse(
        code=code,
        raw=fields,
        last_invoice=int_field(fields, 1),
        last_voided_invoice=int_field(fields, 2),
        last_credit_note=int_field(fields, 3),
        last_debit_note=int_field(fields, 4),
        last_non_fiscal=int_field(fields, 5),
        last_z_report=int_field(fields, 6),
    )


def parse_fiscal_memory_report(fields: list[str]) -> FiscalMemoryReportResponse:
    code = parse_code(fields)
    if code != 0:
        return FiscalMemoryReportResponse(code=code, raw=fields)
    return FiscalMemoryReportResponse(
        code=code, raw=fields, record_count=int_field(fields, 1)
    )
