"""Command mnemonics and request field builders.

Every request is a list of strings: the mnemonic followed by positional
arguments. Integers are rendered in decimal, dates as ``DDMMYYYY`` and
booleans as ``"1"``/``"0"``.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from ..models.document_commands import (
    FiscalItem,
    FiscalPayment,
    ForeignCurrencyPayment,
    OpenFiscalDocument,
)


class Command(str, Enum):
    """Command mnemonics understood by the DTP-80i."""

    OPEN_FISCAL_DOC = "F0"
    ADD_FISCAL_ITEM = "F1"
    SUBTOTAL = "F2"
    PAY = "F4"
    CLOSE_FISCAL_DOC = "F5"
    CANCEL_FISCAL_DOC = "F6"
    FISCAL_COMMENT = "F7"
    PAY_FOREIGN_CURRENCY = "F11"
    OPEN_NON_FISCAL_DOC = "N0"
    NON_FISCAL_LINE = "N1"
    CLOSE_NON_FISCAL_DOC = "N3"
    STATUS = "C0"
    SERIALIZATION_DATA = "C2"
    FISCALIZATION_DATA = "C3"
    GET_PAYMENT_METHOD = "C9"
    SET_PAYMENT_METHOD = "C10"
    REPORT = "R0"
    FISCAL_DAY_INFO = "R1"
    FISCAL_MEMORY_REPORT_START = "R2"
    FISCAL_MEMORY_REPORT_DATA = "R3"
    FISCAL_MEMORY_REPORT_FINISH = "R4"
    SEARCH_REPRINT = "R8"
    COUNTERS = "R9"


def format_date(value: date) -> str:
    """Render a date as ``DDMMYYYY``."""
    return value.strftime("%d%m%Y")


def format_flag(value: bool) -> str:
    return "1" if value else "0"


def to_fixed_point(value: Decimal | float | int | str, decimals: int) -> int:
    """Scale an amount to the printer's implied-decimals integer.

    Rounds half away from zero, e.g. ``to_fixed_point(10.005, 2) == 1001``.

    Args:
        value: Amount or quantity in natural units.
        decimals: Implied decimal places on the wire (0-3).
    """
    if not 0 <= decimals <= 3:
        raise ValueError(f"Implied decimals must be 0-3, got {decimals}")
    scaled = Decimal(str(value)).scaleb(decimals)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


# ─── FISCAL DOCUMENT ─────────────────────────────────────────────────

def build_open_fiscal_doc(doc: OpenFiscalDocument) -> list[str]:
    reference_date = doc.reference_date or date.today()
    return [
        Command.OPEN_FISCAL_DOC.value,
        str(doc.document_type),
        doc.customer_name,
        doc.customer_rif,
        str(doc.reference_invoice),
        format_date(reference_date),
        doc.reference_serial,
        format_flag(doc.logo),
        doc.additional_line,
    ]


def build_add_fiscal_item(item: FiscalItem) -> list[str]:
    return [
        Command.ADD_FISCAL_ITEM.value,
        str(item.item_type),
        item.description,
        item.code,
        str(item.quantity),
        item.unit,
        str(item.price),
        str(item.tax),
        str(item.price_decimals),
        str(item.quantity_decimals),
    ]


def build_subtotal(mode: int = 0, foreign_currency_amount: int = 0) -> list[str]:
    return [Command.SUBTOTAL.value, str(mode), str(foreign_currency_amount)]


def build_pay(payment: FiscalPayment) -> list[str]:
    return [
        Command.PAY.value,
        str(payment.payment_type),
        str(payment.method),
        payment.description,
        str(payment.amount),
    ]


def build_pay_foreign_currency(payment: ForeignCurrencyPayment) -> list[str]:
    """F11 puts the payment method last, after the currency symbol."""
    return [
        Command.PAY_FOREIGN_CURRENCY.value,
        "0",
        payment.description,
        str(payment.amount),
        str(payment.exchange_rate),
        payment.symbol,
        str(payment.method),
    ]


def build_add_fiscal_comment(
    text: str, size: int = 0, align: int = 0, style: int = 0
) -> list[str]:
    return [Command.FISCAL_COMMENT.value, text, str(size), str(align), str(style)]


def build_close_fiscal_doc(additional_line: str = "") -> list[str]:
    return [Command.CLOSE_FISCAL_DOC.value, additional_line]


def build_cancel_fiscal_doc() -> list[str]:
    return [Command.CANCEL_FISCAL_DOC.value]


# ─── NON-FISCAL DOCUMENT ─────────────────────────────────────────────

def build_open_non_fiscal_doc() -> list[str]:
    return [Command.OPEN_NON_FISCAL_DOC.value]


def build_add_non_fiscal_line(
    text: str, size: int = 0, align: int = 0, style: int = 0
) -> list[str]:
    return [Command.NON_FISCAL_LINE.value, text, str(size), str(align), str(style)]


def build_close_non_fiscal_doc() -> list[str]:
    return [Command.CLOSE_NON_FISCAL_DOC.value]


# ─── QUERIES AND CONFIGURATION ───────────────────────────────────────

def build_get_status() -> list[str]:
    return [Command.STATUS.value]


def build_get_serialization_data() -> list[str]:
    return [Command.SERIALIZATION_DATA.value]


def build_get_fiscalization_data() -> list[str]:
    return [Command.FISCALIZATION_DATA.value]


def build_get_payment_method(payment_method_id: int) -> list[str]:
    return [Command.GET_PAYMENT_METHOD.value, str(payment_method_id)]


def build_set_payment_method(payment_method_id: int, name: str) -> list[str]:
    return [Command.SET_PAYMENT_METHOD.value, str(payment_method_id), name]


# ─── REPORTS ─────────────────────────────────────────────────────────

def build_report(z_report: bool, no_open_drawer: bool = False) -> list[str]:
    """Build an R0 report command.

    Args:
        z_report: ``True`` for a Z (day closing) report, ``False`` for X.
        no_open_drawer: Keep the cash drawer closed after printing.
    """
    fields = [Command.REPORT.value, format_flag(z_report)]
    if no_open_drawer:
        fields.append("1")
    return fields


def build_get_fiscal_day_info() -> list[str]:
    return [Command.FISCAL_DAY_INFO.value]


def build_get_counters() -> list[str]:
    return [Command.COUNTERS.value]


def build_search_reprint(
    document_type: int, document_number: int, print_copy: bool = True
) -> list[str]:
    return [
        Command.SEARCH_REPRINT.value,
        format_flag(print_copy),
        str(document_type),
        str(document_number),
    ]


def build_start_fiscal_memory_report(
    report_type: int, start_date: date, end_date: date
) -> list[str]:
    return [
        Command.FISCAL_MEMORY_REPORT_START.value,
        "0",
        str(report_type),
        format_date(start_date),
        format_date(end_date),
    ]


def build_get_fiscal_memory_report_data() -> list[str]:
    return [Command.FISCAL_MEMORY_REPORT_DATA.value]


def build_finish_fiscal_memory_report() -> list[str]:
    return [Command.FISCAL_MEMORY_REPORT_FINISH.value]
