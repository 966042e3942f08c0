"""Builders that turn an order into the printer command list for a document.

The builders only validate and map data; nothing here touches the network.
Run the result with :func:`~dtp_fiscal_mcp.sequencer.execute_commands`.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from .models.document_commands import (
    CloseFiscalDocument,
    CloseNonFiscalDocument,
    DocumentCommand,
    FiscalItem,
    FiscalPayment,
    ForeignCurrencyPayment,
    NonFiscalLine,
    OpenFiscalDocument,
    OpenNonFiscalDocument,
    Subtotal,
)
from .models.enums import (
    FOREIGN_PAYMENT_METHODS,
    PAYMENT_METHOD_LABELS,
    PAYMENT_METHODS,
    TAX_ID_TO_DTP_CODE,
    DtpTaxCode,
    PaymentMethodId,
    TaxRate,
)
from .models.order import Order
from .protocol.commands import to_fixed_point

MAX_TEXT_LENGTH = 64
MAX_CODE_LENGTH = 20

PRICE_DECIMALS = 2
QUANTITY_DECIMALS = 3

INVOICE = 0
CREDIT_NOTE = 1

IGTF_DESCRIPTION = "IGTF 3% pago en divisas"
IGTF_CODE = "IGTF"

_CENT = Decimal("0.01")


def truncate(text: str | None, max_length: int = MAX_TEXT_LENGTH) -> str:
    return (text or "")[:max_length]


def map_tax_id(tax_id: str | None) -> int:
    """Map a point-of-sale tax id (``IVA_G``, ``EXENTO_E``...) to the F1 tax slot.

    Unknown or missing ids are sent as exempt.
    """
    if not tax_id:
        return int(DtpTaxCode.EXEMPT)
    return int(TAX_ID_TO_DTP_CODE.get(tax_id.upper(), DtpTaxCode.EXEMPT))


def map_payment_method(method: str) -> PaymentMethodId:
    if method not in PAYMENT_METHODS:
        raise ValueError(
            f"Invalid payment method '{method}'. Valid: {list(PAYMENT_METHODS)}"
        )
    return PAYMENT_METHODS[method]


def _validate_order(order: Order | None) -> Order:
    if order is None:
        raise ValueError("Order is required")
    if order.customer is None:
        raise ValueError("Order must have a customer")
    if not order.items:
        raise ValueError("Order must have at least one item")
    if not order.payments:
        raise ValueError("Order must have at least one completed payment")
    return order


def _build_fiscal_document(
    order: Order,
    header: OpenFiscalDocument,
    payment_method: str,
    document_type: int,
) -> list[DocumentCommand]:
    sign = -1 if document_type == CREDIT_NOTE else 1
    commands: list[DocumentCommand] = [header]

    subtotal = Decimal(0)
    for item in order.items:
        if not item.name:
            continue
        price = max(Decimal(str(item.price)), Decimal(0))
        quantity = max(Decimal(str(item.quantity)), Decimal(1))
        subtotal += price * quantity

        commands.append(
            FiscalItem(
                item_type=document_type,
                description=truncate(item.name),
                code=truncate(item.sku or "N/A", MAX_CODE_LENGTH),
                quantity=sign * to_fixed_point(quantity, QUANTITY_DECIMALS),
                price=to_fixed_point(price, PRICE_DECIMALS),
                tax=map_tax_id(item.tax_id),
                price_decimals=PRICE_DECIMALS,
                quantity_decimals=QUANTITY_DECIMALS,
            )
        )

    if payment_method in FOREIGN_PAYMENT_METHODS and subtotal > 0:
        igtf = (
            subtotal.quantize(_CENT, rounding=ROUND_HALF_UP)
            * Decimal(str(TaxRate.BI_IGTF))
            / 100
        ).quantize(_CENT, rounding=ROUND_HALF_UP)
        commands.append(
            FiscalItem(
                item_type=document_type,
                description=IGTF_DESCRIPTION,
                code=IGTF_CODE,
                quantity=sign * to_fixed_point(1, QUANTITY_DECIMALS),
                price=to_fixed_point(igtf, PRICE_DECIMALS),
                tax=int(DtpTaxCode.PERCEIVED),
                price_decimals=PRICE_DECIMALS,
                quantity_decimals=QUANTITY_DECIMALS,
            )
        )

    commands.append(Subtotal(mode=1, foreign_currency_amount=0))

    for payment in order.payments:
        method_id = map_payment_method(payment.payment_method)
        label = PAYMENT_METHOD_LABELS.get(method_id, "EFECTIVO")
        amount = to_fixed_point(payment.amount, PRICE_DECIMALS)
        if payment.payment_method in FOREIGN_PAYMENT_METHODS:
            commands.append(
                ForeignCurrencyPayment(
                    method=int(method_id),
                    description=label,
                    amount=amount,
                    exchange_rate=1,
                    symbol="USD",
                )
            )
        else:
            commands.append(
                FiscalPayment(method=int(method_id), description=label, amount=amount)
            )

    commands.append(CloseFiscalDocument())
    return commands


def build_invoice_commands(
    order: Order, payment_method: str, store_name: str = "N/A"
) -> list[DocumentCommand]:
    """Build the F0..F5 sequence for a fiscal invoice.

    Args:
        order: Completed order with customer, items and payments.
        payment_method: Main payment method of the sale. Foreign-currency
            methods add the IGTF surcharge line.
        store_name: Printed on the header's additional line.

    Raises:
        ValueError: If the order lacks a customer, items or payments, or a
            payment uses an unknown method.
    """
    order = _validate_order(order)
    header = OpenFiscalDocument(
        document_type=INVOICE,
        customer_name=truncate(order.customer.name),
        customer_rif=truncate(order.customer.id, MAX_CODE_LENGTH),
        logo=False,
        additional_line=truncate(f"Tienda: {store_name}"),
    )
    return _build_fiscal_document(order, header, payment_method, INVOICE)


def build_credit_note_commands(
    order: Order,
    reference_invoice_number: int,
    reference_invoice_date: date,
    payment_method: str,
    reference_invoice_serial: str = "",
    store_name: str = "N/A",
) -> list[DocumentCommand]:
    """Build the F0..F5 sequence for a credit note against an earlier invoice.

    Item quantities are sent negative, as the printer expects for returns.

    Raises:
        ValueError: Same preconditions as :func:`build_invoice_commands`.
    """
    order = _validate_order(order)
    header = OpenFiscalDocument(
        document_type=CREDIT_NOTE,
        customer_name=truncate(order.customer.name),
        customer_rif=truncate(order.customer.id, MAX_CODE_LENGTH),
        reference_invoice=reference_invoice_number,
        reference_date=reference_invoice_date,
        reference_serial=truncate(reference_invoice_serial, MAX_CODE_LENGTH),
        logo=False,
        additional_line=truncate(f"Tienda: {store_name}"),
    )
    return _build_fiscal_document(order, header, payment_method, CREDIT_NOTE)


def _format_amount(amount: float) -> str:
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        return str(int(value))
    return str(value)


def build_receipt_commands(
    order_id: str,
    amount_paid: float,
    payment_method: str,
    organization_name: str | None = None,
    paid_at: datetime | None = None,
    card_last4: str | None = None,
) -> list[DocumentCommand]:
    """Build the N0..N3 sequence for a non-fiscal payment receipt.

    Raises:
        ValueError: If ``order_id`` is empty or ``amount_paid`` is not a
            positive finite number.
    """
    if not order_id:
        raise ValueError("Order id is required")
    if not math.isfinite(amount_paid) or amount_paid <= 0:
        raise ValueError(f"Invalid amount paid: {amount_paid}")

    paid_at = paid_at or datetime.now()
    lines = [
        "RECIBO DE PAGO",
        order_id,
        "Recibo de pago",
        (organization_name or "").strip() or "N/A",
        f"Bs {_format_amount(amount_paid)}",
        f"Medio de pago: {payment_method}",
        f"Tarjeta {card_last4 or 'N/A'}",
        f"Hora del pago: {paid_at.strftime('%H:%M')}",
        f"Fecha del pago: {paid_at.strftime('%d/%m/%Y')}",
        "Cierre del Documento No Fiscal",
    ]

    commands: list[DocumentCommand] = [OpenNonFiscalDocument()]
    commands.extend(NonFiscalLine(text=truncate(line)) for line in lines)
    commands.append(CloseNonFiscalDocument())
    return commands
