"""Tests for the invoice, credit note and receipt builders."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from dtp_fiscal_mcp.documents import (
    build_credit_note_commands,
    build_invoice_commands,
    build_receipt_commands,
    map_payment_method,
    map_tax_id,
    truncate,
)
from dtp_fiscal_mcp.models.document_commands import (
    CloseFiscalDocument,
    CloseNonFiscalDocument,
    FiscalItem,
    FiscalPayment,
    ForeignCurrencyPayment,
    NonFiscalLine,
    OpenFiscalDocument,
    OpenNonFiscalDocument,
    Subtotal,
)
from dtp_fiscal_mcp.models.enums import DtpTaxCode, PaymentMethodId
from dtp_fiscal_mcp.models.order import FiscalCustomer, Order, OrderItem, OrderPayment


def _order(payment_method: str = "cash_nat", amount: float = 21) -> Order:
    return Order(
        customer=FiscalCustomer(id="V12345678", name="Cliente Test"),
        items=[OrderItem(name="Producto 1", sku="SKU001", price=10.5, quantity=2, tax_id="IVA_G")],
        payments=[OrderPayment(amount=amount, payment_method=payment_method)],
    )


def test_invoice_command_sequence():
    commands = build_invoice_commands(_order(), "cash_nat", store_name="Centro")
    assert [c.MNEMONIC for c in commands] == ["F0", "F1", "F2", "F4", "F5"]

    header = commands[0]
    assert isinstance(header, OpenFiscalDocument)
    assert header.document_type == 0
    assert header.customer_name == "Cliente Test"
    assert header.customer_rif == "V12345678"
    assert header.additional_line == "Tienda: Centro"

    item = commands[1]
    assert item == FiscalItem(
        item_type=0,
        description="Producto 1",
        code="SKU001",
        quantity=2000,
        price=1050,
        tax=int(DtpTaxCode.GENERAL),
        price_decimals=2,
        quantity_decimals=3,
    )
    assert commands[2] == Subtotal(mode=1, foreign_currency_amount=0)
    assert commands[3] == FiscalPayment(method=1, description="EFECTIVO", amount=2100)
    assert commands[4] == CloseFiscalDocument()


def test_invoice_foreign_payment_adds_igtf():
    """Paying in foreign currency adds a 3% IGTF line and uses F11."""
    commands = build_invoice_commands(_order("cash_int"), "cash_int")
    assert [c.MNEMONIC for c in commands] == ["F0", "F1", "F1", "F2", "F11", "F5"]

    igtf = commands[2]
    assert igtf.code == "IGTF"
    assert igtf.tax == int(DtpTaxCode.PERCEIVED)
    assert igtf.quantity == 1000
    # 3% of 21.00
    assert igtf.price == 63

    payment = commands[4]
    assert isinstance(payment, ForeignCurrencyPayment)
    assert payment.method == 12
    assert payment.description == "EFECTIVO USD"
    assert payment.exchange_rate == 1
    assert payment.symbol == "USD"


def test_igtf_rounds_to_cents():
    order = _order("pos_debit_credit_int")
    order.items = [OrderItem(name="Cafe", price=3.33, quantity=1)]
    commands = build_invoice_commands(order, "pos_debit_credit_int")
    # 3.33 * 3% = 0.0999 -> 0.10
    assert commands[2].price == 10


def test_invoice_item_normalization():
    """Unnamed items are skipped, prices floor at 0 and quantities at 1."""
    order = _order()
    order.items = [
        OrderItem(name="", price=5),
        OrderItem(name="Gratis", price=-3, quantity=0, tax_id="unknown"),
        OrderItem(name="N" * 80, sku="S" * 30, price=1, tax_id="iva_r"),
    ]
    commands = build_invoice_commands(order, "cash_nat")
    items = [c for c in commands if isinstance(c, FiscalItem)]
    assert len(items) == 2
    assert items[0].price == 0
    assert items[0].quantity == 1000
    assert items[0].tax == 0
    assert len(items[1].description) == 64
    assert len(items[1].code) == 20
    assert items[1].tax == int(DtpTaxCode.REDUCED)


def test_invoice_missing_sku_sent_as_na():
    order = _order()
    order.items = [OrderItem(name="Pan", price=1)]
    item = build_invoice_commands(order, "cash_nat")[1]
    assert item.code == "N/A"


def test_invoice_requires_customer_items_and_payments():
    order = _order()
    order.customer = None
    with pytest.raises(ValueError, match="customer"):
        build_invoice_commands(order, "cash_nat")

    order = _order()
    order.items = []
    with pytest.raises(ValueError, match="item"):
        build_invoice_commands(order, "cash_nat")

    order = _order()
    order.payments = []
    with pytest.raises(ValueError, match="payment"):
        build_invoice_commands(order, "cash_nat")

    with pytest.raises(ValueError):
        build_invoice_commands(None, "cash_nat")


def test_invoice_rejects_unknown_payment_method():
    with pytest.raises(ValueError, match="Invalid payment method"):
        build_invoice_commands(_order("bitcoin"), "bitcoin")


def test_credit_note_header_and_negative_quantities():
    commands = build_credit_note_commands(
        _order(),
        reference_invoice_number=42,
        reference_invoice_date=date(2024, 1, 15),
        payment_method="cash_nat",
        reference_invoice_serial="Z1A0000001",
    )
    header = commands[0]
    assert header.document_type == 1
    assert header.reference_invoice == 42
    assert header.reference_date == date(2024, 1, 15)
    assert header.reference_serial == "Z1A0000001"

    item = commands[1]
    assert item.item_type == 1
    assert item.quantity == -2000
    assert item.price == 1050


def test_credit_note_igtf_is_negative_too():
    commands = build_credit_note_commands(
        _order("cash_int"), 42, date(2024, 1, 15), "cash_int"
    )
    igtf = commands[2]
    assert igtf.code == "IGTF"
    assert igtf.quantity == -1000


def test_receipt_lines():
    paid_at = datetime(2024, 3, 7, 14, 5)
    commands = build_receipt_commands(
        "ORD-1", 150, "pos_debit", organization_name="Acme", paid_at=paid_at, card_last4="4242"
    )
    assert isinstance(commands[0], OpenNonFiscalDocument)
    assert isinstance(commands[-1], CloseNonFiscalDocument)
    lines = [c.text for c in commands if isinstance(c, NonFiscalLine)]
    assert lines == [
        "RECIBO DE PAGO",
        "ORD-1",
        "Recibo de pago",
        "Acme",
        "Bs 150",
        "Medio de pago: pos_debit",
        "Tarjeta 4242",
        "Hora del pago: 14:05",
        "Fecha del pago: 07/03/2024",
        "Cierre del Documento No Fiscal",
    ]


def test_receipt_defaults():
    commands = build_receipt_commands("ORD-2", 12.5, "cash_nat", organization_name="  ")
    lines = [c.text for c in commands if isinstance(c, NonFiscalLine)]
    assert lines[3] == "N/A"
    assert lines[4] == "Bs 12.5"
    assert lines[6] == "Tarjeta N/A"


@pytest.mark.parametrize("amount", [0, -1, float("nan"), float("inf")])
def test_receipt_rejects_bad_amounts(amount):
    with pytest.raises(ValueError):
        build_receipt_commands("ORD-1", amount, "cash_nat")


def test_receipt_requires_order_id():
    with pytest.raises(ValueError):
        build_receipt_commands("", 10, "cash_nat")


def test_mapping_helpers():
    assert map_tax_id(None) == 0
    assert map_tax_id("IVA_A") == int(DtpTaxCode.LUXURY)
    assert map_tax_id("BI_IGTF") == int(DtpTaxCode.PERCEIVED)
    assert map_payment_method("pos_credit") == PaymentMethodId.POS_CREDIT
    assert truncate(None) == ""
    assert truncate("abcdef", 3) == "abc"


def test_order_from_dict():
    order = Order.from_dict(
        {
            "customer": {"id": "J-1", "name": "Acme"},
            "items": [
                {"name": "Pan", "price": 2, "selected_quantity": 3, "taxes": [{"id": "IVA_G"}]},
                {"name": "Agua", "price": 1, "quantity": 2, "tax_id": "EXENTO_E"},
            ],
            "payments": [{"amount": 8, "payment_method": "cash_nat"}],
        }
    )
    assert order.customer == FiscalCustomer(id="J-1", name="Acme")
    assert order.items[0].quantity == 3
    assert order.items[0].tax_id == "IVA_G"
    assert order.items[1].quantity == 2
    assert order.items[1].tax_id == "EXENTO_E"
    assert order.payments == [OrderPayment(amount=8, payment_method="cash_nat")]


def test_order_from_dict_without_customer():
    order = Order.from_dict({"items": [], "payments": []})
    assert order.customer is None


def test_null_price_and_quantity_use_defaults():
    """Null price reads as 0 and null quantities as 1."""
    order = Order.from_dict(
        {
            "customer": {"id": "V1", "name": "A"},
            "items": [{"name": "P", "price": None, "quantity": None, "selected_quantity": None}],
            "payments": [{"amount": 1, "payment_method": "cash_nat"}],
        }
    )
    assert order.items[0].price == 0
    assert order.items[0].quantity == 1

    item = build_invoice_commands(order, "cash_nat")[1]
    assert item.price == 0
    assert item.quantity == 1000
