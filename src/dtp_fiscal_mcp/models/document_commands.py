"""Abstract printer commands that make up a fiscal or non-fiscal document.

Each dataclass is one variant of :data:`DocumentCommand` and maps to exactly
one printer operation. Money and quantities are pre-scaled integers; the
number of implied decimals travels with the value (``price_decimals``,
``quantity_decimals``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Union


@dataclass(frozen=True)
class OpenFiscalDocument:
    """F0: open an invoice (``document_type=0``) or credit note (``1``)."""

    MNEMONIC: ClassVar[str] = "F0"

    customer_name: str
    customer_rif: str
    document_type: int = 0
    reference_invoice: int = 0
    reference_date: date | None = None  # today when None
    reference_serial: str = ""
    logo: bool = False
    additional_line: str = ""


@dataclass(frozen=True)
class FiscalItem:
    """F1: add a sale line.

    ``quantity=1000`` with ``quantity_decimals=3`` means 1.000 units;
    ``price=30000`` with ``price_decimals=2`` means 300.00.
    """

    MNEMONIC: ClassVar[str] = "F1"

    description: str
    code: str
    quantity: int
    price: int
    tax: int
    unit: str = "UND"
    item_type: int = 0
    price_decimals: int = 2
    quantity_decimals: int = 3


@dataclass(frozen=True)
class Subtotal:
    """F2: compute the document subtotal."""

    MNEMONIC: ClassVar[str] = "F2"

    mode: int = 1
    foreign_currency_amount: int = 0


@dataclass(frozen=True)
class FiscalPayment:
    """F4: register a payment in local currency."""

    MNEMONIC: ClassVar[str] = "F4"

    method: int
    description: str
    amount: int
    payment_type: int = 0


@dataclass(frozen=True)
class ForeignCurrencyPayment:
    """F11: register a payment in foreign currency."""

    MNEMONIC: ClassVar[str] = "F11"

    method: int
    description: str
    amount: int
    exchange_rate: int = 1
    symbol: str = "USD"


@dataclass(frozen=True)
class CloseFiscalDocument:
    """F5: fiscalize and close the open document."""

    MNEMONIC: ClassVar[str] = "F5"

    additional_line: str = ""


@dataclass(frozen=True)
class FiscalComment:
    """F7: print a comment line inside the fiscal document."""

    MNEMONIC: ClassVar[str] = "F7"

    text: str
    size: int = 0
    align: int = 0
    style: int = 0


@dataclass(frozen=True)
class OpenNonFiscalDocument:
    """N0: open a free-text document."""

    MNEMONIC: ClassVar[str] = "N0"


@dataclass(frozen=True)
class NonFiscalLine:
    """N1: print a line in the open non-fiscal document."""

    MNEMONIC: ClassVar[str] = "N1"

    text: str
    size: int = 0
    align: int = 0
    style: int = 0


@dataclass(frozen=True)
class CloseNonFiscalDocument:
    """N3: close the non-fiscal document."""

    MNEMONIC: ClassVar[str] = "N3"


DocumentCommand = Union[
    OpenFiscalDocument,
    FiscalItem,
    Subtotal,
    FiscalPayment,
    ForeignCurrencyPayment,
    CloseFiscalDocument,
    FiscalComment,
    OpenNonFiscalDocument,
    NonFiscalLine,
    CloseNonFiscalDocument,
]
