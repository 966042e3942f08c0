"""Data models for orders and the printer commands that make up a document."""

from .order import FiscalCustomer, Order, OrderItem, OrderPayment
from .document_commands import (
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
