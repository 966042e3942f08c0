"""Order model consumed by the document builders."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FiscalCustomer:
    """Invoice recipient: tax id (RIF/CI) and legal name."""

    id: str
    name: str


@dataclass
class OrderItem:
    name: str
    price: float
    quantity: float = 1
    sku: str = ""
    tax_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderItem:
        # Point-of-sale payloads carry a list of taxes; only the first counts.
        tax_id = data.get("tax_id")
        taxes = data.get("taxes") or []
        if tax_id is None and taxes:
            tax_id = taxes[0].get("id")
        # price and quantity may arrive as null
        quantity = data.get("selected_quantity")
        if quantity is None:
            quantity = data.get("quantity")
        if quantity is None:
            quantity = 1
        price = data.get("price")
        return cls(
            name=data.get("name") or "",
            price=0 if price is None else price,
            quantity=quantity,
            sku=data.get("sku") or "",
            tax_id=tax_id,
        )


@dataclass
class OrderPayment:
    amount: float
    payment_method: str


@dataclass
class Order:
    """A completed sale ready to be fiscalized."""

    items: list[OrderItem] = field(default_factory=list)
    payments: list[OrderPayment] = field(default_factory=list)
    customer: FiscalCustomer | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order:
        customer = data.get("customer")
        return cls(
            items=[OrderItem.from_dict(i) for i in data.get("items", [])],
            payments=[
                OrderPayment(amount=p["amount"], payment_method=p["payment_method"])
                for p in data.get("payments", [])
            ],
            customer=FiscalCustomer(id=customer.get("id", ""), name=customer.get("name", ""))
            if customer
            else None,
        )
