"""Tax and payment code tables (Venezuelan fiscal rules)."""

from __future__ import annotations

from enum import IntEnum


class TaxRate:
    """Tax percentages by tax id."""

    EXENTO_E = 0.0
    BI_G = IVA_G = 16.0
    BI_R = IVA_R = 8.0
    BI_A = IVA_A = 31.0
    PERCIBIDO = 0.0
    BI_IGTF = IVA_IGTF = 3.0


class DtpTaxCode(IntEnum):
    """Tax slot sent in F1 (``FiscalItem.tax``)."""

    EXEMPT = 0
    GENERAL = 1     # 16%
    REDUCED = 2     # 8%
    LUXURY = 3      # 31%
    PERCEIVED = 4   # IGTF / percibido


# Tax id as used by the point of sale -> DTP tax slot
TAX_ID_TO_DTP_CODE: dict[str, DtpTaxCode] = {
    "EXENTO_E": DtpTaxCode.EXEMPT,
    "BI_G": DtpTaxCode.GENERAL,
    "IVA_G": DtpTaxCode.GENERAL,
    "BI_R": DtpTaxCode.REDUCED,
    "IVA_R": DtpTaxCode.REDUCED,
    "BI_A": DtpTaxCode.LUXURY,
    "IVA_A": DtpTaxCode.LUXURY,
    "PERCIBIDO": DtpTaxCode.PERCEIVED,
    "BI_IGTF": DtpTaxCode.PERCEIVED,
    "IVA_IGTF": DtpTaxCode.PERCEIVED,
}


class PaymentMethodId(IntEnum):
    """Payment method slots configured on the printer."""

    CASH = 1
    POS_DEBIT = 2
    POS_CREDIT = 3
    PAGO_MOVIL = 5
    POS_DEBIT_CREDIT_INT = 11
    CASH_INT = 12


PAYMENT_METHODS: dict[str, PaymentMethodId] = {
    "cash_nat": PaymentMethodId.CASH,
    "pos_debit": PaymentMethodId.POS_DEBIT,
    "pos_credit": PaymentMethodId.POS_CREDIT,
    "pos_debit_credit_int": PaymentMethodId.POS_DEBIT_CREDIT_INT,
    "cash_int": PaymentMethodId.CASH_INT,
}

# Methods paid in foreign currency (F11, plus the IGTF surcharge)
FOREIGN_PAYMENT_METHODS = frozenset({"pos_debit_credit_int", "cash_int"})

PAYMENT_METHOD_LABELS: dict[PaymentMethodId, str] = {
    PaymentMethodId.CASH: "EFECTIVO",
    PaymentMethodId.POS_DEBIT: "TARJETA DEBITO",
    PaymentMethodId.POS_CREDIT: "TARJETA CREDITO",
    PaymentMethodId.PAGO_MOVIL: "PAGO MOVIL",
    PaymentMethodId.POS_DEBIT_CREDIT_INT: "TARJETA INT",
    PaymentMethodId.CASH_INT: "EFECTIVO USD",
}
