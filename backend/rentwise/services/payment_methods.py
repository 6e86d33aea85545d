"""
Payment method catalogue.

Rentwise only records which method a tenant chose; no provider is called.
"""
from typing import Dict, List

from rentwise.models import PaymentMethod

PAYMENT_METHODS: Dict[str, PaymentMethod] = {
    "mtn-momo": PaymentMethod(
        id="mtn-momo",
        name="MTN Mobile Money",
        description="Pay instantly with MTN MoMo",
        popular=True,
    ),
    "airtel-money": PaymentMethod(
        id="airtel-money",
        name="Airtel Money",
        description="Quick payment with Airtel Money",
    ),
    "card": PaymentMethod(
        id="card",
        name="Debit/Credit Card",
        description="Visa, Mastercard accepted",
    ),
    "bank": PaymentMethod(
        id="bank",
        name="Bank Transfer",
        description="Direct bank account transfer",
    ),
}


def list_payment_methods() -> List[PaymentMethod]:
    return list(PAYMENT_METHODS.values())


def get_payment_method(method_id: str) -> PaymentMethod:
    method = PAYMENT_METHODS.get(method_id)
    if method is None:
        raise ValueError(f"Unknown payment method: {method_id}. Available: {list(PAYMENT_METHODS.keys())}")
    return method
