"""Normalize Stripe event objects into FailurePayment records.

Charges, payment intents, invoices and payment methods carry the same facts
under different keys. normalize_payment() never raises: anything missing or
of the wrong type becomes "N/A" (or an amount of 0).
"""

import sys
from collections.abc import Mapping
from typing import Any

from payment_monitor.models.payment import NOT_AVAILABLE, FailurePayment


def _lookup(obj: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted path through nested mappings, returning None on a miss."""
    current: Any = obj
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _first_text(obj: Mapping[str, Any], *paths: str) -> str:
    """First non-blank scalar found at any of the paths, as a string."""
    for path in paths:
        value = _lookup(obj, path)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, (str, int, float)):
            text = str(value).strip()
            if text:
                return text
    return NOT_AVAILABLE


def _amount(obj: Mapping[str, Any]) -> int:
    for key in ("amount", "amount_due"):
        value = obj.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            # display_amount divides to a float
            if abs(value) > sys.float_info.max:
                continue
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    return 0


def normalize_payment(raw: Any) -> FailurePayment:
    """Extract the canonical failed payment from a Stripe ``data.object``.

    Args:
        raw: The event's ``data.object`` payload; any shape is accepted.

    Returns:
        FailurePayment with every absent optional field set to "N/A" and the
        currency upper-cased.
    """
    obj: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    return FailurePayment(
        id=_first_text(obj, "id"),
        amount_minor_units=_amount(obj),
        currency=_first_text(obj, "currency").upper(),
        customer_email=_first_text(
            obj, "customer_email", "receipt_email", "billing_details.email"
        ),
        customer_id=_first_text(obj, "customer", "customer.id"),
        failure_code=_first_text(obj, "failure_code", "last_payment_error.code"),
        failure_message=_first_text(
            obj, "failure_message", "last_payment_error.message"
        ),
        description=_first_text(obj, "description"),
        source_type=_first_text(obj, "source.type", "payment_method_details.type"),
    )
