"""
Form schemas for the dashboard actions.

Parsing is split in two steps: ``parse_invoice_form`` coerces the raw form
values (or collects per-field messages), and ``to_invoice_values`` applies the
business derivations to an already valid form. Both are pure.
"""
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

INVOICE_FIELDS = ("customerId", "amount", "status")

# invoices.amount is a 32-bit INTEGER column holding cents
MAX_CENTS = 2**31 - 1

FIELD_MESSAGES = {
    "customerId": "Please select a customer.",
    "amount": "Please enter a valid amount.",
    "status": "Please select an invoice status.",
}


class InvoiceForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    customer_id: str = Field(alias="customerId", min_length=1)
    amount: Decimal
    status: Literal["pending", "paid"]

    @field_validator("amount")
    @classmethod
    def amount_fits_column(cls, value: Decimal) -> Decimal:
        if abs(value) >= Decimal(MAX_CENTS) or abs(amount_in_cents(value)) > MAX_CENTS:
            raise ValueError("amount out of range")
        return value


class LoginForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=3)
    password: str = Field(min_length=6)


def _field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "form"
        message = FIELD_MESSAGES.get(field, error["msg"])
        messages = errors.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return errors


def parse_invoice_form(form: Mapping[str, Any]) -> Tuple[Optional[InvoiceForm], Dict[str, List[str]]]:
    """Coerce the invoice fields of ``form``.

    Returns ``(InvoiceForm, {})`` on success or ``(None, errors)`` where
    ``errors`` maps each offending form field to its messages. Missing fields
    are reported like invalid ones.
    """
    raw = {name: form.get(name) for name in INVOICE_FIELDS}
    try:
        return InvoiceForm.model_validate(raw), {}
    except ValidationError as exc:
        return None, _field_errors(exc)


def amount_in_cents(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def to_invoice_values(fields: InvoiceForm, today: Optional[date] = None) -> Dict[str, Any]:
    """Bound parameters for an invoice statement.

    ``date`` is only included when ``today`` is given; updates never touch it.
    """
    values = {
        "customer_id": fields.customer_id,
        "amount": amount_in_cents(fields.amount),
        "status": fields.status,
    }
    if today is not None:
        values["date"] = today.isoformat()
    return values
