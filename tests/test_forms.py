from datetime import date
from decimal import Decimal

import pytest

from forms import amount_in_cents, parse_invoice_form, to_invoice_values


def test_parse_valid_form_coerces_amount():
    fields, errors = parse_invoice_form({"customerId": "c1", "amount": "12.34", "status": "paid"})
    assert errors == {}
    assert fields.customer_id == "c1"
    assert fields.amount == Decimal("12.34")
    assert fields.status == "paid"


@pytest.mark.parametrize("amount,cents", [
    ("12.34", 1234),
    ("50", 5000),
    ("0.005", 1),
    ("19.999", 2000),
    ("-3.5", -350),
])
def test_amount_in_cents(amount, cents):
    assert amount_in_cents(Decimal(amount)) == cents


def test_missing_fields_are_all_reported():
    fields, errors = parse_invoice_form({})
    assert fields is None
    assert set(errors) == {"customerId", "amount", "status"}
    assert errors["customerId"] == ["Please select a customer."]
    assert errors["status"] == ["Please select an invoice status."]


def test_blank_customer_is_rejected():
    _, errors = parse_invoice_form({"customerId": "   ", "amount": "1", "status": "pending"})
    assert list(errors) == ["customerId"]


@pytest.mark.parametrize("amount", ["abc", "", "nan"])
def test_non_numeric_amount_is_rejected(amount):
    fields, errors = parse_invoice_form({"customerId": "c1", "amount": amount, "status": "pending"})
    assert fields is None
    assert errors == {"amount": ["Please enter a valid amount."]}


def test_unknown_status_is_rejected():
    _, errors = parse_invoice_form({"customerId": "c1", "amount": "10", "status": "overdue"})
    assert errors == {"status": ["Please select an invoice status."]}


def test_invoice_values_only_carry_date_when_given():
    fields, _ = parse_invoice_form({"customerId": "c1", "amount": "12.34", "status": "pending"})
    assert to_invoice_values(fields) == {"customer_id": "c1", "amount": 1234, "status": "pending"}
    assert to_invoice_values(fields, today=date(2026, 10, 18))["date"] == "2026-10-18"


@pytest.mark.parametrize("amount", ["1e30", "99999999999999999999", "123456789012345678901234567890", "-21474837"])
def test_amount_outside_column_range_is_rejected(amount):
    fields, errors = parse_invoice_form({"customerId": "c1", "amount": amount, "status": "pending"})
    assert fields is None
    assert errors == {"amount": ["Please enter a valid amount."]}


def test_largest_storable_amount_is_accepted():
    fields, _ = parse_invoice_form({"customerId": "c1", "amount": "21474836.47", "status": "paid"})
    assert amount_in_cents(fields.amount) == 2**31 - 1
