"""
Dashboard actions.

Each invoice action validates its form, runs exactly one statement through the
injected ``InvoiceClient`` and reports the outcome as a value: an
``ActionState`` the form can show, a ``Redirect`` the caller performs, or
nothing. Database failures never leave the action; the user only sees a fixed
message and the cause goes to the log.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from auth import AuthError, sign_in as default_sign_in
from cache import PageCache
from database import InvoiceClient, PersistenceError
from forms import parse_invoice_form, to_invoice_values, today_utc

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"
DASHBOARD_PATH = "/dashboard"

INSERT_INVOICE = """
    INSERT INTO invoices (customer_id, amount, status, date)
    VALUES (:customer_id, :amount, :status, :date)
"""
UPDATE_INVOICE = """
    UPDATE invoices
    SET customer_id = :customer_id, amount = :amount, status = :status
    WHERE id = :id
"""
DELETE_INVOICE = "DELETE FROM invoices WHERE id = :id"


class ActionState(BaseModel):
    errors: Optional[Dict[str, List[str]]] = None
    message: Optional[str] = None


class Redirect(BaseModel):
    location: str


ActionResult = Union[ActionState, Redirect, None]


def create_invoice(
    client: InvoiceClient,
    cache: PageCache,
    form: Mapping[str, Any],
    today: Optional[date] = None,
) -> ActionResult:
    fields, errors = parse_invoice_form(form)
    if fields is None:
        return ActionState(errors=errors, message="Validation failed")

    values = to_invoice_values(fields, today=today or today_utc())
    try:
        client.execute(INSERT_INVOICE, **values)
    except PersistenceError:
        return ActionState(message="Database Error: failed to create invoice")

    logger.info("Created invoice for customer %s", values["customer_id"])
    cache.revalidate_path(INVOICES_PATH)
    return Redirect(location=INVOICES_PATH)


def update_invoice(
    client: InvoiceClient,
    cache: PageCache,
    invoice_id: Any,
    form: Mapping[str, Any],
) -> ActionResult:
    """Rewrite customer, amount and status of ``invoice_id``.

    The id is not checked for existence; updating a missing invoice changes
    nothing and still redirects.
    """
    fields, errors = parse_invoice_form(form)
    if fields is None:
        return ActionState(errors=errors, message="Validation failed")

    values = to_invoice_values(fields)
    try:
        updated = client.execute(UPDATE_INVOICE, id=invoice_id, **values)
    except PersistenceError:
        return ActionState(message="Database error: failed to update invoice")

    logger.info("Updated invoice %s (%d row(s))", invoice_id, updated)
    cache.revalidate_path(INVOICES_PATH)
    return Redirect(location=INVOICES_PATH)


def delete_invoice(client: InvoiceClient, cache: PageCache, invoice_id: Any) -> ActionResult:
    try:
        deleted = client.execute(DELETE_INVOICE, id=invoice_id)
    except PersistenceError:
        return ActionState(message="Database error: failed to delete invoice")

    logger.info("Deleted invoice %s (%d row(s))", invoice_id, deleted)
    cache.revalidate_path(INVOICES_PATH)
    return None


def authenticate(
    form: Mapping[str, Any],
    sign_in: Callable[[str, Mapping[str, Any]], Any] = default_sign_in,
) -> Union[str, Redirect]:
    """Sign in with the credentials provider.

    Returns the message to show for a rejected sign-in. Errors that are not
    ``AuthError`` propagate.
    """
    try:
        sign_in("credentials", form)
    except AuthError as error:
        if error.type == "CredentialsSignin":
            return "Invalid credentials."
        return "Something went wrong."
    return Redirect(location=DASHBOARD_PATH)
