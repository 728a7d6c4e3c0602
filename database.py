import logging
import os
from typing import Any, Dict, List

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

LIST_INVOICES = """
    SELECT invoices.id, invoices.customer_id, customers.name, customers.email,
           invoices.amount, invoices.status, invoices.date
    FROM invoices
    JOIN customers ON invoices.customer_id = customers.id
    ORDER BY invoices.date DESC, invoices.id DESC
"""


class PersistenceError(Exception):
    """A statement could not be run against the database."""


def make_db_uri() -> str:
    url = (
        os.environ.get("DATABASE_URL")
        or os.environ.get("POSTGRES_URL")
        or os.environ.get("VITE_POSTGRES_URL")
    )
    if url and url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url or "sqlite:///local.db"


class InvoiceClient:
    """Runs single parameterized statements against the invoices database.

    The client does not own a pool of its own; it borrows the engine it is
    given. Create it once at startup, call ``connect()`` to probe the database
    and ``close()`` when the process shuts down.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def _select_one(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def ping(self) -> bool:
        """Health probe; failures are logged without a traceback."""
        try:
            self._select_one()
        except SQLAlchemyError as exc:
            logger.warning("Database unavailable: %s", exc.__class__.__name__)
            return False
        return True

    def connect(self) -> bool:
        try:
            self._select_one()
        except SQLAlchemyError:
            logger.exception("Failed to connect to the database")
            return False
        logger.info("Connected to database %s", self.engine.url.render_as_string(hide_password=True))
        return True

    def close(self) -> None:
        self.engine.dispose()

    def execute(self, statement: str, **params: Any) -> int:
        """Run one statement in its own transaction and return the affected row count."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(statement), params)
                return result.rowcount
        except SQLAlchemyError as exc:
            logger.exception("Statement failed: %s", " ".join(statement.split()))
            raise PersistenceError(str(exc)) from exc

    def fetch_invoices(self) -> List[Dict[str, Any]]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(text(LIST_INVOICES)).mappings().all()
        except SQLAlchemyError as exc:
            logger.exception("Failed to fetch invoices")
            raise PersistenceError(str(exc)) from exc
        return [
            {
                "id": row["id"],
                "customer_id": row["customer_id"],
                "name": row["name"],
                "email": row["email"],
                "amount": row["amount"],
                "status": row["status"],
                "date": str(row["date"]),
            }
            for row in rows
        ]
