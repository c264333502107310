"""Persistent local store for customers, invoices and payments.

The store owns one SQLAlchemy ``AsyncEngine`` bound to an SQLite file through
the aiosqlite driver. The engine is created lazily on first use and reused
until :meth:`LocalStore.close`. Statements are plain ``text()`` SQL with
named parameters.

Each write runs in its own ``engine.begin()`` block and is therefore one
transaction. The store keeps no multi-entity transactions: callers that
update a customer and create an invoice perform two writes and must tolerate
the window between them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager, nullcontext
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from visa_intake.config import StoreConfig
from visa_intake.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    StorageInitError,
    StorageIOError,
)
from visa_intake.logging import get_logger, record_context
from visa_intake.models import (
    Customer,
    CustomerProfile,
    CustomerStatus,
    Invoice,
    NewInvoice,
    NewPayment,
    PaymentRecord,
)
from visa_intake.serialization import (
    customer_from_dict,
    invoice_from_dict,
    payment_from_dict,
    to_dict_fast,
)
from visa_intake.store import schema
from visa_intake.store.identifiers import generate_id, generate_tracking_code

logger = get_logger(__name__)


class LocalStore:
    """Durable, indexed store of the visa intake records.

    Parameters
    ----------
    config : StoreConfig | None
        Database location and policies. Defaults to ``StoreConfig()``.
    id_factory : Callable[[], str]
        Source of record ids.
    tracking_code_factory : Callable[[], str]
        Source of customer tracking codes. Injectable so collisions can be
        reproduced.
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        id_factory: Callable[[], str] = generate_id,
        tracking_code_factory: Callable[[], str] = generate_tracking_code,
    ) -> None:
        self.config = config or StoreConfig()
        self._id_factory = id_factory
        self._tracking_code_factory = tracking_code_factory
        self._engine: AsyncEngine | None = None
        self._open_lock = asyncio.Lock()
        # An in-memory database lives on a single shared connection, which
        # cannot hold two transactions at once.
        self._statement_guard: asyncio.Lock | nullcontext = (
            asyncio.Lock() if self.config.is_memory else nullcontext()
        )
        # Held by the workflow layer around each read-modify-write step.
        self.transaction_lock = asyncio.Lock()

    async def __aenter__(self) -> LocalStore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    # Engine lifecycle
    async def open(self) -> AsyncEngine:
        """Open the database, provisioning it on first use.

        Repeated calls return the same engine without reopening.

        Raises
        ------
        StorageInitError
            If the database cannot be opened or provisioned. The store stays
            closed and a later call retries.
        """
        if self._engine is not None:
            return self._engine
        async with self._open_lock:
            if self._engine is None:
                self._engine = await self._connect()
        return self._engine

    async def close(self) -> None:
        """Dispose of the engine. The next operation reopens it.

        Statements already running finish on their checked-out connection.
        """
        engine, self._engine = self._engine, None
        if engine is not None:
            # StaticPool closes its one connection on dispose
            async with self._statement_guard:
                await engine.dispose()
            logger.debug("Closed %s", self.config.path)

    def _url(self) -> URL:
        return URL.create("sqlite+aiosqlite", database=str(self.config.path))

    async def _connect(self) -> AsyncEngine:
        cfg = self.config
        options: dict[str, Any] = {"connect_args": {"timeout": cfg.timeout}}
        if cfg.is_memory:
            # Every new connection to :memory: is a separate, empty database
            options["poolclass"] = StaticPool
        engine: AsyncEngine | None = None
        try:
            if not cfg.is_memory:
                Path(cfg.path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_async_engine(self._url(), **options)
            async with engine.begin() as conn:
                version = (await conn.execute(text("PRAGMA user_version"))).scalar_one()
                if version > cfg.schema_version:
                    raise StorageInitError(
                        f"{cfg.path} has schema version {version}, "
                        f"expected at most {cfg.schema_version}"
                    )
                if version < cfg.schema_version:
                    logger.info(
                        "Provisioning %s schema v%d", cfg.database_name, cfg.schema_version
                    )
                    for statement in schema.SCHEMA_V1:
                        await conn.execute(text(statement))
                    await conn.execute(text("DELETE FROM store_meta"))
                    await conn.execute(
                        text("INSERT INTO store_meta (name, version) VALUES (:name, :version)"),
                        {"name": cfg.database_name, "version": cfg.schema_version},
                    )
                    # PRAGMA does not accept bound parameters
                    await conn.execute(text(f"PRAGMA user_version = {int(cfg.schema_version)}"))
                else:
                    row = (await conn.execute(text("SELECT name FROM store_meta"))).first()
                    if row is None or row.name != cfg.database_name:
                        found = row.name if row is not None else None
                        raise StorageInitError(
                            f"{cfg.path} holds database {found!r}, "
                            f"expected {cfg.database_name!r}"
                        )
        except (SQLAlchemyError, OSError) as exc:
            if engine is not None:
                await engine.dispose()
            logger.error("Could not open %s: %s", cfg.path, exc)
            raise StorageInitError(f"Could not open {cfg.path}: {exc}") from exc
        except StorageInitError:
            if engine is not None:
                await engine.dispose()
            raise
        logger.info("Opened %s (%s v%d)", cfg.path, cfg.database_name, cfg.schema_version)
        return engine

    # Statement helpers
    async def _write(self, sql: str, params: dict[str, Any]) -> int:
        engine = await self.open()
        async with self._statement_guard:
            with _engine_errors():
                async with engine.begin() as conn:
                    result = await conn.execute(text(sql), params)
                    return result.rowcount

    async def _fetch_one(self, sql: str, params: dict[str, Any] | None = None) -> dict[str, Any] | None:
        engine = await self.open()
        async with self._statement_guard:
            with _engine_errors():
                async with engine.connect() as conn:
                    row = (await conn.execute(text(sql), params or {})).mappings().first()
        return dict(row) if row is not None else None

    async def _fetch_all(self, sql: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        engine = await self.open()
        async with self._statement_guard:
            with _engine_errors():
                async with engine.connect() as conn:
                    rows = (await conn.execute(text(sql), params or {})).mappings().all()
        return [dict(row) for row in rows]

    # Customers
    async def add_customer(self, profile: CustomerProfile) -> Customer:
        """Register a new customer in the ``registered`` state.

        Raises
        ------
        DuplicateKeyError
            If the email is taken, or the generated tracking code collides
            and ``config.tracking_code_retries`` is exhausted.
        """
        attempts = self.config.tracking_code_retries + 1
        for attempt in range(1, attempts + 1):
            customer = Customer(
                id=self._id_factory(),
                tracking_code=self._tracking_code_factory(),
                created_at=datetime.now(),
                status=CustomerStatus.REGISTERED,
                **asdict(profile),
            )
            try:
                await self._write(schema.insert_sql("customers"), to_dict_fast(customer))
            except DuplicateKeyError as exc:
                if exc.field != "tracking_code" or attempt == attempts:
                    raise
                logger.warning(
                    "Tracking code collision on attempt %d/%d, regenerating",
                    attempt,
                    attempts,
                )
                continue
            logger.debug(
                "Added customer %s (%s)",
                customer.id,
                customer.tracking_code,
                extra=record_context(customer.tracking_code, "customer", customer.id, customer.status),
            )
            return customer
        raise AssertionError("unreachable")

    async def get_customer(self, customer_id: str) -> Customer | None:
        """Get a customer by record id, or ``None``."""
        row = await self._fetch_one("SELECT * FROM customers WHERE id = :id", {"id": customer_id})
        return customer_from_dict(row) if row else None

    async def get_customer_by_tracking_code(self, tracking_code: str) -> Customer | None:
        """Get a customer by tracking code, or ``None`` when absent."""
        row = await self._fetch_one(
            "SELECT * FROM customers WHERE tracking_code = :code", {"code": tracking_code}
        )
        return customer_from_dict(row) if row else None

    async def update_customer(self, customer: Customer) -> None:
        """Replace the stored customer having the same id.

        Raises
        ------
        NotFoundError
            If no customer has ``customer.id``.
        DuplicateKeyError
            If the new email or tracking code belongs to another customer.
        """
        updated = await self._write(schema.update_sql("customers"), to_dict_fast(customer))
        if not updated:
            raise NotFoundError(f"Customer {customer.id} not found")
        # status may be a plain string; the store does not coerce it
        status = getattr(customer.status, "value", customer.status)
        logger.debug(
            "Updated customer %s status=%s",
            customer.id,
            status,
            extra=record_context(customer.tracking_code, "customer", customer.id, status),
        )

    async def get_all_customers(self) -> list[Customer]:
        """Get every customer, in no particular order."""
        rows = await self._fetch_all("SELECT * FROM customers")
        return [customer_from_dict(row) for row in rows]

    async def get_customers_with_appointments(self) -> list[Customer]:
        """Get customers with an appointment date who have not paid yet."""
        customers = await self.get_all_customers()
        return [
            c for c in customers
            if c.appointment_date is not None and c.status != CustomerStatus.PAID
        ]

    async def get_upcoming_appointments(self, limit: int = 5) -> list[Customer]:
        """Get the earliest ``limit`` appointments, ordered by date and time."""
        customers = await self.get_all_customers()
        scheduled = [c for c in customers if c.appointment_date is not None]
        scheduled.sort(key=lambda c: (c.appointment_date, c.appointment_time or ""))
        return scheduled[:limit]

    async def count_by_status(self) -> dict[str, int]:
        """Return the customer total and a count per status."""
        rows = await self._fetch_all(
            "SELECT status, COUNT(*) AS n FROM customers GROUP BY status"
        )
        counts = {status.value: 0 for status in CustomerStatus}
        for row in rows:
            counts[row["status"]] = row["n"]
        return {"total": sum(counts.values()), **counts}

    # Invoices
    async def add_invoice(self, fields: NewInvoice) -> Invoice:
        """Store a new invoice. The tracking code is not checked."""
        invoice = Invoice(
            id=self._id_factory(),
            tracking_code=fields.tracking_code,
            amount=fields.amount,
            currency=fields.currency,
            description=fields.description,
            created_at=datetime.now(),
            status=fields.status,
        )
        await self._write(schema.insert_sql("invoices"), to_dict_fast(invoice))
        logger.debug(
            "Added invoice %s for %s",
            invoice.id,
            invoice.tracking_code,
            extra=record_context(invoice.tracking_code, "invoice", invoice.id, invoice.status),
        )
        return invoice

    async def get_invoice(self, invoice_id: str) -> Invoice | None:
        """Get an invoice by id, or ``None``."""
        row = await self._fetch_one("SELECT * FROM invoices WHERE id = :id", {"id": invoice_id})
        return invoice_from_dict(row) if row else None

    async def update_invoice(self, invoice: Invoice) -> None:
        """Replace the stored invoice having the same id.

        Raises
        ------
        NotFoundError
            If no invoice has ``invoice.id``.
        """
        updated = await self._write(schema.update_sql("invoices"), to_dict_fast(invoice))
        if not updated:
            raise NotFoundError(f"Invoice {invoice.id} not found")

    async def get_invoices_by_tracking_code(self, tracking_code: str) -> list[Invoice]:
        """Get all invoices issued under a tracking code."""
        rows = await self._fetch_all(
            "SELECT * FROM invoices WHERE tracking_code = :code", {"code": tracking_code}
        )
        return [invoice_from_dict(row) for row in rows]

    async def get_all_invoices(self) -> list[Invoice]:
        rows = await self._fetch_all("SELECT * FROM invoices")
        return [invoice_from_dict(row) for row in rows]

    # Payments
    async def add_payment(self, fields: NewPayment) -> PaymentRecord:
        """Store a new payment. Neither reference is checked."""
        payment = PaymentRecord(id=self._id_factory(), **asdict(fields))
        await self._write(schema.insert_sql("payments"), to_dict_fast(payment))
        logger.debug(
            "Added payment %s for %s",
            payment.id,
            payment.tracking_code,
            extra=record_context(payment.tracking_code, "payment", payment.id),
        )
        return payment

    async def get_payments_by_tracking_code(
        self, tracking_code: str
    ) -> list[PaymentRecord]:
        """Get all payments recorded under a tracking code."""
        rows = await self._fetch_all(
            "SELECT * FROM payments WHERE tracking_code = :code", {"code": tracking_code}
        )
        return [payment_from_dict(row) for row in rows]

    async def get_all_payments(self) -> list[PaymentRecord]:
        rows = await self._fetch_all("SELECT * FROM payments")
        return [payment_from_dict(row) for row in rows]


@contextmanager
def _engine_errors() -> Iterator[None]:
    """Translate SQLAlchemy errors into the store's error types."""
    try:
        yield
    except IntegrityError as exc:
        message = str(exc.orig)
        if "UNIQUE constraint failed" not in message:
            raise StorageIOError(message) from exc
        raise _duplicate_key_error(message) from exc
    except SQLAlchemyError as exc:
        logger.exception("Storage engine failure")
        raise StorageIOError(str(exc)) from exc


def _duplicate_key_error(message: str) -> DuplicateKeyError:
    # "UNIQUE constraint failed: customers.email"
    target = message.rsplit(":", 1)[-1].strip()
    field = schema.UNIQUE_FIELDS.get(target)
    if field is None:
        return DuplicateKeyError(message)
    logger.info("Duplicate %s rejected (%s)", field, target)
    return DuplicateKeyError(f"Duplicate {field}: {message}", field=field)
