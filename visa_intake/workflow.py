"""Customer status workflow.

A customer moves forward through four states::

    registered -> appointment-scheduled -> invoiced -> paid

The store itself accepts any status value. All status changes made by the
application go through the three step functions below, which read the
customer, check the transition against :data:`TRANSITIONS`, and write the
result back while holding ``store.transaction_lock``.

Steps that touch two collections (an invoice plus the customer, a payment
plus the customer) are still separate store writes. If the second write
fails the first one stays; the exception propagates to the caller.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from visa_intake.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from visa_intake.logging import get_logger, record_context
from visa_intake.models import (
    DEFAULT_CURRENCY,
    Customer,
    CustomerStatus,
    Invoice,
    InvoiceStatus,
    NewInvoice,
    NewPayment,
    PaymentRecord,
)
from visa_intake.serialization import parse_amount
from visa_intake.store.local import LocalStore

logger = get_logger(__name__)

TRANSITIONS: dict[CustomerStatus, frozenset[CustomerStatus]] = {
    CustomerStatus.REGISTERED: frozenset(
        {CustomerStatus.APPOINTMENT_SCHEDULED, CustomerStatus.INVOICED}
    ),
    # Rescheduling keeps the customer in the same state
    CustomerStatus.APPOINTMENT_SCHEDULED: frozenset(
        {CustomerStatus.APPOINTMENT_SCHEDULED, CustomerStatus.INVOICED}
    ),
    CustomerStatus.INVOICED: frozenset({CustomerStatus.PAID}),
    CustomerStatus.PAID: frozenset(),
}

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def can_transition(current: CustomerStatus, target: CustomerStatus) -> bool:
    """Whether a customer in ``current`` may move to ``target``."""
    return target in TRANSITIONS.get(current, frozenset())


def advance(customer: Customer, target: CustomerStatus, **changes: Any) -> Customer:
    """Return a copy of ``customer`` in ``target`` with ``changes`` applied.

    Raises
    ------
    InvalidTransitionError
        If the transition is not allowed from the customer's status.
    """
    if not can_transition(customer.status, target):
        raise InvalidTransitionError(customer.status.value, target.value)
    return replace(customer, status=target, **changes)


async def schedule_appointment(
    store: LocalStore,
    tracking_code: str,
    appointment_date: date | str,
    appointment_time: str,
) -> Customer:
    """Set the appointment and move the customer to ``appointment-scheduled``.

    Parameters
    ----------
    store : LocalStore
        Store holding the customer.
    tracking_code : str
        Customer tracking code.
    appointment_date : date | str
        Appointment day, a ``date`` or ISO string (``2025-03-01``).
    appointment_time : str
        Appointment time as ``HH:MM``.

    Returns
    -------
    Customer
        The updated customer as stored.
    """
    day = _parse_appointment_date(appointment_date)
    if not appointment_time or not _TIME_PATTERN.match(appointment_time):
        raise ValidationError(f"Appointment time must be HH:MM, got {appointment_time!r}")

    async with store.transaction_lock:
        customer = await _require_customer(store, tracking_code)
        updated = advance(
            customer,
            CustomerStatus.APPOINTMENT_SCHEDULED,
            appointment_date=day,
            appointment_time=appointment_time,
        )
        await store.update_customer(updated)

    logger.info(
        "%s: appointment %s %s",
        tracking_code,
        day.isoformat(),
        appointment_time,
        extra=record_context(tracking_code, "customer", updated.id, updated.status),
    )
    return updated


async def issue_invoice(
    store: LocalStore,
    tracking_code: str,
    amount: Decimal | str | int,
    description: str,
    currency: str = DEFAULT_CURRENCY,
) -> tuple[Customer, Invoice]:
    """Create an issued invoice and move the customer to ``invoiced``.

    The invoice id is attached to the customer as ``invoice_id``.
    """
    value = _positive_amount(amount)
    if not description or not description.strip():
        raise ValidationError("Invoice description is required")

    async with store.transaction_lock:
        customer = await _require_customer(store, tracking_code)
        if not can_transition(customer.status, CustomerStatus.INVOICED):
            raise InvalidTransitionError(customer.status.value, CustomerStatus.INVOICED.value)

        invoice = await store.add_invoice(
            NewInvoice(
                tracking_code=tracking_code,
                amount=value,
                description=description.strip(),
                currency=currency,
                status=InvoiceStatus.ISSUED,
            )
        )
        updated = advance(customer, CustomerStatus.INVOICED, invoice_id=invoice.id)
        await store.update_customer(updated)

    logger.info(
        "%s: invoiced %s %s",
        tracking_code,
        value,
        currency,
        extra=record_context(tracking_code, "invoice", invoice.id, invoice.status),
    )
    return updated, invoice


async def record_payment(
    store: LocalStore,
    tracking_code: str,
    amount: Decimal | str | int,
    payment_method: str,
    invoice_id: str | None = None,
    payment_date: datetime | None = None,
    notes: str | None = None,
) -> tuple[Customer, PaymentRecord]:
    """Record a payment, mark its invoice paid and move the customer to ``paid``.

    ``invoice_id`` defaults to the invoice attached to the customer.
    """
    value = _positive_amount(amount)
    if not payment_method or not payment_method.strip():
        raise ValidationError("Payment method is required")

    async with store.transaction_lock:
        customer = await _require_customer(store, tracking_code)
        if not can_transition(customer.status, CustomerStatus.PAID):
            raise InvalidTransitionError(customer.status.value, CustomerStatus.PAID.value)

        target_invoice = invoice_id or customer.invoice_id
        if target_invoice is None:
            raise ValidationError(f"Customer {tracking_code} has no invoice to pay")

        invoice = await store.get_invoice(target_invoice)
        if invoice is not None and invoice.tracking_code != tracking_code:
            raise ValidationError(
                f"Invoice {target_invoice} belongs to {invoice.tracking_code}, not {tracking_code}"
            )

        payment = await store.add_payment(
            NewPayment(
                tracking_code=tracking_code,
                invoice_id=target_invoice,
                amount=value,
                payment_method=payment_method.strip(),
                payment_date=payment_date or datetime.now(),
                notes=notes,
            )
        )

        if invoice is None:
            logger.warning(
                "%s: payment references unknown invoice %s",
                tracking_code,
                target_invoice,
                extra=record_context(tracking_code, "invoice", target_invoice),
            )
        elif invoice.status != InvoiceStatus.PAID:
            await store.update_invoice(replace(invoice, status=InvoiceStatus.PAID))

        updated = advance(customer, CustomerStatus.PAID)
        await store.update_customer(updated)

    logger.info(
        "%s: paid %s by %s",
        tracking_code,
        value,
        payment.payment_method,
        extra=record_context(tracking_code, "payment", payment.id, updated.status),
    )
    return updated, payment


async def _require_customer(store: LocalStore, tracking_code: str) -> Customer:
    customer = await store.get_customer_by_tracking_code(tracking_code)
    if customer is None:
        raise NotFoundError(f"No customer with tracking code {tracking_code}")
    return customer


def _parse_appointment_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError("Appointment date is required")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Invalid appointment date: {value!r}") from exc


def _positive_amount(amount: Decimal | str | int) -> Decimal:
    value = parse_amount(amount)
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"Amount must be positive, got {amount!r}")
    return value
