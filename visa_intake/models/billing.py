"""Invoice and payment models."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from visa_intake.models.enums import InvoiceStatus
from visa_intake.models.vocabulary import DEFAULT_CURRENCY


@dataclass
class NewInvoice:
    """Invoice fields supplied by the caller; id and created_at are assigned."""

    tracking_code: str
    amount: Decimal
    description: str
    currency: str = DEFAULT_CURRENCY
    status: InvoiceStatus = InvoiceStatus.ISSUED


@dataclass
class Invoice:
    """Invoice issued to a customer, linked by tracking code."""

    id: str
    tracking_code: str  # Denormalized reference to Customer.tracking_code
    amount: Decimal
    currency: str
    description: str
    created_at: datetime
    status: InvoiceStatus


@dataclass
class NewPayment:
    """Payment fields supplied by the caller; id is assigned."""

    tracking_code: str
    invoice_id: str
    amount: Decimal
    payment_method: str
    payment_date: datetime
    notes: str | None = None


@dataclass
class PaymentRecord:
    """Payment received against an invoice."""

    id: str
    tracking_code: str
    invoice_id: str  # Not validated against the invoices collection
    amount: Decimal
    payment_method: str
    payment_date: datetime
    notes: str | None = None
