"""Domain models for the visa intake workflow."""

from visa_intake.models.billing import Invoice, NewInvoice, NewPayment, PaymentRecord
from visa_intake.models.customer import Customer, CustomerProfile
from visa_intake.models.enums import CustomerStatus, InvoiceStatus
from visa_intake.models.vocabulary import (
    CONSULATES,
    DEFAULT_CURRENCY,
    PAYMENT_METHODS,
    VISA_TYPES,
)

__all__ = [
    "CONSULATES",
    "Customer",
    "CustomerProfile",
    "CustomerStatus",
    "DEFAULT_CURRENCY",
    "Invoice",
    "InvoiceStatus",
    "NewInvoice",
    "NewPayment",
    "PAYMENT_METHODS",
    "PaymentRecord",
    "VISA_TYPES",
]
