"""Customer models for the visa intake workflow."""

from dataclasses import dataclass
from datetime import date, datetime

from visa_intake.models.enums import CustomerStatus


@dataclass
class CustomerProfile:
    """Fields supplied by the operator when registering a customer."""

    full_name: str
    email: str
    phone: str
    passport_number: str
    consulate: str
    visa_type: str
    notes: str | None = None


@dataclass
class Customer:
    """Visa applicant tracked through the intake workflow."""

    id: str
    tracking_code: str  # 8 chars, A-Z0-9, handed to the customer
    full_name: str
    email: str
    phone: str
    passport_number: str
    consulate: str
    visa_type: str
    created_at: datetime
    status: CustomerStatus = CustomerStatus.REGISTERED
    appointment_date: date | None = None
    appointment_time: str | None = None  # HH:MM
    invoice_id: str | None = None  # Latest invoice, not ownership
    notes: str | None = None

    @property
    def has_appointment(self) -> bool:
        """Whether an appointment date has been set."""
        return self.appointment_date is not None
