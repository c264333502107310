"""Enumeration types for visa-intake entities."""

from enum import Enum


class CustomerStatus(str, Enum):
    REGISTERED = "registered"
    APPOINTMENT_SCHEDULED = "appointment-scheduled"
    INVOICED = "invoiced"
    PAID = "paid"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"
