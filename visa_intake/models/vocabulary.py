"""Suggested values offered to operators when filling in records.

The store accepts any text for these fields; the lists only seed form
choices and sample data.
"""

DEFAULT_CURRENCY = "USD"

PAYMENT_METHODS = [
    "Credit Card",
    "Bank Transfer",
    "Cash",
    "Check",
    "PayPal",
    "Other",
]

CONSULATES = [
    "Istanbul",
    "Ankara",
    "Izmir",
    "Antalya",
    "Adana",
    "Gaziantep",
    "Bursa",
    "Konya",
]

VISA_TYPES = [
    "Tourist Visa",
    "Business Visa",
    "Student Visa",
    "Work Visa",
    "Residence Visa",
    "Transit Visa",
]
