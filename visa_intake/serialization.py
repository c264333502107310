"""Conversion between entities and JSON-shaped dictionaries.

Two shapes are produced from the same dataclasses:

- flat snake_case records, used as database rows;
- camelCase "wire" records (``trackingCode``, ``fullName``...), the shape the
  presentation layer reads and writes.

The ``*_from_dict`` parsers accept either shape.
"""

import re
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from visa_intake.exceptions import ValidationError
from visa_intake.models import (
    Customer,
    CustomerStatus,
    Invoice,
    InvoiceStatus,
    PaymentRecord,
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_to_camel(name: str) -> str:
    """``tracking_code`` -> ``trackingCode``."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def camel_to_snake(name: str) -> str:
    """``trackingCode`` -> ``tracking_code``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def to_dict_fast(obj: Any) -> dict:
    """Convert a flat dataclass to a snake_case dict of JSON-safe values."""
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def to_wire(obj: Any) -> dict:
    """Convert an entity (or plain dict) to the camelCase dict consumed by the UI."""
    if is_dataclass(obj):
        data = to_dict_fast(obj)
    elif isinstance(obj, dict):
        data = serialize_value(obj)
    else:
        raise TypeError(f"Cannot serialize {type(obj).__name__}")
    return {snake_to_camel(k): v for k, v in data.items()}


def customer_from_dict(data: dict[str, Any]) -> Customer:
    """Build a Customer from a database row or wire dict."""
    d = _normalize(data)
    return Customer(
        id=d["id"],
        tracking_code=d["tracking_code"],
        full_name=d["full_name"],
        email=d["email"],
        phone=d["phone"],
        passport_number=d["passport_number"],
        consulate=d["consulate"],
        visa_type=d["visa_type"],
        created_at=_parse_datetime(d["created_at"]),
        status=CustomerStatus(d.get("status") or CustomerStatus.REGISTERED),
        appointment_date=_parse_date(d.get("appointment_date")),
        appointment_time=d.get("appointment_time"),
        invoice_id=d.get("invoice_id"),
        notes=d.get("notes"),
    )


def invoice_from_dict(data: dict[str, Any]) -> Invoice:
    """Build an Invoice from a database row or wire dict."""
    d = _normalize(data)
    return Invoice(
        id=d["id"],
        tracking_code=d["tracking_code"],
        amount=parse_amount(d["amount"]),
        currency=d["currency"],
        description=d["description"],
        created_at=_parse_datetime(d["created_at"]),
        status=InvoiceStatus(d["status"]),
    )


def payment_from_dict(data: dict[str, Any]) -> PaymentRecord:
    """Build a PaymentRecord from a database row or wire dict."""
    d = _normalize(data)
    return PaymentRecord(
        id=d["id"],
        tracking_code=d["tracking_code"],
        invoice_id=d["invoice_id"],
        amount=parse_amount(d["amount"]),
        payment_method=d["payment_method"],
        payment_date=_parse_datetime(d["payment_date"]),
        notes=d.get("notes"),
    )


def parse_amount(value: Any) -> Decimal:
    """Parse a money amount without going through float."""
    if isinstance(value, Decimal):
        return value
    try:
        # str() keeps 150.1 as Decimal("150.1") rather than its binary expansion
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid amount: {value!r}") from exc


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    return {camel_to_snake(k): v for k, v in dict(data).items()}


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    # JavaScript's toISOString() ends in "Z"
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if "T" in text:
        return _parse_datetime(text).date()
    return date.fromisoformat(text)
