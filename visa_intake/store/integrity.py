"""Consistency checks for the denormalized references between collections.

Invoices and payments point at their customer through ``tracking_code`` and
payments point at their invoice through ``invoice_id``. The store accepts
these values as plain data on write; this module reports the ones that do
not resolve.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from visa_intake.exceptions import ReferentialIntegrityError
from visa_intake.logging import get_logger
from visa_intake.models import Invoice, PaymentRecord
from visa_intake.store.local import LocalStore

logger = get_logger(__name__)


@dataclass
class IntegrityReport:
    """References that do not resolve to a stored record."""

    orphan_invoices: list[Invoice] = field(default_factory=list)
    orphan_payments: list[PaymentRecord] = field(default_factory=list)
    unmatched_payments: list[PaymentRecord] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (self.orphan_invoices or self.orphan_payments or self.unmatched_payments)

    def summary(self) -> dict[str, int]:
        """Return counts per kind of dangling reference."""
        return {
            "orphan_invoices": len(self.orphan_invoices),
            "orphan_payments": len(self.orphan_payments),
            "unmatched_payments": len(self.unmatched_payments),
        }


async def find_orphans(store: LocalStore) -> IntegrityReport:
    """Scan the store for dangling tracking codes and invoice ids.

    Parameters
    ----------
    store : LocalStore
        Store to scan.

    Returns
    -------
    IntegrityReport
        Invoices and payments whose tracking code matches no customer, and
        payments whose invoice id matches no invoice.
    """
    customers = await store.get_all_customers()
    invoices = await store.get_all_invoices()
    payments = await store.get_all_payments()

    codes = {c.tracking_code for c in customers}
    invoice_ids = {i.id for i in invoices}

    report = IntegrityReport(
        orphan_invoices=[i for i in invoices if i.tracking_code not in codes],
        orphan_payments=[p for p in payments if p.tracking_code not in codes],
        unmatched_payments=[p for p in payments if p.invoice_id not in invoice_ids],
    )
    if not report.is_clean:
        logger.warning("Dangling references found: %s", report.summary())
    return report


async def verify_references(store: LocalStore) -> IntegrityReport:
    """Like :func:`find_orphans` but raise when anything dangles.

    Raises
    ------
    ReferentialIntegrityError
        If the report is not clean.
    """
    report = await find_orphans(store)
    if not report.is_clean:
        details = ", ".join(f"{k}={v}" for k, v in report.summary().items() if v)
        raise ReferentialIntegrityError(f"Dangling references: {details}")
    return report
