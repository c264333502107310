"""Persistent local storage for the visa intake records."""

from visa_intake.store.integrity import IntegrityReport, find_orphans, verify_references
from visa_intake.store.local import LocalStore

__all__ = ["IntegrityReport", "LocalStore", "find_orphans", "verify_references"]
