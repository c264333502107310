"""Identifier and tracking code generation.

Record ids are random 128-bit UUID4 hex strings. Tracking codes are the
short customer-facing lookup keys: 8 characters drawn independently and
uniformly from ``A-Z0-9`` (36**8, about 2.8e12 combinations). Nothing here
checks for collisions; the unique index on ``customers.tracking_code``
rejects a duplicate at insert time.
"""

import secrets
import string
import uuid

TRACKING_CODE_ALPHABET = string.ascii_uppercase + string.digits
TRACKING_CODE_LENGTH = 8


def generate_id() -> str:
    """Return a new random record id."""
    return uuid.uuid4().hex


def generate_tracking_code() -> str:
    """Return a new random tracking code such as ``Q7F2K9LM``."""
    return "".join(
        secrets.choice(TRACKING_CODE_ALPHABET) for _ in range(TRACKING_CODE_LENGTH)
    )


def is_tracking_code(value: str) -> bool:
    """Check that ``value`` has the shape of a generated tracking code."""
    return len(value) == TRACKING_CODE_LENGTH and all(
        ch in TRACKING_CODE_ALPHABET for ch in value
    )
