"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator, Callable, Iterable

import pytest
import pytest_asyncio

from visa_intake.config import StoreConfig
from visa_intake.models import CustomerProfile
from visa_intake.store import LocalStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def ada_profile() -> CustomerProfile:
    """Registration profile used by the scenario tests."""
    return CustomerProfile(
        full_name="Ada Lovelace",
        email="ada@example.com",
        phone="+44 20 7946 0000",
        passport_number="GB1234567",
        consulate="Istanbul",
        visa_type="Tourist Visa",
    )


@pytest.fixture
def make_profile() -> Callable[..., CustomerProfile]:
    """Factory for profiles with distinct emails."""

    def _make(name: str = "Test Customer", email: str | None = None, **overrides: str) -> CustomerProfile:
        slug = name.lower().replace(" ", ".").replace("..", ".")
        fields = {
            "full_name": name,
            "email": email or f"{slug}@example.com",
            "phone": "+90 555 000 0000",
            "passport_number": "U12345678",
            "consulate": "Ankara",
            "visa_type": "Business Visa",
        }
        fields.update(overrides)
        return CustomerProfile(**fields)

    return _make


@pytest.fixture
def code_sequence() -> Callable[[Iterable[str]], Callable[[], str]]:
    """Build tracking code factories that hand out fixed codes in order."""

    def _sequence(codes: Iterable[str]) -> Callable[[], str]:
        iterator = iter(codes)
        return lambda: next(iterator)

    return _sequence


@pytest_asyncio.fixture
async def store() -> AsyncIterator[LocalStore]:
    """Fresh in-memory store for each test."""
    local = LocalStore(StoreConfig(path=":memory:"))
    yield local
    await local.close()
