"""Customer profile generator for demo and test data."""

from __future__ import annotations

import random
from typing import Iterator

from faker import Faker

from visa_intake.models import CONSULATES, VISA_TYPES, CustomerProfile


class ProfileGenerator:
    """Generate synthetic registration profiles.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_US``).
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US") -> None:
        self.fake = Faker(locale)
        self._random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate(self) -> CustomerProfile:
        """Generate a single profile."""
        return self._generate_one()

    def generate_batch(self, count: int) -> Iterator[CustomerProfile]:
        """Generate multiple profiles.

        Emails within one generator never repeat, so a batch can be
        registered in a single store without duplicate-key failures.

        Parameters
        ----------
        count : int
            Number of profiles to generate.

        Yields
        ------
        CustomerProfile
            Generated profiles.
        """
        for _ in range(count):
            yield self._generate_one()

    def _generate_one(self) -> CustomerProfile:
        return CustomerProfile(
            full_name=self.fake.name(),
            email=self.fake.unique.email(),
            phone=self.fake.phone_number(),
            passport_number=self.fake.bothify("??#######").upper(),
            consulate=self._random.choice(CONSULATES),
            visa_type=self._random.choice(VISA_TYPES),
        )
