#!/usr/bin/env python3
"""Seed a local store with demo customers and export it as JSON.

Registers synthetic customers, then walks a share of them through the
workflow (appointment, invoice, payment) so every status is represented.
The resulting collections are written to the output directory in the
camelCase shape the UI reads.
"""

import argparse
import asyncio
import random
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from visa_intake.config import StoreConfig, VisaIntakeConfig
from visa_intake.export import JsonExporter
from visa_intake.generators import ProfileGenerator
from visa_intake.logging import get_logger, setup_logging
from visa_intake.models import PAYMENT_METHODS
from visa_intake.store import LocalStore, find_orphans
from visa_intake.workflow import issue_invoice, record_payment, schedule_appointment

logger = get_logger("seed_demo_data")

VISA_FEES = {
    "Tourist Visa": Decimal("80.00"),
    "Business Visa": Decimal("120.00"),
    "Student Visa": Decimal("90.00"),
    "Work Visa": Decimal("150.00"),
    "Residence Visa": Decimal("200.00"),
    "Transit Visa": Decimal("40.00"),
}

APPOINTMENT_SLOTS = ["09:00", "09:30", "10:00", "10:30", "11:00", "14:00", "14:30", "15:00"]


async def seed(store: LocalStore, num_customers: int, seed_value: int | None) -> None:
    """Register customers and advance a random share of them."""
    rng = random.Random(seed_value)
    generator = ProfileGenerator(seed=seed_value)

    logger.info("Registering %d customers", num_customers)
    for profile in generator.generate_batch(num_customers):
        customer = await store.add_customer(profile)
        code = customer.tracking_code

        # Stop at a random stage so each status appears in the data
        stage = rng.randint(0, 3)
        if stage >= 1:
            day = date.today() + timedelta(days=rng.randint(1, 60))
            await schedule_appointment(store, code, day, rng.choice(APPOINTMENT_SLOTS))
        if stage >= 2:
            fee = VISA_FEES.get(profile.visa_type, Decimal("100.00"))
            await issue_invoice(store, code, fee, f"{profile.visa_type} Fee")
        if stage >= 3:
            fee = VISA_FEES.get(profile.visa_type, Decimal("100.00"))
            await record_payment(store, code, fee, rng.choice(PAYMENT_METHODS))


async def run(args: argparse.Namespace) -> None:
    config = VisaIntakeConfig.from_env()
    store_config = StoreConfig(
        path=args.db_path or config.store.path,
        tracking_code_retries=config.store.tracking_code_retries,
        timeout=config.store.timeout,
    )

    async with LocalStore(store_config) as store:
        await seed(store, args.customers, args.seed)

        counts = await store.count_by_status()
        logger.info("Status counts: %s", counts)

        report = await find_orphans(store)
        logger.info("Integrity: %s", "clean" if report.is_clean else report.summary())

        exporter = JsonExporter(args.output_dir or config.export.output_dir, pretty=args.pretty)
        await exporter.export(store)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed a local visa intake store")
    parser.add_argument(
        "--customers",
        type=int,
        default=20,
        help="Number of customers to register (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible data",
    )
    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help="SQLite file to seed (default: $VISA_DB_PATH or visa_appointments.db)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for the JSON export (default: $OUTPUT_DIR or output)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print the JSON export",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Log level (default: INFO)",
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
