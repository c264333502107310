"""JSON snapshot export of a local store."""

import json
from pathlib import Path
from typing import Any

from visa_intake.logging import get_logger
from visa_intake.serialization import to_wire
from visa_intake.store.local import LocalStore

logger = get_logger(__name__)


class JsonExporter:
    """Write the store's collections to JSON files, one file per collection."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON exporter.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    async def export(self, store: LocalStore) -> dict[str, int]:
        """Export customers, invoices and payments; return counts per file."""
        self.write_batch("customers", await store.get_all_customers())
        self.write_batch("invoices", await store.get_all_invoices())
        self.write_batch("payments", await store.get_all_payments())
        logger.info("Exported to %s: %s", self.output_dir, self._counts)
        return dict(self._counts)

    def write_batch(self, entity_type: str, records: list[Any]) -> Path:
        """Write a batch of records to ``<entity_type>.json``."""
        file_path = self.output_dir / f"{entity_type}.json"
        data = [to_wire(record) for record in records]

        with open(file_path, "w", encoding="utf-8") as f:
            if self.pretty:
                json.dump(data, f, indent=2, ensure_ascii=False)
            else:
                json.dump(data, f, ensure_ascii=False)

        self._counts[entity_type] = len(records)
        return file_path

    @property
    def counts(self) -> dict[str, int]:
        return dict(self._counts)
