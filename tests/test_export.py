"""Tests for JSON export."""

import json

import pytest

from visa_intake.export import JsonExporter
from visa_intake.store import LocalStore
from visa_intake.workflow import issue_invoice, schedule_appointment


class TestJsonExporter:
    """Tests for JsonExporter."""

    def test_creates_output_dir(self, tmp_path) -> None:
        out = tmp_path / "a" / "b"
        JsonExporter(out)
        assert out.is_dir()

    @pytest.mark.asyncio
    async def test_export_writes_each_collection(self, tmp_path, store: LocalStore, ada_profile) -> None:
        customer = await store.add_customer(ada_profile)
        await schedule_appointment(store, customer.tracking_code, "2025-03-01", "09:30")
        await issue_invoice(store, customer.tracking_code, "150.00", "Visa Fee")

        exporter = JsonExporter(tmp_path)
        counts = await exporter.export(store)

        assert counts == {"customers": 1, "invoices": 1, "payments": 0}
        customers = json.loads((tmp_path / "customers.json").read_text(encoding="utf-8"))
        assert customers[0]["trackingCode"] == customer.tracking_code
        assert customers[0]["fullName"] == "Ada Lovelace"
        assert customers[0]["status"] == "invoiced"
        assert customers[0]["appointmentDate"] == "2025-03-01"
        invoices = json.loads((tmp_path / "invoices.json").read_text(encoding="utf-8"))
        assert invoices[0]["amount"] == "150.00"
        assert json.loads((tmp_path / "payments.json").read_text(encoding="utf-8")) == []

    def test_pretty_output(self, tmp_path) -> None:
        exporter = JsonExporter(tmp_path, pretty=True)
        path = exporter.write_batch("things", [{"a": 1}])
        assert "\n" in path.read_text(encoding="utf-8")
        assert exporter.counts == {"things": 1}
