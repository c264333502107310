"""Tests for config and logging."""

import json
import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from visa_intake.config import (
    DATABASE_NAME,
    SCHEMA_VERSION,
    ExportConfig,
    StoreConfig,
    VisaIntakeConfig,
)
from visa_intake.exceptions import ConfigurationError
from visa_intake.logging import (
    CONTEXT_FIELDS,
    ContextFormatter,
    JsonFormatter,
    get_logger,
    record_context,
    setup_logging,
)
from visa_intake.models import CustomerStatus, InvoiceStatus

ENV_VARS = [
    "VISA_DB_PATH",
    "VISA_TRACKING_CODE_RETRIES",
    "VISA_DB_TIMEOUT",
    "OUTPUT_DIR",
    "PRETTY_JSON",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "SEED",
]


@pytest.fixture
def clean_env() -> dict[str, str]:
    """Environment without any visa-intake variables."""
    return {k: v for k, v in os.environ.items() if k not in ENV_VARS}


class TestStoreConfig:
    """Tests for StoreConfig."""

    def test_default_values(self) -> None:
        config = StoreConfig()

        assert config.path == "visa_appointments.db"
        assert config.database_name == DATABASE_NAME == "VisaAppointmentDB"
        assert config.schema_version == SCHEMA_VERSION == 1
        assert config.tracking_code_retries == 0
        assert config.timeout == 5.0
        assert not config.is_memory

    def test_memory(self) -> None:
        assert StoreConfig(path=":memory:").is_memory

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            StoreConfig(tracking_code_retries=-1)

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            StoreConfig(timeout=0)


class TestExportConfig:
    """Tests for ExportConfig."""

    def test_default_values(self) -> None:
        config = ExportConfig()
        assert config.output_dir == Path("output")
        assert config.pretty_json is False


class TestVisaIntakeConfig:
    """Tests for VisaIntakeConfig."""

    def test_default_values(self) -> None:
        config = VisaIntakeConfig()

        assert isinstance(config.store, StoreConfig)
        assert isinstance(config.export, ExportConfig)
        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert config.seed is None

    def test_from_env_default(self, clean_env: dict[str, str]) -> None:
        with patch.dict(os.environ, clean_env, clear=True):
            config = VisaIntakeConfig.from_env()

        assert config.store.path == "visa_appointments.db"
        assert config.store.tracking_code_retries == 0
        assert config.export.output_dir == Path("output")
        assert config.export.pretty_json is False
        assert config.seed is None
        assert config.log_level == "INFO"

    def test_from_env_custom(self, clean_env: dict[str, str]) -> None:
        env = {
            **clean_env,
            "VISA_DB_PATH": "/tmp/visa.db",
            "VISA_TRACKING_CODE_RETRIES": "3",
            "VISA_DB_TIMEOUT": "2.5",
            "OUTPUT_DIR": "/tmp/out",
            "PRETTY_JSON": "true",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "json",
            "SEED": "42",
        }
        with patch.dict(os.environ, env, clear=True):
            config = VisaIntakeConfig.from_env()

        assert config.store.path == "/tmp/visa.db"
        assert config.store.tracking_code_retries == 3
        assert config.store.timeout == 2.5
        assert config.export.output_dir == Path("/tmp/out")
        assert config.export.pretty_json is True
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.seed == 42

    @pytest.mark.parametrize(
        "name,value",
        [
            ("VISA_TRACKING_CODE_RETRIES", "many"),
            ("VISA_DB_TIMEOUT", "soon"),
            ("SEED", "abc"),
        ],
    )
    def test_from_env_malformed(self, clean_env: dict[str, str], name: str, value: str) -> None:
        with patch.dict(os.environ, {**clean_env, name: value}, clear=True):
            with pytest.raises(ConfigurationError, match=name):
                VisaIntakeConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        setup_logging()

        logger = logging.getLogger("visa_intake")
        assert logger.level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        setup_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        """Test logging with invalid level defaults to INFO."""
        setup_logging(level="INVALID")
        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        setup_logging(format_type="json")

        has_json_formatter = any(
            isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers
        )
        assert has_json_formatter

    def test_setup_logging_replaces_handlers(self) -> None:
        logger = logging.getLogger()
        logger.addHandler(logging.StreamHandler())
        logger.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(logger.handlers) == 1

    def test_external_loggers_quieted(self) -> None:
        setup_logging(level="DEBUG")
        assert logging.getLogger("faker").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def _record(self, msg: str = "hello %s", args: tuple = ("world",), exc_info=None) -> logging.LogRecord:
        return logging.LogRecord(
            name="visa_intake.store.local",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg=msg,
            args=args,
            exc_info=exc_info,
        )

    def test_format_basic(self) -> None:
        data = json.loads(JsonFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "visa_intake.store.local"
        assert data["message"] == "hello world"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            import sys

            record = self._record(exc_info=sys.exc_info())

        data = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in data["exception"]

    def test_format_with_extra(self) -> None:
        record = self._record()
        record.extra = {"tracking_code": "Q7F2K9LM"}

        data = json.loads(JsonFormatter().format(record))
        assert data["tracking_code"] == "Q7F2K9LM"

    def test_format_with_record_context(self) -> None:
        record = self._record()
        for key, value in record_context("Q7F2K9LM", "invoice", "abc123", InvoiceStatus.ISSUED).items():
            setattr(record, key, value)

        data = json.loads(JsonFormatter().format(record))

        assert data["tracking_code"] == "Q7F2K9LM"
        assert data["entity"] == "invoice"
        assert data["entity_id"] == "abc123"
        assert data["status"] == "issued"

    def test_context_fields_omitted_when_unset(self) -> None:
        data = json.loads(JsonFormatter().format(self._record()))
        assert not set(CONTEXT_FIELDS) & set(data)


class TestRecordContext:
    """Tests for record_context."""

    def test_drops_unset_values(self) -> None:
        assert record_context("Q7F2K9LM") == {"tracking_code": "Q7F2K9LM"}

    def test_status_logged_by_value(self) -> None:
        assert record_context(status=CustomerStatus.PAID) == {"status": "paid"}
        assert record_context(status="invoiced") == {"status": "invoiced"}


class TestContextFormatter:
    """Tests for the standard text formatter."""

    def _format(self, **context: str) -> str:
        record = logging.LogRecord("visa_intake.workflow", logging.INFO, __file__, 1, "paid", (), None)
        for key, value in context.items():
            setattr(record, key, value)
        return ContextFormatter(fmt="%(code_tag)s%(message)s").format(record)

    def test_tracking_code_prefix(self) -> None:
        assert self._format(tracking_code="Q7F2K9LM") == "[Q7F2K9LM] paid"

    def test_no_prefix_without_tracking_code(self) -> None:
        assert self._format() == "paid"


class TestGetLogger:
    """Tests for get_logger function."""

    def test_get_logger(self) -> None:
        logger = get_logger("visa_intake.test")
        assert logger.name == "visa_intake.test"

    def test_get_logger_same_instance(self) -> None:
        assert get_logger("visa_intake.same") is get_logger("visa_intake.same")


class TestPackageInit:
    """Tests for visa_intake __init__.py."""

    def test_version_exported(self) -> None:
        from visa_intake import __version__

        assert isinstance(__version__, str)
