"""Configuration management for visa-intake."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from visa_intake.exceptions import ConfigurationError

DATABASE_NAME = "VisaAppointmentDB"
SCHEMA_VERSION = 1


@dataclass
class StoreConfig:
    """Local store configuration."""

    path: str | Path = "visa_appointments.db"
    database_name: str = DATABASE_NAME
    schema_version: int = SCHEMA_VERSION
    tracking_code_retries: int = 0
    timeout: float = 5.0

    def __post_init__(self) -> None:
        if self.tracking_code_retries < 0:
            raise ConfigurationError("tracking_code_retries must be >= 0")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    @property
    def is_memory(self) -> bool:
        """Whether the store lives only in memory."""
        return str(self.path) == ":memory:"


@dataclass
class ExportConfig:
    """JSON export configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class VisaIntakeConfig:
    """Main configuration for visa-intake."""

    store: StoreConfig = field(default_factory=StoreConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    log_level: str = "INFO"
    log_format: str = "standard"
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "VisaIntakeConfig":
        """Create config from environment variables."""
        store = StoreConfig(
            path=os.getenv("VISA_DB_PATH", "visa_appointments.db"),
            tracking_code_retries=_int_env("VISA_TRACKING_CODE_RETRIES", "0"),
            timeout=_float_env("VISA_DB_TIMEOUT", "5.0"),
        )

        export = ExportConfig(
            output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        seed = os.getenv("SEED")

        return cls(
            store=store,
            export=export,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            seed=_int_env("SEED", seed) if seed else None,
        )


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
