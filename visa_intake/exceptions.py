"""Custom exception hierarchy for visa-intake."""


class VisaIntakeError(Exception):
    """Base exception for all visa-intake errors."""


class StorageError(VisaIntakeError):
    """Base exception for failures of the local store."""


class StorageInitError(StorageError):
    """Raised when the local database cannot be opened or provisioned."""


class StorageIOError(StorageError):
    """Raised when the storage engine fails during an operation."""


class DuplicateKeyError(StorageError):
    """Raised when an insert or update violates a unique index.

    Parameters
    ----------
    message : str
        Human readable description.
    field : str | None
        Name of the unique field that collided (``tracking_code`` or ``email``).
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EntityNotFoundError(VisaIntakeError):
    """Raised when a referenced entity does not exist."""


class NotFoundError(EntityNotFoundError):
    """Raised when a mutation targets a record absent from the store."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a denormalized reference points at a missing record."""


class InvalidEntityStateError(VisaIntakeError):
    """Raised when an entity is in an invalid state for the operation."""


class InvalidTransitionError(InvalidEntityStateError):
    """Raised when a customer status transition is not allowed."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move customer from {current!r} to {target!r}")
        self.current = current
        self.target = target


class ValidationError(VisaIntakeError):
    """Raised when workflow input is missing or malformed."""


class ConfigurationError(VisaIntakeError):
    """Raised when configuration is invalid or missing."""
