"""Error types for the webhook forwarder.

Exception Hierarchy:
    WebhookError (base)
    ├── SettingsError - Missing or invalid environment bootstrap
    ├── ConfigLoadError - Config file could not be read, parsed or validated
    ├── RealmLookupError - Host did not know the realm of an event
    └── SerializationError - Event could not be turned into JSON

Transport and application failures of individual deliveries are not
exceptions; they are classified as DeliveryOutcome values and logged.
"""

from pathlib import Path
from typing import Any


class WebhookError(Exception):
    """Base exception for all webhook forwarder errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error details.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class SettingsError(WebhookError):
    """Required environment configuration is missing or invalid.

    Attributes:
        variable: Name of the offending environment variable.
    """

    def __init__(
        self,
        message: str,
        *,
        variable: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.variable = variable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["variable"] = self.variable
        return base


class ConfigLoadError(WebhookError):
    """The webhook configuration file could not be loaded.

    Covers I/O failures, malformed JSON and invariant violations.

    Attributes:
        path: Config file that failed to load.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["path"] = str(self.path)
        return base


class RealmLookupError(WebhookError):
    """The host returned no realm for an event's realm id."""

    def __init__(self, realm_id: str) -> None:
        super().__init__(f"Failed to lookup realm {realm_id}")
        self.realm_id = realm_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        base = super().to_dict()
        base["realm_id"] = self.realm_id
        return base


class SerializationError(WebhookError):
    """An event, or its embedded representation, could not be serialized."""
