"""Bootstrap settings for the webhook forwarder.

The forwarder is configured in two layers: a handful of environment
variables read once when the host initializes the plugin, and the JSON
routing file those variables point to (see http_webhook.webhooks.models).
"""

import os
from dataclasses import dataclass
from pathlib import Path

from http_webhook.errors import SettingsError

CONFIG_FILE_ENV = "KEYCLOAK_WEBHOOK_CONFIG_FILE"
CONFIG_WATCH_ENV = "KEYCLOAK_WEBHOOK_CONFIG_WATCH"
LOG_LEVEL_ENV = "KEYCLOAK_WEBHOOK_LOG_LEVEL"
LOG_FORMAT_ENV = "KEYCLOAK_WEBHOOK_LOG_FORMAT"

LOG_FORMATS = ("json", "console")


def _get_flag_env(name: str) -> bool:
    """Read a feature flag from the environment.

    Only the exact string "true" enables the flag.

    Args:
        name: Environment variable name.

    Returns:
        True if the variable is set to "true".
    """
    return os.getenv(name) == "true"


@dataclass(frozen=True)
class Settings:
    """Settings loaded from environment variables.

    Attributes:
        config_file: Path of the JSON routing configuration.
        watch_config: Reload the routing file when it changes on disk.
        log_level: Minimum log level.
        log_format: "json" for production, "console" for development.
    """

    config_file: Path
    watch_config: bool = False
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            Settings instance populated from environment.

        Raises:
            SettingsError: If the config file variable is unset or a
                value is not recognized.
        """
        config_file = os.getenv(CONFIG_FILE_ENV)
        if not config_file:
            raise SettingsError(
                f"No webhook config file has been given! Set the {CONFIG_FILE_ENV} env var!",
                variable=CONFIG_FILE_ENV,
            )

        log_format = os.getenv(LOG_FORMAT_ENV, "json").lower()
        if log_format not in LOG_FORMATS:
            raise SettingsError(
                f"Unsupported log format {log_format!r}",
                variable=LOG_FORMAT_ENV,
                details={"allowed": list(LOG_FORMATS)},
            )

        return cls(
            config_file=Path(config_file),
            watch_config=_get_flag_env(CONFIG_WATCH_ENV),
            log_level=os.getenv(LOG_LEVEL_ENV, "INFO").upper(),
            log_format=log_format,
        )
