"""Forward Keycloak events to HTTP webhook targets.

The host registers HttpWebhookProviderFactory under the id "http_webhook";
it reads its bootstrap settings from the environment and routes every
event to the targets configured for the event's realm.
"""

from http_webhook.config import Settings
from http_webhook.errors import (
    ConfigLoadError,
    RealmLookupError,
    SerializationError,
    SettingsError,
    WebhookError,
)
from http_webhook.provider import PROVIDER_ID, HttpWebhookProviderFactory

__all__ = [
    "PROVIDER_ID",
    "ConfigLoadError",
    "HttpWebhookProviderFactory",
    "RealmLookupError",
    "SerializationError",
    "Settings",
    "SettingsError",
    "WebhookError",
]
