"""Routing and delivery engine for forwarded host events.

This module provides:
- WebhookTarget / ConfigSnapshot: Validated routing configuration
- ConfigurationStore: Atomic snapshot publication with optional hot reload
- RouteResolver: Memoized realm to target resolution
- EventSerializer: JSON bodies for user and admin events
- DeliveryRuntime: Shared async HTTP client on its own event loop thread
- WebhookDispatcher: Per-session fire-and-forget fan-out
"""

from http_webhook.webhooks.client import DeliveryRuntime
from http_webhook.webhooks.dispatcher import (
    DeliveryOutcome,
    DeliveryResult,
    WebhookDispatcher,
    build_headers,
)
from http_webhook.webhooks.events import AdminEvent, AuthDetails, Event, EventSerializer
from http_webhook.webhooks.models import ConfigSnapshot, WebhookTarget
from http_webhook.webhooks.routing import ResolvedRoute, RouteResolver, RoutingState
from http_webhook.webhooks.store import ConfigurationStore

__all__ = [
    # Models
    "ConfigSnapshot",
    "WebhookTarget",
    # Store and routing
    "ConfigurationStore",
    "ResolvedRoute",
    "RouteResolver",
    "RoutingState",
    # Events
    "AdminEvent",
    "AuthDetails",
    "Event",
    "EventSerializer",
    # Delivery
    "DeliveryOutcome",
    "DeliveryResult",
    "DeliveryRuntime",
    "WebhookDispatcher",
    "build_headers",
]
