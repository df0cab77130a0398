"""Webhook event dispatcher.

Fans a host event out to every target resolved for its realm. Each target
gets its own fire-and-forget POST on the shared delivery runtime, bounded
by the target's timeout. Outcomes are classified and logged; nothing is
retried and no failure reaches the host.
"""

import asyncio
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum

import httpx
import structlog

from http_webhook.errors import RealmLookupError, SerializationError
from http_webhook.host import HostSession
from http_webhook.webhooks.client import DeliveryRuntime
from http_webhook.webhooks.events import AdminEvent, Event, EventSerializer, HostEvent
from http_webhook.webhooks.models import WebhookTarget
from http_webhook.webhooks.routing import RouteResolver

logger = structlog.get_logger(__name__)

REALM_ID_HEADER = "X-Keycloak-RealmId"
REALM_NAME_HEADER = "X-Keycloak-Realm"


class DeliveryOutcome(str, Enum):
    """How a single delivery ended."""

    SUCCESS = "success"
    APPLICATION_ERROR = "application_error"  # receiver answered non-2xx
    TRANSPORT_ERROR = "transport_error"  # no usable response, incl. timeouts


@dataclass(frozen=True)
class DeliveryResult:
    """Result of delivering one event to one target."""

    target_url: str
    event_type: str
    outcome: DeliveryOutcome
    status_code: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is DeliveryOutcome.SUCCESS


def build_headers(target: WebhookTarget, realm_id: str, realm_name: str) -> dict[str, str]:
    """Build the request headers for one target.

    Args:
        target: Receiving target.
        realm_id: Realm id of the event.
        realm_name: Realm name of the event.

    Returns:
        Header mapping; Authorization is only present if configured.
    """
    headers = {
        "Content-Type": "application/json",
        "User-Agent": f"Keycloak Webhook for {realm_name} ({realm_id})",
        REALM_ID_HEADER: realm_id,
        REALM_NAME_HEADER: realm_name,
    }
    if target.authorization_header:
        headers["Authorization"] = target.authorization_header
    return headers


class WebhookDispatcher:
    """Per-session event listener that forwards events to webhook targets.

    Instances are cheap; the factory creates one per host session. The HTTP
    client, configuration and route cache behind them are shared.
    """

    def __init__(
        self,
        session: HostSession,
        runtime: DeliveryRuntime,
        resolver: RouteResolver,
        serializer: EventSerializer | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            session: Host session used for realm lookups.
            runtime: Shared delivery runtime.
            resolver: Route resolver backed by the configuration store.
            serializer: Event serializer (a default one if not provided).
        """
        self._session = session
        self._runtime = runtime
        self._resolver = resolver
        self._serializer = serializer or EventSerializer()
        self._logger = logger.bind(component="webhook_dispatcher")

    def on_event(self, event: Event) -> list[Future[DeliveryResult]]:
        """Forward a user event."""
        return self.deliver(event.realm_id, event.type_tag, event)

    def on_admin_event(
        self,
        event: AdminEvent,
        include_representation: bool = True,  # noqa: ARG002
    ) -> list[Future[DeliveryResult]]:
        """Forward an admin event.

        The representation is forwarded whenever the host attached one;
        ``include_representation`` is part of the host callback signature.
        """
        return self.deliver(event.realm_id, event.type_tag, event)

    def deliver(
        self,
        realm_id: str,
        event_type: str,
        event: HostEvent,
    ) -> list[Future[DeliveryResult]]:
        """Send an event to every target configured for its realm.

        Returns immediately; the POSTs run on the delivery runtime. Failures
        are logged and never raised.

        Args:
            realm_id: Id of the realm the event belongs to.
            event_type: Type tag used in log messages.
            event: Event to serialize and send.

        Returns:
            One future per target, resolving to its DeliveryResult. Empty
            if the event was dropped or no target is configured.
        """
        self._logger.debug("event_received", realm_id=realm_id, event_type=event_type)

        try:
            realm_name = self._lookup_realm_name(realm_id)
        except RealmLookupError as e:
            self._logger.error("realm_lookup_failed", **e.to_dict())
            return []

        try:
            body = self._serializer.serialize(event)
        except SerializationError as e:
            self._logger.error(
                "event_serialization_failed", event_type=event_type, **e.to_dict()
            )
            return []

        targets = self._resolver.targets_for(realm_name)
        if not targets:
            self._logger.debug("no_targets_for_realm", realm=realm_name)
            return []

        futures: list[Future[DeliveryResult]] = []
        for target in targets:
            headers = build_headers(target, realm_id, realm_name)
            try:
                future = self._runtime.submit(
                    self._post(target, headers, body, event_type)
                )
            except RuntimeError as e:
                self._logger.error(
                    "delivery_not_scheduled", event_type=event_type, error=str(e)
                )
                break
            futures.append(future)

        self._logger.debug(
            "event_dispatched",
            realm=realm_name,
            event_type=event_type,
            target_count=len(futures),
        )
        return futures

    def close(self) -> None:
        """Nothing to release; shared resources belong to the factory."""

    def _lookup_realm_name(self, realm_id: str) -> str:
        realm = self._session.realms().get_realm(realm_id)
        if realm is None:
            raise RealmLookupError(realm_id)
        return realm.name

    async def _post(
        self,
        target: WebhookTarget,
        headers: dict[str, str],
        body: bytes,
        event_type: str,
    ) -> DeliveryResult:
        """Make a single delivery attempt and classify its outcome."""
        try:
            response = await asyncio.wait_for(
                self._runtime.client.post(target.url, content=body, headers=headers),
                timeout=target.request_timeout,
            )
        except (TimeoutError, httpx.TimeoutException):
            self._logger.error(
                "delivery_timeout",
                url=target.url,
                event_type=event_type,
                timeout=target.request_timeout,
            )
            return DeliveryResult(
                target_url=target.url,
                event_type=event_type,
                outcome=DeliveryOutcome.TRANSPORT_ERROR,
                error="Request timeout",
            )
        except httpx.HTTPError as e:
            self._logger.error(
                "delivery_transport_error",
                url=target.url,
                event_type=event_type,
                error=str(e) or type(e).__name__,
            )
            return DeliveryResult(
                target_url=target.url,
                event_type=event_type,
                outcome=DeliveryOutcome.TRANSPORT_ERROR,
                error=str(e) or type(e).__name__,
            )
        except Exception as e:
            self._logger.error(
                "delivery_unexpected_error",
                url=target.url,
                event_type=event_type,
                error=repr(e),
            )
            return DeliveryResult(
                target_url=target.url,
                event_type=event_type,
                outcome=DeliveryOutcome.TRANSPORT_ERROR,
                error=repr(e),
            )

        if not response.is_success:
            self._logger.error(
                "delivery_unsuccessful_status",
                url=target.url,
                event_type=event_type,
                status_code=response.status_code,
            )
            return DeliveryResult(
                target_url=target.url,
                event_type=event_type,
                outcome=DeliveryOutcome.APPLICATION_ERROR,
                status_code=response.status_code,
            )

        self._logger.info(
            "delivery_success",
            url=target.url,
            event_type=event_type,
            status_code=response.status_code,
        )
        return DeliveryResult(
            target_url=target.url,
            event_type=event_type,
            outcome=DeliveryOutcome.SUCCESS,
            status_code=response.status_code,
        )
