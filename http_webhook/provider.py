"""Host plugin factory.

The host drives the plugin through a factory lifecycle: ``init`` with its
own config scope, ``post_init`` once all plugins are registered,
``create`` for every session that emits events, and ``close`` on shutdown.
Everything expensive (configuration store, watcher thread, HTTP client) is
built once in ``post_init`` and shared by all sessions.
"""

from typing import Any

import httpx
import structlog

from http_webhook.config import Settings
from http_webhook.host import HostSession, HostSessionFactory
from http_webhook.observability.logging import setup_logging
from http_webhook.webhooks.client import DeliveryRuntime
from http_webhook.webhooks.dispatcher import WebhookDispatcher
from http_webhook.webhooks.events import EventSerializer
from http_webhook.webhooks.routing import RouteResolver
from http_webhook.webhooks.store import ConfigurationStore

logger = structlog.get_logger(__name__)

PROVIDER_ID = "http_webhook"


class HttpWebhookProviderFactory:
    """Creates per-session webhook dispatchers for the host."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        configure_logging: bool = True,
    ) -> None:
        """Initialize the factory.

        Args:
            settings: Bootstrap settings (read from the environment in
                post_init if not provided).
            transport: Optional HTTP transport for the shared client.
            configure_logging: Set up structlog output in post_init.
        """
        self._settings = settings
        self._transport = transport
        self._configure_logging = configure_logging
        self._store: ConfigurationStore | None = None
        self._runtime: DeliveryRuntime | None = None
        self._resolver: RouteResolver | None = None
        self._serializer: EventSerializer | None = None

    def get_id(self) -> str:
        return PROVIDER_ID

    def init(self, scope: Any = None) -> None:
        """Host config scope is unused; settings come from the environment."""

    def post_init(self, session_factory: HostSessionFactory | None = None) -> None:
        """Build the shared configuration store and HTTP client.

        Args:
            session_factory: Host session factory (unused).

        Raises:
            SettingsError: If required environment variables are missing.
            ConfigLoadError: If the initial configuration load fails.
        """
        settings = self._settings or Settings.from_env()
        self._settings = settings
        if self._configure_logging:
            setup_logging(level=settings.log_level, format=settings.log_format)

        store = ConfigurationStore(settings.config_file, watch=settings.watch_config)
        try:
            runtime = DeliveryRuntime(transport=self._transport)
        except Exception:
            store.close()
            raise

        self._store = store
        self._runtime = runtime
        self._resolver = RouteResolver(store)
        self._serializer = EventSerializer()

        logger.info(
            "webhook_provider_initialized",
            provider_id=PROVIDER_ID,
            config_file=str(settings.config_file),
            watch=settings.watch_config,
        )

    @property
    def settings(self) -> Settings | None:
        return self._settings

    @property
    def store(self) -> ConfigurationStore | None:
        return self._store

    def create(self, session: HostSession) -> WebhookDispatcher:
        """Create the event listener for a host session.

        Raises:
            RuntimeError: If called before post_init or after close.
        """
        if self._runtime is None or self._resolver is None:
            raise RuntimeError("Webhook provider factory is not initialized")
        return WebhookDispatcher(
            session,
            self._runtime,
            self._resolver,
            self._serializer,
        )

    def close(self) -> None:
        """Stop the watcher and release the HTTP client.

        In-flight deliveries finish (or time out) before the client closes.
        """
        store, self._store = self._store, None
        runtime, self._runtime = self._runtime, None
        self._resolver = None
        self._serializer = None
        if store is not None:
            store.close()
        if runtime is not None:
            runtime.close()
        logger.debug("webhook_provider_closed", provider_id=PROVIDER_ID)
