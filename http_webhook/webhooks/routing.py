"""Per-realm target resolution.

Resolved routes are memoized per configuration snapshot. The snapshot and
its memo table travel together in a RoutingState, which is what the
configuration store publishes; a reload swaps in a fresh state with an empty
table, so a reader can never pair the new snapshot with old cache entries.
"""

from typing import Protocol

from http_webhook.webhooks.models import ConfigSnapshot, WebhookTarget

ResolvedRoute = tuple[WebhookTarget, ...]


class RoutingState:
    """A published snapshot bundled with its route cache."""

    __slots__ = ("snapshot", "cache")

    def __init__(self, snapshot: ConfigSnapshot) -> None:
        self.snapshot = snapshot
        self.cache: dict[str, ResolvedRoute] = {}


class RoutingStateSource(Protocol):
    """Anything that publishes routing states, usually a ConfigurationStore."""

    def state(self) -> RoutingState: ...


class RouteResolver:
    """Resolves realm names to the webhook targets receiving their events."""

    def __init__(self, source: RoutingStateSource) -> None:
        self._source = source

    def targets_for(self, realm: str) -> ResolvedRoute:
        """Get the targets for a realm.

        Args:
            realm: Realm name (case-sensitive).

        Returns:
            Targets in configured order; empty if the realm has no route and
            no default targets exist.
        """
        state = self._source.state()
        cached = state.cache.get(realm)
        if cached is not None:
            return cached

        snapshot = state.snapshot
        # load validation guarantees every name is defined
        targets = tuple(
            snapshot.targets[name] for name in snapshot.target_names_for(realm)
        )
        return state.cache.setdefault(realm, targets)
