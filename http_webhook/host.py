"""Interfaces the forwarder expects from the identity-management host.

Only the pieces the forwarder touches are described here: realm lookup by
id through a per-request session, and the factory-side session factory
handed over at post-initialization.
"""

from typing import Protocol


class RealmModel(Protocol):
    """A realm as known to the host."""

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...


class RealmProvider(Protocol):
    """Realm lookup."""

    def get_realm(self, realm_id: str) -> RealmModel | None: ...


class HostSession(Protocol):
    """A host session, created per request or transaction."""

    def realms(self) -> RealmProvider: ...


class HostSessionFactory(Protocol):
    """Creates host sessions. The forwarder does not use it directly."""

    def create(self) -> HostSession: ...
