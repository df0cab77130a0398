"""Host event records and their JSON serialization.

Two kinds of events arrive from the host: user-facing events (logins,
registrations, ...) and admin events (changes made through the admin API).
Both are forwarded as the JSON the host itself would produce, with one
special case: admin events carry the changed resource as a JSON string in
their ``representation`` field, which is inlined as a structured subtree so
receivers do not have to decode JSON twice.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError

from http_webhook.errors import SerializationError

REPRESENTATION_FIELD = "representation"


class _HostRecord(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Event(_HostRecord):
    """A user event, such as LOGIN or REGISTER."""

    id: str | None = None
    time: int = Field(default=0, description="Epoch milliseconds")
    type: str = Field(..., description="Event type, e.g. LOGIN")
    realm_id: str
    client_id: str | None = None
    user_id: str | None = None
    session_id: str | None = None
    ip_address: str | None = None
    error: str | None = None
    details: dict[str, str] | None = None

    @property
    def type_tag(self) -> str:
        return self.type


class AuthDetails(_HostRecord):
    """Who performed an admin operation."""

    realm_id: str | None = None
    client_id: str | None = None
    user_id: str | None = None
    ip_address: str | None = None


class AdminEvent(_HostRecord):
    """A change made through the admin API."""

    id: str | None = None
    time: int = Field(default=0, description="Epoch milliseconds")
    realm_id: str
    auth_details: AuthDetails | None = None
    resource_type: str = Field(..., description="e.g. USER, CLIENT")
    operation_type: str = Field(..., description="CREATE, UPDATE, DELETE or ACTION")
    resource_path: str | None = None
    representation: str | None = Field(
        default=None,
        description="JSON-encoded resource, if the host included it",
    )
    error: str | None = None
    details: dict[str, str] | None = None

    @property
    def type_tag(self) -> str:
        return f"{self.resource_type}:{self.operation_type}"


HostEvent = Event | AdminEvent


class EventSerializer:
    """Turns host events into JSON request bodies."""

    def serialize(self, event: HostEvent) -> bytes:
        """Serialize an event to JSON bytes.

        Args:
            event: Standard or admin event.

        Returns:
            UTF-8 encoded JSON.

        Raises:
            SerializationError: If the event or its representation cannot
                be converted.
        """
        if isinstance(event, AdminEvent):
            return self._serialize_admin_event(event)
        try:
            return event.model_dump_json(by_alias=True).encode("utf-8")
        except PydanticSerializationError as e:
            raise SerializationError(f"Failed to produce json from event: {e}") from e

    def _serialize_admin_event(self, event: AdminEvent) -> bytes:
        tree = self._to_tree(event)
        if event.representation is not None:
            try:
                tree[REPRESENTATION_FIELD] = json.loads(event.representation)
            except (json.JSONDecodeError, RecursionError) as e:
                raise SerializationError(
                    f"Admin event representation is not valid JSON: {e}",
                    details={"resource_type": event.resource_type},
                ) from e
        try:
            return json.dumps(tree, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(f"Failed to produce json from admin event: {e}") from e

    @staticmethod
    def _to_tree(event: AdminEvent) -> dict[str, Any]:
        try:
            return event.model_dump(mode="json", by_alias=True)
        except PydanticSerializationError as e:
            raise SerializationError(f"Failed to produce json from admin event: {e}") from e
