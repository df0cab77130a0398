"""Tests for host event records and serialization."""

import json

import pytest

from http_webhook.errors import SerializationError
from http_webhook.webhooks.events import AdminEvent, AuthDetails, Event, EventSerializer

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def serializer():
    return EventSerializer()


@pytest.fixture
def login_event():
    return Event(
        id="evt-1",
        time=1700000000000,
        type="LOGIN",
        realm_id="realm-id-1",
        client_id="account-console",
        user_id="user-1",
        session_id="session-1",
        ip_address="10.0.0.1",
        details={"username": "alice", "auth_method": "openid-connect"},
    )


@pytest.fixture
def admin_event():
    return AdminEvent(
        time=1700000000001,
        realm_id="realm-id-1",
        auth_details=AuthDetails(realm_id="master", user_id="admin-1"),
        resource_type="USER",
        operation_type="UPDATE",
        resource_path="users/user-1",
        representation='{"k":1}',
    )


# ============================================================================
# Record Tests
# ============================================================================


class TestEventRecords:
    """Tests for the event models."""

    def test_event_type_tag(self, login_event):
        assert login_event.type_tag == "LOGIN"

    def test_admin_event_type_tag(self, admin_event):
        """Test that admin events are tagged resource:operation."""
        assert admin_event.type_tag == "USER:UPDATE"

    def test_parse_host_json(self):
        """Test parsing the host's camelCase JSON."""
        event = Event.model_validate(
            {"type": "REGISTER", "realmId": "r", "userId": "u", "ipAddress": "::1"}
        )

        assert event.realm_id == "r"
        assert event.user_id == "u"
        assert event.ip_address == "::1"


# ============================================================================
# Standard Event Serialization Tests
# ============================================================================


class TestSerializeEvent:
    """Tests for serializing user events."""

    def test_returns_bytes(self, serializer, login_event):
        assert isinstance(serializer.serialize(login_event), bytes)

    def test_camel_case_output(self, serializer, login_event):
        """Test that the payload uses the host's field names."""
        payload = json.loads(serializer.serialize(login_event))

        assert payload["realmId"] == "realm-id-1"
        assert payload["clientId"] == "account-console"
        assert payload["ipAddress"] == "10.0.0.1"
        assert payload["details"] == {"username": "alice", "auth_method": "openid-connect"}

    def test_json_equivalent_to_original(self, serializer, login_event):
        """Test that parsing the payload yields the original event."""
        payload = json.loads(serializer.serialize(login_event))

        assert Event.model_validate(payload) == login_event

    def test_null_fields_included(self, serializer):
        event = Event(type="LOGOUT", realm_id="r")

        payload = json.loads(serializer.serialize(event))

        assert payload["error"] is None
        assert payload["userId"] is None


# ============================================================================
# Admin Event Serialization Tests
# ============================================================================


class TestSerializeAdminEvent:
    """Tests for serializing admin events."""

    def test_representation_inlined(self, serializer, admin_event):
        """Test that the stringified representation becomes a JSON subtree."""
        payload = json.loads(serializer.serialize(admin_event))

        assert payload["representation"] == {"k": 1}

    def test_other_fields_kept(self, serializer, admin_event):
        payload = json.loads(serializer.serialize(admin_event))

        assert payload["resourceType"] == "USER"
        assert payload["operationType"] == "UPDATE"
        assert payload["resourcePath"] == "users/user-1"
        assert payload["authDetails"]["userId"] == "admin-1"

    def test_nested_representation(self, serializer, admin_event):
        event = admin_event.model_copy(
            update={"representation": '{"username":"bob","attributes":{"a":["1","2"]}}'}
        )

        payload = json.loads(serializer.serialize(event))

        assert payload["representation"]["attributes"] == {"a": ["1", "2"]}

    def test_absent_representation(self, serializer, admin_event):
        """Test that no substitution happens without a representation."""
        event = admin_event.model_copy(update={"representation": None})

        payload = json.loads(serializer.serialize(event))

        assert payload["representation"] is None

    def test_invalid_representation_raises(self, serializer, admin_event):
        """Test that a broken representation is reported."""
        event = admin_event.model_copy(update={"representation": "{broken"})

        with pytest.raises(SerializationError, match="not valid JSON"):
            serializer.serialize(event)

    def test_deeply_nested_representation_raises(self, serializer, admin_event):
        """Test that nesting beyond the decoder's depth limit is reported."""
        depth = 200_000
        event = admin_event.model_copy(update={"representation": "[" * depth + "]" * depth})

        with pytest.raises(SerializationError, match="not valid JSON"):
            serializer.serialize(event)
