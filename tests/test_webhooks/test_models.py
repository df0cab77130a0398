"""Tests for routing configuration models."""

import json

import pytest
from pydantic import ValidationError

from http_webhook.webhooks.models import (
    DEFAULT_REQUEST_TIMEOUT_MILLIS,
    ConfigSnapshot,
    WebhookTarget,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sample_config():
    """Routing document with two targets and one route."""
    return {
        "targets": {
            "t1": {"url": "http://a"},
            "t2": {
                "url": "https://b.example.com/hook",
                "authorizationHeader": "Bearer xyz",
                "requestTimeoutMillis": 250,
            },
        },
        "defaultTargets": ["t1", "t2"],
        "routes": {"r1": ["t1"]},
    }


# ============================================================================
# WebhookTarget Tests
# ============================================================================


class TestWebhookTarget:
    """Tests for WebhookTarget model."""

    def test_defaults(self):
        """Test default values."""
        target = WebhookTarget(url="http://a")

        assert target.url == "http://a"
        assert target.authorization_header is None
        assert target.request_timeout_millis == DEFAULT_REQUEST_TIMEOUT_MILLIS
        assert target.request_timeout == 5.0

    def test_camel_case_keys(self):
        """Test that on-disk camelCase keys are accepted."""
        target = WebhookTarget.model_validate(
            {"url": "https://x", "authorizationHeader": "Basic Zm9v", "requestTimeoutMillis": 1}
        )

        assert target.authorization_header == "Basic Zm9v"
        assert target.request_timeout_millis == 1
        assert target.request_timeout == 0.001

    def test_url_kept_verbatim(self):
        """Test that the URL is not normalized."""
        target = WebhookTarget(url="http://a")

        assert target.url == "http://a"

    @pytest.mark.parametrize("url", ["not a url", "/relative/path", "ftp://host/file", ""])
    def test_rejects_non_http_urls(self, url):
        """Test that only absolute http(s) URLs are accepted."""
        with pytest.raises(ValidationError):
            WebhookTarget(url=url)

    def test_url_required(self):
        """Test that a target without URL is rejected."""
        with pytest.raises(ValidationError):
            WebhookTarget.model_validate({})

    @pytest.mark.parametrize("timeout", [0, -5])
    def test_rejects_non_positive_timeout(self, timeout):
        """Test timeout must be positive."""
        with pytest.raises(ValidationError):
            WebhookTarget.model_validate({"url": "http://a", "requestTimeoutMillis": timeout})

    @pytest.mark.parametrize("timeout", ['"100"', "true", "100.5"])
    def test_rejects_non_integer_timeout(self, timeout):
        """Test that strings and booleans are not coerced to a timeout."""
        raw = '{"url": "http://a", "requestTimeoutMillis": %s}' % timeout

        with pytest.raises(ValidationError):
            WebhookTarget.model_validate_json(raw)

    @pytest.mark.parametrize("timeout", ["100", True])
    def test_rejects_coercible_python_values(self, timeout):
        with pytest.raises(ValidationError):
            WebhookTarget.model_validate({"url": "http://a", "requestTimeoutMillis": timeout})

    def test_integer_timeout_from_json(self):
        target = WebhookTarget.model_validate_json(
            '{"url": "http://a", "requestTimeoutMillis": 100}'
        )

        assert target.request_timeout_millis == 100

    def test_rejects_unknown_fields(self):
        """Test that typos in target fields are caught."""
        with pytest.raises(ValidationError):
            WebhookTarget.model_validate({"url": "http://a", "authorisationHeader": "x"})

    def test_immutable(self):
        """Test that targets cannot be modified."""
        target = WebhookTarget(url="http://a")

        with pytest.raises(ValidationError):
            target.url = "http://b"


# ============================================================================
# ConfigSnapshot Tests
# ============================================================================


class TestConfigSnapshot:
    """Tests for ConfigSnapshot parsing and invariants."""

    def test_parse_full_document(self, sample_config):
        """Test parsing a complete document."""
        snapshot = ConfigSnapshot.model_validate_json(json.dumps(sample_config))

        assert set(snapshot.targets) == {"t1", "t2"}
        assert snapshot.default_targets == ("t1", "t2")
        assert snapshot.routes == {"r1": ("t1",)}
        assert snapshot.targets["t2"].authorization_header == "Bearer xyz"

    def test_missing_optional_sections(self):
        """Test that absent defaultTargets and routes mean empty."""
        snapshot = ConfigSnapshot.model_validate({"targets": {"t": {"url": "http://a"}}})

        assert snapshot.default_targets == ()
        assert snapshot.routes == {}

    def test_null_optional_sections(self):
        """Test that null defaultTargets and routes mean empty."""
        snapshot = ConfigSnapshot.model_validate(
            {"targets": {"t": {"url": "http://a"}}, "defaultTargets": None, "routes": None}
        )

        assert snapshot.default_targets == ()
        assert snapshot.routes == {}

    def test_targets_required(self):
        """Test that the targets section is mandatory."""
        with pytest.raises(ValidationError):
            ConfigSnapshot.model_validate({"defaultTargets": []})

    def test_empty_configuration_rejected(self):
        """Test that no targets and no defaults is rejected."""
        with pytest.raises(ValidationError, match="No routes have been defined"):
            ConfigSnapshot.model_validate({"targets": {}})

    def test_undefined_default_target(self, sample_config):
        """Test that default targets must exist."""
        sample_config["defaultTargets"] = ["missing"]

        with pytest.raises(ValidationError, match="Default target missing is not defined"):
            ConfigSnapshot.model_validate(sample_config)

    def test_undefined_route_target(self, sample_config):
        """Test that route targets must exist."""
        sample_config["routes"] = {"r1": ["t1", "nope"]}

        with pytest.raises(ValidationError, match="realm r1 references undefined target nope"):
            ConfigSnapshot.model_validate(sample_config)

    def test_names_are_case_sensitive(self, sample_config):
        """Test that target names match exactly."""
        sample_config["defaultTargets"] = ["T1"]

        with pytest.raises(ValidationError):
            ConfigSnapshot.model_validate(sample_config)

    def test_empty_target_name_rejected(self):
        """Test that target names must not be empty."""
        with pytest.raises(ValidationError, match="must not be empty"):
            ConfigSnapshot.model_validate({"targets": {"": {"url": "http://a"}}})

    def test_unknown_top_level_field_rejected(self, sample_config):
        """Test strict handling of unknown keys."""
        sample_config["defaultTarget"] = ["t1"]

        with pytest.raises(ValidationError):
            ConfigSnapshot.model_validate(sample_config)

    def test_duplicate_names_collapse(self, sample_config):
        """Test set semantics with first-occurrence order."""
        sample_config["defaultTargets"] = ["t2", "t1", "t2"]
        sample_config["routes"] = {"r1": ["t1", "t1"]}

        snapshot = ConfigSnapshot.model_validate(sample_config)

        assert snapshot.default_targets == ("t2", "t1")
        assert snapshot.routes["r1"] == ("t1",)

    def test_invalid_json(self):
        """Test that malformed JSON is a validation error."""
        with pytest.raises(ValidationError):
            ConfigSnapshot.model_validate_json(b"{not json")


class TestTargetNamesFor:
    """Tests for route selection on a snapshot."""

    def test_route_overrides_defaults(self, sample_config):
        snapshot = ConfigSnapshot.model_validate(sample_config)

        assert snapshot.target_names_for("r1") == ("t1",)

    def test_unrouted_realm_uses_defaults(self, sample_config):
        snapshot = ConfigSnapshot.model_validate(sample_config)

        assert snapshot.target_names_for("other") == ("t1", "t2")

    def test_empty_route_uses_defaults(self, sample_config):
        """Test that an empty route is treated as no route."""
        sample_config["routes"] = {"r1": []}
        snapshot = ConfigSnapshot.model_validate(sample_config)

        assert snapshot.target_names_for("r1") == ("t1", "t2")
