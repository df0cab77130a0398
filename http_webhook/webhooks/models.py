"""Routing configuration models.

The routing file names a set of webhook targets, the targets every realm
receives by default, and per-realm overrides:

    {
      "targets": {"audit": {"url": "https://audit.example.com/hook"}},
      "defaultTargets": ["audit"],
      "routes": {"master": ["audit"]}
    }

Unknown keys are rejected so that typos surface at load time instead of
silently dropping a route.
"""

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_REQUEST_TIMEOUT_MILLIS = 5000


def _unique_names(value: Any) -> Any:
    """Collapse repeated target names, keeping first occurrence order."""
    if value is None:
        return ()
    if isinstance(value, list | tuple):
        return tuple(dict.fromkeys(value))
    return value


class WebhookTarget(BaseModel):
    """A remote HTTP endpoint receiving event payloads."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    url: str = Field(
        ..., description="Absolute HTTP(S) URL, used verbatim"
    )
    authorization_header: str | None = Field(
        default=None,
        alias="authorizationHeader",
        description="Sent verbatim as the Authorization header when set",
    )
    request_timeout_millis: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT_MILLIS,
        alias="requestTimeoutMillis",
        description="Bound on the entire HTTP exchange",
        gt=0,
        strict=True,
    )

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        try:
            parsed = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid URL {value!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ValueError(f"URL {value!r} must be an absolute http(s) URL")
        return value

    @property
    def request_timeout(self) -> float:
        """Request timeout in seconds."""
        return self.request_timeout_millis / 1000


class ConfigSnapshot(BaseModel):
    """An immutable, validated routing configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    targets: dict[str, WebhookTarget] = Field(
        ..., description="Target name to endpoint"
    )
    default_targets: tuple[str, ...] = Field(
        default=(),
        alias="defaultTargets",
        description="Targets for realms without a route",
    )
    routes: dict[str, tuple[str, ...]] = Field(
        default_factory=dict,
        description="Realm name to target names",
    )

    @field_validator("targets")
    @classmethod
    def _check_target_names(
        cls, value: dict[str, WebhookTarget]
    ) -> dict[str, WebhookTarget]:
        for name in value:
            if not name:
                raise ValueError("Target names must not be empty")
        return value

    @field_validator("default_targets", mode="before")
    @classmethod
    def _normalize_default_targets(cls, value: Any) -> Any:
        return _unique_names(value)

    @field_validator("routes", mode="before")
    @classmethod
    def _normalize_routes(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {realm: _unique_names(names) for realm, names in value.items()}
        return value

    @model_validator(mode="after")
    def _check_references(self) -> "ConfigSnapshot":
        if not self.targets and not self.default_targets:
            raise ValueError("No routes have been defined!")
        for name in self.default_targets:
            if name not in self.targets:
                raise ValueError(f"Default target {name} is not defined!")
        for realm, names in self.routes.items():
            for name in names:
                if name not in self.targets:
                    raise ValueError(
                        f"Route for realm {realm} references undefined target {name}!"
                    )
        return self

    def target_names_for(self, realm: str) -> tuple[str, ...]:
        """Target names a realm's events go to.

        An empty route is treated the same as a missing one.
        """
        return self.routes.get(realm) or self.default_targets
