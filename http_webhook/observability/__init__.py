"""Logging setup for the webhook forwarder."""

from http_webhook.observability.logging import (
    AuthorizationRedactor,
    get_logger,
    setup_logging,
)

__all__ = [
    "AuthorizationRedactor",
    "get_logger",
    "setup_logging",
]
