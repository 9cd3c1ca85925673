"""Subscription registry and its background expiry sweep."""
from garden_alerts.subscriptions.registry import (PendingVerification,
                                                  SubscriptionRegistry,
                                                  generate_token,
                                                  normalize_email)
from garden_alerts.subscriptions.sweeper import run_expiry_sweeper

__all__ = [
    "PendingVerification",
    "SubscriptionRegistry",
    "generate_token",
    "normalize_email",
    "run_expiry_sweeper",
]
