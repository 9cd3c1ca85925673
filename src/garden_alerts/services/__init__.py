"""Service layer: feed pipeline, dispatcher, subscriber operations and HTTP error mapping."""
from garden_alerts.services.dispatcher import DispatchReport, dispatch
from garden_alerts.services.error_mapper import ErrorMapper
from garden_alerts.services.pipeline import FeedPipeline
from garden_alerts.services.subscription_service import SubscriptionService

__all__ = [
    "DispatchReport",
    "ErrorMapper",
    "FeedPipeline",
    "SubscriptionService",
    "dispatch",
]
