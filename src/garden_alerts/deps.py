"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

No external DI container. Lifespan (main.py) builds the components once and
attaches them to app.state; these getters are used by Depends().
"""
from typing import Annotated

from fastapi import Depends, Request

from garden_alerts.services import ErrorMapper, SubscriptionService


def get_subscription_service(request: Request) -> SubscriptionService:
    """Resolve SubscriptionService from app.state (created at startup)."""
    return request.app.state.subscription_service


def get_error_mapper(request: Request) -> ErrorMapper:
    """Resolve the shared ErrorMapper from app.state."""
    return request.app.state.error_mapper


# Type aliases for route injection
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]
ErrorMapperDep = Annotated[ErrorMapper, Depends(get_error_mapper)]
