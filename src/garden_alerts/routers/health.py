"""Health check route."""
from fastapi import APIRouter

from garden_alerts.deps import SubscriptionServiceDep
from garden_alerts.schemas import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health(service: SubscriptionServiceDep) -> HealthStatus:
    """Uptime, subscriber and pending counts, catalog state."""
    return await service.current_health()
