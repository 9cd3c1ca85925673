"""Item catalog routes."""
from fastapi import APIRouter

from garden_alerts.deps import SubscriptionServiceDep
from garden_alerts.routers.subscriptions import MessageResponse
from garden_alerts.schemas import CatalogEntry

router = APIRouter(tags=["catalog"])


@router.get("/items", response_model=dict[str, list[CatalogEntry]], response_model_by_alias=False)
async def list_items(service: SubscriptionServiceDep) -> dict[str, list[CatalogEntry]]:
    """Catalog entries grouped by category (seed, gear, egg, ... or other)."""
    return service.grouped_catalog()


@router.post("/refresh-items", response_model=MessageResponse)
async def refresh_items(service: SubscriptionServiceDep) -> MessageResponse:
    """Refetch item info; on failure the cached catalog is kept and success is False."""
    if await service.refresh_catalog():
        return MessageResponse(message="Item info refreshed successfully")
    return MessageResponse(success=False, message="Failed to refresh item info; keeping cached items")
