"""API routers for the alert service.

Includes routes for:
- /request-verification, /verify, /subscribe, /unsub, /test-email - subscribers
- /items, /refresh-items - item catalog
- /health - service health
"""
from garden_alerts.routers.catalog import router as catalog_router
from garden_alerts.routers.health import router as health_router
from garden_alerts.routers.subscriptions import router as subscriptions_router

__all__ = [
    "catalog_router",
    "health_router",
    "subscriptions_router",
]
