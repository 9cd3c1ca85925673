"""Main module for the Grow A Garden alert service."""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import timedelta

import httpx
import uvicorn
from fastapi import FastAPI

from garden_alerts.catalog import CatalogClient, ItemCatalog
from garden_alerts.config import Settings, get_settings
from garden_alerts.engine import (ChangeDetector, EmailRenderer,
                                  NotificationPlanner, SnapshotStore)
from garden_alerts.feeds import FeedSourceABC, create_feed_sources
from garden_alerts.notifiers import NotifierABC, create_notifier
from garden_alerts.routers import (catalog_router, health_router,
                                   subscriptions_router)
from garden_alerts.services import (ErrorMapper, FeedPipeline,
                                    SubscriptionService)
from garden_alerts.subscriptions import SubscriptionRegistry, run_expiry_sweeper

logger = logging.getLogger(__name__)


@dataclass
class Components:
    """Everything the lifespan owns. Tests build one directly with fakes."""

    registry: SubscriptionRegistry
    catalog: ItemCatalog
    notifier: NotifierABC
    pipeline: FeedPipeline
    subscription_service: SubscriptionService
    catalog_client: CatalogClient | None = None
    sources: list[FeedSourceABC] = field(default_factory=list)


def build_components(
    settings: Settings,
    notifier: NotifierABC | None = None,
    catalog_http: httpx.AsyncClient | None = None,
) -> Components:
    """Wire store, detector, registry, catalog, renderer, planner and services.

    notifier and catalog_http replace the configured notifier and the catalog
    HTTP client (tests pass fakes).
    """
    ttl = timedelta(seconds=settings.verification_ttl_seconds)
    notifier = notifier or create_notifier(settings)

    catalog = ItemCatalog(settings.image_base_url)
    catalog_client = CatalogClient(
        settings.catalog_url,
        catalog,
        max_attempts=settings.poll_max_attempts,
        timeout=settings.request_timeout,
        client=catalog_http,
    )
    registry = SubscriptionRegistry(settings.verification_mode, ttl=ttl)
    renderer = EmailRenderer(settings.public_base_url, catalog.placeholder_icon)
    planner = NotificationPlanner(catalog, renderer)
    pipeline = FeedPipeline(
        ChangeDetector(SnapshotStore()),
        planner,
        registry,
        notifier,
        max_concurrent_sends=settings.max_concurrent_sends,
    )
    service = SubscriptionService(
        registry, notifier, renderer, catalog, catalog_client, ttl=ttl
    )
    return Components(
        registry=registry,
        catalog=catalog,
        notifier=notifier,
        pipeline=pipeline,
        subscription_service=service,
        catalog_client=catalog_client,
        sources=create_feed_sources(settings),
    )


async def _close_quietly(resource: object) -> None:
    try:
        await resource.close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing %s: %s", type(resource).__name__, exc)


def create_app(
    settings: Settings | None = None,
    components: Components | None = None,
    *,
    run_background: bool = True,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Configuration; defaults to the environment.
        components: Pre-built components (tests); built from settings otherwise.
        run_background: Start feed sources, the expiry sweeper and the initial
            catalog refresh in the lifespan.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        """Create components at startup; stop tasks and close resources on shutdown."""
        parts = components or build_components(settings)
        fastapi_app.state.subscription_service = parts.subscription_service
        fastapi_app.state.error_mapper = ErrorMapper()
        fastapi_app.state.components = parts

        stop_event = asyncio.Event()
        tasks: list[asyncio.Task] = []
        if run_background:
            if parts.catalog_client is not None:
                tasks.append(asyncio.create_task(parts.catalog_client.refresh(), name="catalog-refresh"))
            for source in parts.sources:
                tasks.append(
                    asyncio.create_task(
                        source.run(parts.pipeline.process), name=f"feed-{source.channel.value}"
                    )
                )
            tasks.append(
                asyncio.create_task(
                    run_expiry_sweeper(parts.registry, settings.sweep_interval, stop_event),
                    name="expiry-sweeper",
                )
            )
            logger.info("Started %d background tasks", len(tasks))

        yield

        stop_event.set()
        for source in parts.sources:
            source.stop()
        for task in tasks:
            task.cancel()
        for task, outcome in zip(tasks, await asyncio.gather(*tasks, return_exceptions=True)):
            if isinstance(outcome, Exception):
                logger.warning("Background task %s ended with %s", task.get_name(), outcome)

        # Close sources, HTTP clients and the notifier
        for resource in [*parts.sources, parts.catalog_client, parts.notifier]:
            if resource is not None:
                await _close_quietly(resource)

    fastapi_app = FastAPI(
        title="Grow A Garden Alerts",
        description="Stock and weather email alerts for Grow A Garden",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.include_router(subscriptions_router)
    fastapi_app.include_router(catalog_router)
    fastapi_app.include_router(health_router)
    return fastapi_app


def run():
    """Run the server (uvicorn). Use for `garden-alerts`."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
