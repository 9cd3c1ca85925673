from datetime import datetime, timedelta, timezone

import pytest

from garden_alerts.catalog import ItemCatalog
from garden_alerts.config import VerificationMode
from garden_alerts.engine import (ChangeDetector, EmailRenderer,
                                  NotificationPlanner, SnapshotStore)
from garden_alerts.notifiers import NotifierABC, SendResult
from garden_alerts.services import FeedPipeline
from garden_alerts.subscriptions import SubscriptionRegistry

BASE_URL = "http://alerts.test"
T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class RecordingNotifier(NotifierABC):
    """Collects sends; addresses in `fail` get a transient failure, `raise_for` raise."""

    def __init__(self, fail: set[str] | None = None, raise_for: set[str] | None = None) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = fail or set()
        self.raise_for = raise_for or set()
        self.closed = False

    async def send(self, recipient: str, subject: str, html_body: str) -> SendResult:
        if recipient in self.raise_for:
            raise RuntimeError("boom")
        if recipient in self.fail:
            return SendResult.transient("mailbox busy")
        self.sent.append((recipient, subject, html_body))
        return SendResult.delivered()

    async def close(self) -> None:
        self.closed = True

    def recipients(self) -> list[str]:
        return [recipient for recipient, _, _ in self.sent]


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeSleep:
    """Records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def catalog():
    return ItemCatalog("https://img.test")


@pytest.fixture
def renderer(catalog):
    return EmailRenderer(BASE_URL, catalog.placeholder_icon)


@pytest.fixture
def registry(clock):
    return SubscriptionRegistry(VerificationMode.DIRECT_CONFIRM, clock=clock)


@pytest.fixture
def verified_registry(clock):
    return SubscriptionRegistry(
        VerificationMode.VERIFY_THEN_CONFIRM, clock=clock, token_factory=iter(["tok1", "tok2", "tok3"]).__next__
    )


@pytest.fixture
def planner(catalog, renderer):
    return NotificationPlanner(catalog, renderer)


@pytest.fixture
def pipeline(planner, registry, notifier):
    return FeedPipeline(ChangeDetector(SnapshotStore()), planner, registry, notifier)


def stock_doc(**categories: list[dict]) -> dict:
    """Stock document with the given `<category>_stock` lists."""
    return {f"{name}_stock": items for name, items in categories.items()}


def weather_doc(*events: dict, discord_invite: str | None = None) -> dict:
    document: dict = {"weather": list(events)}
    if discord_invite is not None:
        document["discord_invite"] = discord_invite
    return document
