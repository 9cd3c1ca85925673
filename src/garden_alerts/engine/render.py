"""Email rendering with Jinja2 templates."""
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATE_DIR = Path(__file__).parent / "templates"
ENV = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(enabled_extensions=("html",)),
)

STOCK_SUBJECT = "🌱 Grow A Garden Stock Updated!"
VERIFICATION_SUBJECT = "🌱 Verify Your Grow A Garden Subscription"
TEST_SUBJECT = "Test Email from Grow A Garden"


def weather_subject(event_name: str) -> str:
    return f"🌦️ Grow A Garden Weather Event: {event_name}"


def format_duration(seconds: float | None) -> str:
    """Whole minutes, floor-divided; 'Unknown' when missing or zero."""
    if not seconds:
        return "Unknown"
    return f"{int(seconds // 60)} minutes"


@dataclass(frozen=True)
class StockRow:
    name: str
    quantity: int
    icon: str


@dataclass(frozen=True)
class StockSection:
    title: str | None
    rows: list[StockRow] = field(default_factory=list)


class EmailRenderer:
    """Renders notification, verification and test emails to HTML."""

    def __init__(self, public_base_url: str, placeholder_icon: str) -> None:
        self._base_url = public_base_url.rstrip("/")
        self._placeholder_icon = placeholder_icon

    def unsubscribe_url(self, email: str) -> str:
        return f"{self._base_url}/unsub?{urlencode({'email': email})}"

    def verification_url(self, email: str, token: str) -> str:
        return f"{self._base_url}/verify?{urlencode({'email': email, 'token': token})}"

    def render_stock(self, email: str, sections: list[StockSection]) -> str:
        return ENV.get_template("stock_update.html").render(
            sections=sections,
            placeholder_icon=self._placeholder_icon,
            unsubscribe_url=self.unsubscribe_url(email),
        )

    def render_weather(
        self,
        email: str,
        event_name: str,
        duration_seconds: float | None,
        discord_invite: str | None,
    ) -> str:
        return ENV.get_template("weather_event.html").render(
            event_name=event_name,
            duration=format_duration(duration_seconds),
            discord_invite=discord_invite,
            unsubscribe_url=self.unsubscribe_url(email),
        )

    def render_verification(self, email: str, token: str, ttl_hours: int = 24) -> str:
        return ENV.get_template("verification.html").render(
            verification_url=self.verification_url(email, token),
            ttl_hours=ttl_hours,
        )

    def render_test(self) -> str:
        return ENV.get_template("test_email.html").render()
