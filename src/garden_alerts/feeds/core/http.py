"""JSON-over-HTTP fetch with upstream errors mapped to the feed error taxonomy."""
import json
from typing import Any

import httpx

from garden_alerts.exceptions import MalformedPayloadError, UpstreamFetchError

EXCERPT_LENGTH = 500


def excerpt(text: str, limit: int = EXCERPT_LENGTH) -> str:
    """Truncate text for log lines."""
    return text if len(text) <= limit else text[:limit] + "..."


async def get_json(client: httpx.AsyncClient, url: str) -> Any:
    """GET url and decode the JSON body.

    Raises:
        UpstreamFetchError: Network error, timeout or non-2xx status.
        MalformedPayloadError: Body is not valid JSON.
    """
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        raise UpstreamFetchError(
            f"HTTP error! Status: {status}, Message: {excerpt(exc.response.text)}",
            status_code=status,
        ) from exc
    except httpx.HTTPError as exc:
        raise UpstreamFetchError(f"{type(exc).__name__}: {exc}") from exc

    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise MalformedPayloadError(f"Response from {url} is not JSON: {exc}") from exc
