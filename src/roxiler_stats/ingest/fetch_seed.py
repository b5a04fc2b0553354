"""Download the seed transaction dump."""

from __future__ import annotations

import logging
from typing import Any

from roxiler_stats.errors import SeedSourceUnavailable

log = logging.getLogger(__name__)

_BODY_PREVIEW = 500


def fetch_seed_records(url: str, timeout: float = 30.0) -> list[dict[str, Any]]:
    """Fetch the remote JSON dump and return its records.

    Args:
        url: Location of a JSON array of transaction-shaped objects.
        timeout: Request timeout in seconds.

    Returns:
        The decoded list of records (not yet validated).

    Raises:
        SeedSourceUnavailable: on transport errors, non-2xx responses, bodies
            that are not JSON, or JSON that is not an array.
    """
    import requests  # type: ignore[import-untyped]  # local import to avoid requiring type stubs at module import

    log.info("Downloading seed data from %s", url)
    try:
        r = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise SeedSourceUnavailable(f"Seed request to {url} failed: {exc}") from exc

    if not r.ok:
        raise SeedSourceUnavailable(
            f"Seed request to {url} returned HTTP {r.status_code}",
            status_code=r.status_code,
            response_body=r.text[:_BODY_PREVIEW],
        )

    try:
        data = r.json()
    except ValueError as exc:
        raise SeedSourceUnavailable(
            f"Seed response from {url} is not valid JSON",
            status_code=r.status_code,
            response_body=r.text[:_BODY_PREVIEW],
        ) from exc

    if not isinstance(data, list):
        raise SeedSourceUnavailable(
            f"Seed response from {url} is not a JSON array",
            status_code=r.status_code,
            response_body=r.text[:_BODY_PREVIEW],
        )

    log.info("Fetched %d seed records", len(data))
    return data
