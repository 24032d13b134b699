"""
Hosted base-weight overrides.

Document format::

    {"weights": {"Chatterbait": 4, "Ned Rig": 2.5}}

Fetched once at startup so weights can be retuned without a release. The
source is optional: a blank URL, a network failure, a non-2xx status or a
malformed document all mean "no overrides" and are only logged at DEBUG.
Non-numeric values are dropped; names the catalog does not know are kept
here and ignored by the scorer.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


def parse_weights(payload: Any) -> Optional[dict[str, float]]:
    """Extract the ``weights`` map, or ``None`` if the document has none."""
    if not isinstance(payload, dict):
        return None
    weights = payload.get("weights")
    if not isinstance(weights, dict):
        return None
    return {
        str(name): float(value)
        for name, value in weights.items()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    }


async def fetch_override_weights(
    url: str,
    timeout_s: float = 10.0,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Optional[dict[str, float]]:
    """Fetch the override map from ``url``; never raises."""
    if not url:
        return None
    try:
        if http_client is not None:
            resp = await http_client.get(url, timeout=timeout_s, headers={"Cache-Control": "no-store"})
        else:
            async with httpx.AsyncClient(timeout=timeout_s) as http:
                resp = await http.get(url, headers={"Cache-Control": "no-store"})
        if resp.status_code != 200:
            logger.debug("Weight overrides unavailable (HTTP %d)", resp.status_code)
            return None
        weights = parse_weights(resp.json())
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug("Weight overrides unavailable: %s", exc)
        return None

    if weights is not None:
        logger.info("Loaded %d lure weight override(s)", len(weights))
    return weights
