"""
ZIP code geocoding via Zippopotam.us.

API:   https://api.zippopotam.us/us/{zip}   (no key required)

Response (abridged)::

    {"post code": "06010",
     "places": [{"latitude": "41.6717", "longitude": "-72.9426", ...}]}

Only 5-digit US ZIP codes are looked up; anything else is "not found"
without a request.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

from lureiq.ingestion.exceptions import GeocodingError
from lureiq.models.conditions import Coordinates

logger = logging.getLogger(__name__)

_ZIP_RE = re.compile(r"^\d{5}$")


def is_valid_zip(zip_code: Optional[str]) -> bool:
    return bool(zip_code) and bool(_ZIP_RE.match(zip_code.strip()))


class GeocodingClient:
    """Async ZIP → coordinates lookup."""

    def __init__(
        self,
        base_url: str = "https://api.zippopotam.us/us",
        timeout_s: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._http = http_client

    async def lookup(self, zip_code: str) -> Optional[Coordinates]:
        """Return coordinates for ``zip_code`` or ``None`` when not found.

        Raises:
            GeocodingError: On network failure or a 5xx response.
        """
        if not is_valid_zip(zip_code):
            logger.debug("GeocodingClient: '%s' is not a 5-digit ZIP", zip_code)
            return None

        url = f"{self.base_url}/{zip_code.strip()}"
        try:
            if self._http is not None:
                resp = await self._http.get(url, timeout=self.timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as http:
                    resp = await http.get(url)
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoding request failed: {exc}", source="zippopotam") from exc

        if resp.status_code >= 500:
            raise GeocodingError(
                f"Geocoding provider error: {resp.status_code}",
                source="zippopotam",
                status_code=resp.status_code,
            )
        if resp.status_code != 200:
            return None

        try:
            place = (resp.json().get("places") or [None])[0]
            if not place:
                return None
            return Coordinates(lat=float(place["latitude"]), lon=float(place["longitude"]))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.debug("GeocodingClient: unusable payload for %s: %s", zip_code, exc)
            return None
