"""
Feedback collector client.

Posts the whole local queue as one batch::

    POST {collector_url}
    {"records": [FeedbackRecord, ...]}

Any non-2xx response or network error raises ``CollectorError``; the
uploader treats that as a failed flush and keeps the queue for next time.

Stub mode (no ``collector_url`` configured) accepts every batch locally, so
the queue still drains during development.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from lureiq.ingestion.exceptions import CollectorError
from lureiq.models.feedback import FeedbackRecord

logger = logging.getLogger(__name__)


class CollectorClient:
    """Bulk uploader for ``FeedbackRecord`` batches.

    Attributes:
        url: Collector endpoint; empty string → stub mode.
        timeout_s: Per-request timeout in seconds.
    """

    def __init__(
        self,
        url: str = "",
        timeout_s: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._http = http_client

    @property
    def is_stub(self) -> bool:
        return not self.url

    async def upload(self, records: Sequence[FeedbackRecord]) -> None:
        """Send ``records`` in a single request.

        Raises:
            CollectorError: On network failure or any non-2xx status.
        """
        if self.is_stub:
            logger.debug("CollectorClient: stub mode, accepting %d record(s)", len(records))
            return

        body = {"records": [r.model_dump(mode="json") for r in records]}
        try:
            if self._http is not None:
                resp = await self._http.post(self.url, json=body, timeout=self.timeout_s)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_s) as http:
                    resp = await http.post(self.url, json=body)
        except httpx.HTTPError as exc:
            raise CollectorError(f"Upload failed: {exc}", source="collector") from exc

        if not resp.is_success:
            raise CollectorError(
                f"Collector rejected batch: {resp.status_code}",
                source="collector",
                status_code=resp.status_code,
            )
