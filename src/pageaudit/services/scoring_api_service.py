# src/pageaudit/services/scoring_api_service.py
import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


class ScoringApiError(Exception):
    """Raised for any failure of the external SEO scoring endpoint."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ScoringApiService:
    """
    Client for the external SEO scoring endpoint.
    Sends a single JSON POST with the page HTML; no retries, no authentication.

    The aiohttp session is created lazily and owned by this service unless the
    caller passes its own session in.
    """

    def __init__(
            self,
            url: str,
            timeout: Optional[float] = 30.0,
            session: Optional[aiohttp.ClientSession] = None
    ):
        self.url = url
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
            self.session = aiohttp.ClientSession(timeout=timeout_obj)
            self._owns_session = True
            logger.debug("ScoringApiService: Session initialized.")

    async def close(self):
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()
            logger.debug("ScoringApiService: Session closed.")

    async def analyze(self, html: str) -> Dict[str, Any]:
        """
        POSTs `{"html": html}` and returns the decoded JSON object.

        Raises:
            ScoringApiError: on transport errors, timeouts, non-2xx statuses,
                             undecodable bodies or a body that is not a JSON object.
        """
        if not self.session or self.session.closed:
            await self.initialize()

        start_time = time.perf_counter()
        try:
            async with self.session.post(
                    self.url,
                    json={"html": html},
                    headers={"Content-Type": "application/json"}
            ) as response:
                status = response.status
                if not 200 <= status < 300:
                    raise ScoringApiError(f"Scoring API returned HTTP {status}", status=status)
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ScoringApiError(f"Scoring API request failed: {e!r}") from e
        finally:
            logger.debug(
                "Scoring API call to %s took %.1f ms",
                self.url, (time.perf_counter() - start_time) * 1000
            )

        try:
            data = json.loads(body)
        except (json.JSONDecodeError, TypeError) as e:
            raise ScoringApiError(f"Scoring API returned invalid JSON: {e}", status=status) from e

        if not isinstance(data, dict):
            raise ScoringApiError("Scoring API response is not a JSON object", status=status)
        return data
