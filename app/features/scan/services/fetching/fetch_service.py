import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from app.features.scan.errors import FetchFailure
from app.platform.config import settings
from app.platform.logger import get_logger
from app.platform.utils.url_validator import normalize_url

logger = get_logger(__name__)

# Tried in order, one attempt each
USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)

BASE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass
class FetchedPage:
    url: str  # final URL after redirects
    html: str
    status_code: int


class FetchService:
    """
    Retrieves page HTML over HTTP, cycling through user agents.

    Every candidate gets exactly one attempt; network errors and non-2xx
    responses both move on to the next one after a fixed delay.
    """

    def __init__(
        self,
        user_agents: Sequence[str] = USER_AGENTS,
        timeout: float = settings.FETCH_TIMEOUT_SECONDS,
        retry_delay: float = settings.FETCH_RETRY_DELAY_SECONDS,
        max_redirects: int = settings.FETCH_MAX_REDIRECTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.user_agents = tuple(user_agents)
        self.timeout = httpx.Timeout(timeout, connect=min(timeout, 5.0))
        self.retry_delay = retry_delay
        self.max_redirects = max_redirects
        self._transport = transport

    @asynccontextmanager
    async def _client(self):
        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=BASE_HEADERS,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            transport=self._transport,
        ) as client:
            yield client

    async def fetch(self, target: str) -> FetchedPage:
        url, was_modified = normalize_url(target)
        if was_modified:
            logger.info(f"Resolved protocol-less target {target!r} to {url}")

        last_error: Optional[Exception] = None
        async with self._client() as client:
            for attempt, user_agent in enumerate(self.user_agents, start=1):
                if attempt > 1:
                    await asyncio.sleep(self.retry_delay)
                logger.info(
                    f"Fetching {url} (attempt {attempt}/{len(self.user_agents)}, "
                    f"user agent {user_agent[:40]}...)"
                )
                try:
                    response = await client.get(url, headers={"User-Agent": user_agent})
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    logger.warning(f"Fetch attempt {attempt} for {url} failed: {e}")
                    last_error = e
                    continue

                logger.info(f"Fetched {len(response.text)} characters from {response.url} ({response.status_code})")
                return FetchedPage(url=str(response.url), html=response.text, status_code=response.status_code)

        raise FetchFailure(f"Could not fetch {url}: {last_error}", cause=last_error)
