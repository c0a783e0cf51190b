import asyncio
from typing import Callable, ContextManager, Optional

from selenium import webdriver

from app.features.scan.errors import ScreenshotFailure
from app.features.scan.services.scraping.scraping_service import ScrapingService
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ScreenshotService:
    """
    Best-effort viewport capture. Never raises: every failure is logged and
    reported as None, and the browser is quit whether navigation worked or not.
    """

    def __init__(
        self,
        timeout: int = settings.SCREENSHOT_TIMEOUT_SECONDS,
        enabled: bool = settings.SCREENSHOT_ENABLED,
        browser_factory: Callable[[], ContextManager[webdriver.Chrome]] = ScrapingService.browser,
    ):
        self.timeout = timeout
        self.enabled = enabled
        self.browser_factory = browser_factory

    async def capture(self, url: str) -> Optional[str]:
        if not self.enabled:
            logger.info("Screenshot capture disabled; skipping")
            return None

        try:
            screenshot = await asyncio.to_thread(self._capture, url)
        except ScreenshotFailure as e:
            logger.warning(f"Screenshot capture failed for {url}: {e}")
            return None

        logger.info(f"Screenshot captured for {url} ({len(screenshot)} base64 characters)")
        return screenshot

    def _capture(self, url: str) -> str:
        try:
            with self.browser_factory() as driver:
                driver.set_page_load_timeout(self.timeout)
                driver.get(url)
                return driver.get_screenshot_as_base64()
        except Exception as e:
            raise ScreenshotFailure(str(e) or type(e).__name__, cause=e) from e
