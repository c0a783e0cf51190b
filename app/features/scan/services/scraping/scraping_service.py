from contextlib import contextmanager
from typing import Iterator, Optional

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

VIEWPORT_WIDTH = 1280
VIEWPORT_HEIGHT = 720


class ScrapingService:
    @staticmethod
    def build_options(width: int = VIEWPORT_WIDTH, height: int = VIEWPORT_HEIGHT) -> Options:
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--no-first-run")
        chrome_options.add_argument("--disable-extensions")
        chrome_options.add_argument(f"--window-size={width},{height}")
        return chrome_options

    @staticmethod
    def build_driver(
        width: int = VIEWPORT_WIDTH,
        height: int = VIEWPORT_HEIGHT,
        chromedriver_path: Optional[str] = settings.CHROMEDRIVER_PATH,
    ) -> webdriver.Chrome:
        chrome_options = ScrapingService.build_options(width, height)

        if chromedriver_path:
            driver_service = Service(executable_path=chromedriver_path)
            driver = webdriver.Chrome(service=driver_service, options=chrome_options)
        else:
            driver = webdriver.Chrome(options=chrome_options)

        return driver

    @staticmethod
    @contextmanager
    def browser(
        width: int = VIEWPORT_WIDTH,
        height: int = VIEWPORT_HEIGHT,
    ) -> Iterator[webdriver.Chrome]:
        """
        One browser per call, always quit on the way out.
        Launch failures propagate to the caller.
        """
        driver = ScrapingService.build_driver(width, height)
        try:
            yield driver
        finally:
            try:
                driver.quit()
            except Exception as e:
                logger.warning(f"Error while quitting browser: {e}")
