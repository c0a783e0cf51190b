"""
Tests for the headless Chrome helpers and best-effort screenshot capture.
"""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from app.features.scan.services.scraping.scraping_service import ScrapingService
from app.features.scan.services.scraping.screenshot_service import ScreenshotService


def fake_browser(driver):
    @contextmanager
    def factory():
        yield driver

    return factory


class TestScrapingService:
    def test_options_are_headless_with_fixed_viewport(self):
        options = ScrapingService.build_options(1280, 720)

        assert "--headless=new" in options.arguments
        assert "--no-sandbox" in options.arguments
        assert "--window-size=1280,720" in options.arguments

    def test_browser_is_quit_on_success(self):
        driver = MagicMock()
        with patch.object(ScrapingService, "build_driver", return_value=driver):
            with ScrapingService.browser() as browser:
                assert browser is driver

        driver.quit.assert_called_once()

    def test_browser_is_quit_when_navigation_fails(self):
        driver = MagicMock()
        driver.get.side_effect = TimeoutError("navigation timed out")

        with patch.object(ScrapingService, "build_driver", return_value=driver):
            with pytest.raises(TimeoutError):
                with ScrapingService.browser() as browser:
                    browser.get("https://example.com")

        driver.quit.assert_called_once()

    def test_quit_errors_are_not_raised(self):
        driver = MagicMock()
        driver.quit.side_effect = RuntimeError("already gone")

        with patch.object(ScrapingService, "build_driver", return_value=driver):
            with ScrapingService.browser():
                pass

        driver.quit.assert_called_once()


class TestScreenshotService:
    @pytest.mark.asyncio
    async def test_capture_returns_base64(self):
        driver = MagicMock()
        driver.get_screenshot_as_base64.return_value = "iVBORw0KGgo="
        service = ScreenshotService(timeout=20, enabled=True, browser_factory=fake_browser(driver))

        assert await service.capture("https://example.com") == "iVBORw0KGgo="
        driver.set_page_load_timeout.assert_called_once_with(20)
        driver.get.assert_called_once_with("https://example.com")

    @pytest.mark.asyncio
    async def test_navigation_error_returns_none(self):
        driver = MagicMock()
        driver.get.side_effect = RuntimeError("net::ERR_NAME_NOT_RESOLVED")
        service = ScreenshotService(enabled=True, browser_factory=fake_browser(driver))

        assert await service.capture("https://nowhere.invalid") is None

    @pytest.mark.asyncio
    async def test_launch_failure_returns_none(self):
        factory = MagicMock(side_effect=OSError("cannot start chrome"))
        service = ScreenshotService(enabled=True, browser_factory=factory)

        assert await service.capture("https://example.com") is None

    @pytest.mark.asyncio
    async def test_browser_released_when_navigation_fails(self):
        driver = MagicMock()
        driver.get.side_effect = RuntimeError("timeout")

        with patch.object(ScrapingService, "build_driver", return_value=driver):
            service = ScreenshotService(enabled=True, browser_factory=ScrapingService.browser)
            assert await service.capture("https://example.com") is None

        driver.quit.assert_called_once()

    @pytest.mark.asyncio
    async def test_disabled_capture_skips_browser(self):
        factory = MagicMock()
        service = ScreenshotService(enabled=False, browser_factory=factory)

        assert await service.capture("https://example.com") is None
        factory.assert_not_called()
