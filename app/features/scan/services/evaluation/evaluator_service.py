import asyncio
import json
import tempfile
from pathlib import Path
from typing import Any, Callable, ContextManager, Dict, List, Sequence

from axe_selenium_python import Axe
from selenium import webdriver

from app.features.scan.errors import EvaluationFailure
from app.features.scan.schemas.results import ScanResult
from app.features.scan.services.rendering.render_service import RenderedPage
from app.features.scan.services.scraping.scraping_service import ScrapingService
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

BrowserFactory = Callable[[], ContextManager[webdriver.Chrome]]


class EvaluatorService:
    """
    Runs axe-core against a rendered DOM.

    The script-stripped document is written to a temporary file and opened in
    headless Chrome; axe (bundled with axe-selenium-python) is injected and run
    with a tag filter. Selenium is blocking, so the whole run happens in a
    worker thread.
    """

    def __init__(
        self,
        run_tags: Sequence[str] = tuple(settings.AXE_RUN_TAGS),
        timeout: int = settings.EVALUATION_TIMEOUT_SECONDS,
        browser_factory: BrowserFactory = ScrapingService.browser,
        axe_factory: Callable[[webdriver.Chrome], Axe] = Axe,
    ):
        self.run_tags: List[str] = list(run_tags)
        self.timeout = timeout
        self.browser_factory = browser_factory
        self.axe_factory = axe_factory

    @property
    def axe_options(self) -> Dict[str, Any]:
        return {"runOnly": {"type": "tag", "values": self.run_tags}}

    async def evaluate(self, page: RenderedPage) -> ScanResult:
        logger.info(f"Running accessibility rules against {page.url} (tags={self.run_tags})")
        raw = await asyncio.to_thread(self._run_axe, page.serialize())
        try:
            result = ScanResult.from_axe(page.url, raw)
        except Exception as e:
            raise EvaluationFailure(f"Could not read axe-core results: {e}", cause=e) from e
        logger.info(
            f"Accessibility scan complete for {page.url} - {len(result.violations)} violations, "
            f"{len(result.passes)} passes, {len(result.incomplete)} incomplete"
        )
        return result

    def _run_axe(self, html: str) -> Dict[str, Any]:
        try:
            with tempfile.TemporaryDirectory(prefix="accessscan-") as tmp_dir:
                page_path = Path(tmp_dir) / "page.html"
                page_path.write_text(html, encoding="utf-8")

                with self.browser_factory() as driver:
                    driver.set_page_load_timeout(self.timeout)
                    driver.set_script_timeout(self.timeout)
                    driver.get(page_path.as_uri())

                    axe = self.axe_factory(driver)
                    axe.inject()
                    raw = axe.run(options=json.dumps(self.axe_options))
        except Exception as e:
            raise EvaluationFailure(f"Accessibility evaluation failed: {e}", cause=e) from e

        if not isinstance(raw, dict) or "violations" not in raw:
            raise EvaluationFailure(f"Unexpected axe-core response: {str(raw)[:200]}")
        return raw
