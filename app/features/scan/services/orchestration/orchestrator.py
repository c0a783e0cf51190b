"""
Scan Orchestrator

Runs one scan from the pending row to its terminal status:

    fetch -> render DOM -> evaluate  (screenshot concurrently)
          -> report (full or error, retried once in basic mode)
          -> completed | failed

Every submitted scan gets its own background task. The API call that created
the scan returns as soon as the pending row is stored; callers poll GET /scans.
"""
import asyncio
from pathlib import Path
from typing import Optional, Set

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.features.reports.services.pdf_report import ReportBranding, ReportRenderer
from app.features.reports.services.report_settings import get_report_settings
from app.features.scan.errors import ReportFailure, ScanPipelineError
from app.features.scan.models.scan import Scan, ScanStatus
from app.features.scan.schemas.results import MissingReport, ScanResult, report_input_for
from app.features.scan.services.evaluation.evaluator_service import EvaluatorService
from app.features.scan.services.fetching.fetch_service import FetchService
from app.features.scan.services.orchestration.fallbacks import error_scan_result, sample_scan_result
from app.features.scan.services.rendering.render_service import RenderService
from app.features.scan.services.scan.scan import create_scan, finalize_scan
from app.features.scan.services.scraping.screenshot_service import ScreenshotService
from app.platform.config import settings
from app.platform.logger import get_logger
from app.platform.utils.url_validator import is_reserved_token, normalize_url

logger = get_logger(__name__)


class ScanOrchestrator:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fetcher: Optional[FetchService] = None,
        renderer: Optional[RenderService] = None,
        evaluator: Optional[EvaluatorService] = None,
        screenshotter: Optional[ScreenshotService] = None,
        report_renderer: Optional[ReportRenderer] = None,
        screenshot_wait: float = settings.SCREENSHOT_WAIT_SECONDS,
    ):
        self.session_factory = session_factory
        self.fetcher = fetcher or FetchService()
        self.renderer = renderer or RenderService()
        self.evaluator = evaluator or EvaluatorService()
        self.screenshotter = screenshotter or ScreenshotService()
        self.report_renderer = report_renderer or ReportRenderer()
        self.screenshot_wait = screenshot_wait

        # Strong references to in-flight pipelines; the event loop only keeps weak ones
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active_tasks(self) -> Set[asyncio.Task]:
        return set(self._tasks)

    async def submit(self, db: AsyncSession, user_id: str, url: str) -> Scan:
        """Persist a pending scan and start its pipeline in the background."""
        scan = await create_scan(db, user_id, url)

        task = asyncio.create_task(
            self.run_pipeline(scan.id, user_id, scan.url), name=f"scan-{scan.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

        logger.info(f"Scan {scan.id} queued for {scan.url}")
        return scan

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"Pipeline task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Pipeline task {task.get_name()} crashed: {error}", exc_info=error)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Give in-flight pipelines a short grace period, then cancel the rest."""
        if not self._tasks:
            return

        pending = list(self._tasks)
        logger.info(f"Waiting for {len(pending)} scan pipeline(s) to finish")
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"Cancelled {len(still_running)} unfinished scan pipeline(s)")

    # ─────────────────────────────────────────────────────────
    # Pipeline
    # ─────────────────────────────────────────────────────────

    async def run_pipeline(self, scan_id: str, user_id: str, url: str) -> ScanStatus:
        logger.info(f"Starting scan pipeline for scan {scan_id} ({url})")
        try:
            result = await self.scan_page(url)
            branding = await self._load_branding(user_id)
            report_path = await self._generate_report(scan_id, result, branding)
        except Exception as e:
            logger.error(f"Scan pipeline for scan {scan_id} failed unexpectedly: {e}", exc_info=True)
            await self._finalize(scan_id, ScanStatus.failed)
            return ScanStatus.failed

        if report_path is None:
            await self._finalize(scan_id, ScanStatus.failed)
            return ScanStatus.failed

        await self._finalize(scan_id, ScanStatus.completed, ReportRenderer.report_url(report_path))
        return ScanStatus.completed

    async def scan_page(self, url: str) -> ScanResult:
        """
        Produce a ScanResult for the target. Never raises a pipeline error:
        reserved test tokens fall back to the canned sample result, real URLs
        to an error-carrying result.
        """
        if is_reserved_token(url):
            try:
                page = await self.renderer.load_fixture(url)
                result = await self.evaluator.evaluate(page)
            except ScanPipelineError as e:
                logger.warning(f"Evaluation of fixture {url!r} failed, using sample result: {e}")
                return sample_scan_result(url)
            result.url = url
            return result

        target, _ = normalize_url(url)
        screenshot_task = asyncio.create_task(self.screenshotter.capture(target))
        try:
            fetched = await self.fetcher.fetch(target)
            page = self.renderer.render(fetched.html, fetched.url)
            result = await self.evaluator.evaluate(page)
        except ScanPipelineError as e:
            logger.warning(f"Scan of {target} failed: {e}")
            screenshot_task.cancel()
            return error_scan_result(url, e)

        result.url = url
        result.screenshot = await self._collect_screenshot(screenshot_task)
        return result

    async def _collect_screenshot(self, task: asyncio.Task) -> Optional[str]:
        try:
            return await asyncio.wait_for(task, timeout=self.screenshot_wait)
        except asyncio.TimeoutError:
            logger.warning(f"Screenshot not ready after {self.screenshot_wait}s; continuing without it")
            return None

    async def _load_branding(self, user_id: str) -> ReportBranding:
        try:
            async with self.session_factory() as db:
                report_settings = await get_report_settings(db, user_id)
                return ReportBranding.from_settings(report_settings)
        except Exception as e:
            logger.warning(f"Could not load report settings for user {user_id}, using defaults: {e}")
            return ReportBranding()

    async def _generate_report(
        self, scan_id: str, result: ScanResult, branding: ReportBranding
    ) -> Optional[Path]:
        try:
            return await self.report_renderer.render(report_input_for(result), branding)
        except ReportFailure as e:
            logger.warning(f"Report generation failed for scan {scan_id}, retrying in basic mode: {e}")

        try:
            return await self.report_renderer.render(MissingReport(url=result.url), branding)
        except ReportFailure as e:
            logger.error(f"Basic report generation failed for scan {scan_id}: {e}")
            return None

    async def _finalize(self, scan_id: str, status: ScanStatus, report_url: Optional[str] = None) -> None:
        async with self.session_factory() as db:
            await finalize_scan(db, scan_id, status, report_url)


def get_orchestrator(request: Request) -> ScanOrchestrator:
    return request.app.state.orchestrator
