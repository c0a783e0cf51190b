"""
Tests for the axe-core rule evaluator. The browser and axe are mocked; one
test runs the real thing when a Chrome binary is available.
"""

import json
import shutil
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from app.features.scan.errors import EvaluationFailure
from app.features.scan.schemas.results import Impact
from app.features.scan.services.evaluation.evaluator_service import EvaluatorService
from app.features.scan.services.rendering.render_service import RenderService

AXE_RESULT = {
    "violations": [
        {
            "id": "image-alt",
            "description": "Ensures <img> elements have alternate text",
            "help": "Images must have alternate text",
            "helpUrl": "https://dequeuniversity.com/rules/axe/4.8/image-alt",
            "impact": "critical",
            "tags": ["cat.text-alternatives", "wcag2a", "wcag111"],
            "nodes": [
                {"html": '<img src="a.png">', "target": ["img"], "failureSummary": "Fix any of the following"},
            ],
        },
        {
            "id": "region",
            "description": "Ensures all page content is contained by landmarks",
            "help": "All page content should be contained by landmarks",
            "impact": None,
            "tags": ["cat.keyboard", "best-practice"],
            "nodes": [{"html": "<p>x</p>", "target": [["#host", "p"]]}],
        },
    ],
    "passes": [{"id": "document-title", "impact": None, "tags": ["cat.text-alternatives"], "nodes": []}],
    "incomplete": [{"id": "color-contrast", "impact": "serious", "tags": ["cat.color"], "nodes": []}],
    "inapplicable": [],
    "testEngine": {"name": "axe-core", "version": "4.8.2"},
}


def fake_browser(driver):
    @contextmanager
    def factory():
        yield driver

    return factory


def rendered_page():
    return RenderService(load_subresources=False).render(
        "<html><body><img src='a.png'></body></html>", "https://example.com/"
    )


class TestEvaluatorService:
    @pytest.mark.asyncio
    async def test_axe_results_are_normalized(self):
        driver = MagicMock()
        axe = MagicMock()
        axe.run.return_value = AXE_RESULT
        evaluator = EvaluatorService(
            run_tags=["wcag2a"], browser_factory=fake_browser(driver), axe_factory=lambda d: axe
        )

        result = await evaluator.evaluate(rendered_page())

        assert result.url == "https://example.com/"
        assert [v.id for v in result.violations] == ["image-alt", "region"]
        assert result.violations[0].impact is Impact.critical
        assert result.violations[0].category == "text-alternatives"
        assert result.violations[0].nodes[0].failure_summary == "Fix any of the following"
        assert result.violations[1].effective_impact is Impact.critical
        assert result.violations[1].nodes[0].target == ["#host p"]
        assert [p.id for p in result.passes] == ["document-title"]
        assert [i.id for i in result.incomplete] == ["color-contrast"]
        assert result.error is None

    @pytest.mark.asyncio
    async def test_page_is_opened_from_a_file_and_tag_filter_applied(self):
        driver = MagicMock()
        axe = MagicMock()
        axe.run.return_value = AXE_RESULT
        evaluator = EvaluatorService(
            run_tags=["wcag2a", "wcag2aa"],
            timeout=12,
            browser_factory=fake_browser(driver),
            axe_factory=lambda d: axe,
        )

        await evaluator.evaluate(rendered_page())

        opened = driver.get.call_args.args[0]
        assert opened.startswith("file://")
        assert opened.endswith("page.html")
        driver.set_script_timeout.assert_called_once_with(12)
        axe.inject.assert_called_once()
        options = json.loads(axe.run.call_args.kwargs["options"])
        assert options == {"runOnly": {"type": "tag", "values": ["wcag2a", "wcag2aa"]}}

    @pytest.mark.asyncio
    async def test_axe_error_becomes_evaluation_failure(self):
        axe = MagicMock()
        axe.run.side_effect = RuntimeError("javascript error: axe is not defined")
        evaluator = EvaluatorService(browser_factory=fake_browser(MagicMock()), axe_factory=lambda d: axe)

        with pytest.raises(EvaluationFailure) as exc_info:
            await evaluator.evaluate(rendered_page())

        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_browser_launch_failure_becomes_evaluation_failure(self):
        @contextmanager
        def broken_browser():
            raise OSError("chrome not found")
            yield  # pragma: no cover

        evaluator = EvaluatorService(browser_factory=broken_browser, axe_factory=MagicMock())

        with pytest.raises(EvaluationFailure):
            await evaluator.evaluate(rendered_page())

    @pytest.mark.asyncio
    async def test_unexpected_axe_payload_is_rejected(self):
        axe = MagicMock()
        axe.run.return_value = {"error": "nope"}
        evaluator = EvaluatorService(browser_factory=fake_browser(MagicMock()), axe_factory=lambda d: axe)

        with pytest.raises(EvaluationFailure):
            await evaluator.evaluate(rendered_page())


    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "violation",
        [{"id": "image-alt", "impact": "unknown"}, {"impact": "serious"}],
        ids=["unknown-impact", "missing-id"],
    )
    async def test_malformed_axe_rule_becomes_evaluation_failure(self, violation):
        axe = MagicMock()
        axe.run.return_value = {"violations": [violation], "passes": [], "incomplete": []}
        evaluator = EvaluatorService(browser_factory=fake_browser(MagicMock()), axe_factory=lambda d: axe)

        with pytest.raises(EvaluationFailure) as exc_info:
            await evaluator.evaluate(rendered_page())

        assert isinstance(exc_info.value.cause, (ValueError, KeyError))


def _chrome_available() -> bool:
    browsers = ("google-chrome", "chromium", "chromium-browser", "chrome")
    return any(shutil.which(name) for name in browsers) and shutil.which("chromedriver") is not None


@pytest.mark.skipif(not _chrome_available(), reason="Requires Chrome and chromedriver")
class TestEvaluatorWithChrome:
    @pytest.mark.asyncio
    async def test_accessible_fixture_has_fewer_violations(self):
        renderer = RenderService()
        evaluator = EvaluatorService()

        sample = await evaluator.evaluate(await renderer.load_fixture("test-sample"))
        accessible = await evaluator.evaluate(await renderer.load_fixture("test-accessible"))

        assert len(sample.violations) > 0
        assert len(accessible.violations) < len(sample.violations)
