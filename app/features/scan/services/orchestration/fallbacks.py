"""
Degraded scan results used when the real evaluation cannot complete.
"""
from app.features.scan.schemas.results import Impact, NodeResult, Pass, ScanResult, Violation


def sample_scan_result(url: str) -> ScanResult:
    """Canned result for reserved test identifiers: two violations, two passes."""
    return ScanResult(
        url=url,
        violations=[
            Violation(
                id="image-alt",
                description="Images must have alternate text",
                help="Images must have alternate text",
                help_url="https://dequeuniversity.com/rules/axe/4.8/image-alt",
                impact=Impact.critical,
                tags=["cat.text-alternatives", "wcag2a", "wcag111"],
                nodes=[NodeResult(html='<img src="test.jpg">', target=["img"])],
            ),
            Violation(
                id="color-contrast",
                description="Elements must have sufficient color contrast",
                help="Elements must meet minimum color contrast ratio thresholds",
                help_url="https://dequeuniversity.com/rules/axe/4.8/color-contrast",
                impact=Impact.serious,
                tags=["cat.color", "wcag2aa", "wcag143"],
                nodes=[NodeResult(html='<p style="color: #aaa">Test</p>', target=["p"])],
            ),
        ],
        passes=[
            Pass(
                id="document-title",
                description="Documents must have a title",
                help="Documents must have <title> element to aid in navigation",
                impact=Impact.moderate,
                tags=["cat.text-alternatives", "wcag2a", "wcag242"],
                nodes=[NodeResult(html="<title>Test</title>", target=["title"])],
            ),
            Pass(
                id="html-lang",
                description="HTML element must have a lang attribute",
                help="<html> element must have a lang attribute",
                impact=Impact.serious,
                tags=["cat.language", "wcag2a", "wcag311"],
                nodes=[NodeResult(html='<html lang="en">', target=["html"])],
            ),
        ],
    )


def error_scan_result(url: str, error: Exception) -> ScanResult:
    return ScanResult(url=url, error=f"Failed to scan website: {error}")
