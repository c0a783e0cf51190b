"""
PDF report renderer.

Rendering happens in two stages. `compose` lays the report out into an
in-memory ReportDocument (pages of positioned text lines and image blocks),
and `write` draws that document with ReportLab. Layout uses a top-down y
cursor on a US-Letter page; a new page starts when the cursor passes the
section's break threshold or at a fixed section boundary.

The input is one of three shapes (see ReportInput) and each shape has its own
render path:
  ErrorReport    cover plus an explanation of what went wrong
  MissingReport  minimal "incomplete report" document
  FullReport     cover, executive summary, findings, passes, manual review,
                 resources and next steps
"""
import asyncio
import base64
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from app.features.reports.models.report_settings import ReportSettings
from app.features.reports.schemas.report_settings import DEFAULT_COLORS, ReportColors
from app.features.reports.services.compliance import ComplianceLevel, compliance_level
from app.features.scan.errors import ReportFailure
from app.features.scan.schemas.results import (
    IMPACT_ORDER,
    ErrorReport,
    FullReport,
    Impact,
    MissingReport,
    ReportInput,
    RuleResult,
    ScanResult,
)
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = letter
MARGIN_LEFT = 50
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN_LEFT
TOP = 50
FOOTER_Y = 750
# lowest point any body line may reach
CONTENT_BOTTOM = FOOTER_Y - 10

# y cursor positions past which a new page is started
FINDINGS_BREAK_AT = 700
PASSES_BREAK_AT = 650

# room needed to start a block without leaving its heading alone at the bottom
GROUP_MIN_HEIGHT = 40
IMPACT_HEADING_HEIGHT = 28
VIOLATION_MIN_HEIGHT = 60

MAX_EXAMPLES = 3
MAX_GROUP_ISSUES = 3
EXAMPLE_HTML_CHARS = 100

SCREENSHOT_BOX = (MARGIN_LEFT, 330, CONTENT_WIDTH, 288)  # x, y, width, height
LOGO_BOX = (PAGE_WIDTH - MARGIN_LEFT - 140, 40, 140, 50)

FOOTER_TEXT = "Generated by AccessScan - Web Accessibility Scanner"

IMPACT_COLORS: Dict[Impact, str] = {
    Impact.critical: "#b91c1c",
    Impact.serious: "#c2410c",
    Impact.moderate: "#a16207",
    Impact.minor: "#1d4ed8",
}

LEVEL_COLORS: Dict[ComplianceLevel, str] = {
    ComplianceLevel.LOW: "#b91c1c",
    ComplianceLevel.MEDIUM: "#a16207",
    ComplianceLevel.HIGH: "#15803d",
}

RESOURCES = (
    ("WCAG 2.1 Quick Reference", "https://www.w3.org/WAI/WCAG21/quickref/"),
    ("WebAIM: Web Accessibility In Mind", "https://webaim.org/"),
    ("The A11Y Project Checklist", "https://www.a11yproject.com/checklist/"),
    ("Deque University Rule Descriptions", "https://dequeuniversity.com/rules/axe/"),
)

NEXT_STEPS = (
    "Fix every critical and serious issue first. These block users of assistive technology outright.",
    "Work through the moderate and minor issues, starting with templates shared by many pages.",
    "Review the items listed under Manual Review. Automated tools cannot decide them.",
    "Test key user journeys with a keyboard only and with a screen reader.",
    "Scan the page again after each round of fixes to confirm the issues are resolved.",
    "Add accessibility checks to your release process so regressions are caught early.",
)


# ─────────────────────────────────────────────────────────────
# Document model
# ─────────────────────────────────────────────────────────────

@dataclass
class TextLine:
    text: str
    x: float
    y: float
    size: float = 12
    font: str = "Helvetica"
    color: str = "#111827"


@dataclass
class ImageBlock:
    kind: str  # "screenshot" | "logo"
    data: bytes
    x: float
    y: float
    width: float
    height: float


@dataclass
class ReportPage:
    lines: List[TextLine] = field(default_factory=list)
    images: List[ImageBlock] = field(default_factory=list)

    def texts(self) -> List[str]:
        return [line.text for line in self.lines]


@dataclass
class ReportDocument:
    title: str
    background: str = "#ffffff"
    pages: List[ReportPage] = field(default_factory=list)

    def texts(self) -> List[str]:
        return [text for page in self.pages for text in page.texts()]


@dataclass
class ReportBranding:
    company_name: Optional[str] = None
    company_logo: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website_url: Optional[str] = None
    colors: ReportColors = field(default_factory=lambda: DEFAULT_COLORS.model_copy())

    @classmethod
    def from_settings(cls, report_settings: Optional[ReportSettings]) -> "ReportBranding":
        if report_settings is None:
            return cls()
        return cls(
            company_name=report_settings.company_name,
            company_logo=report_settings.company_logo,
            contact_email=report_settings.contact_email,
            contact_phone=report_settings.contact_phone,
            website_url=report_settings.website_url,
            colors=ReportColors.model_validate(report_settings.colors or {}),
        )


def decode_image(data: Optional[str]) -> Optional[bytes]:
    """Decode a base64 image (bare or data: URI). Returns None when it is not a readable image."""
    if not data:
        return None
    if data.startswith("data:"):
        _, _, data = data.partition(",")
    try:
        raw = base64.b64decode(data, validate=True)
        ImageReader(BytesIO(raw)).getSize()
    except Exception as e:
        logger.warning(f"Ignoring unreadable image data: {e}")
        return None
    return raw


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def category_label(category: str) -> str:
    return category.replace("-", " ").title()


def group_by_category(rules: Sequence[RuleResult]) -> "OrderedDict[str, List[RuleResult]]":
    groups: "OrderedDict[str, List[RuleResult]]" = OrderedDict()
    for rule in rules:
        groups.setdefault(rule.category, []).append(rule)
    return groups


# ─────────────────────────────────────────────────────────────
# Layout
# ─────────────────────────────────────────────────────────────

class _Layout:
    """Top-down cursor over a list of pages."""

    def __init__(self, document: ReportDocument, colors: ReportColors):
        self.document = document
        self.colors = colors
        self.page: ReportPage
        self.y = TOP
        self.new_page()

    def new_page(self) -> None:
        self.page = ReportPage()
        self.document.pages.append(self.page)
        self.y = TOP

    def break_after(self, threshold: float) -> None:
        if self.y > threshold:
            self.new_page()

    def ensure(self, height: float) -> None:
        """Start a new page unless the next `height` points fit above the footer."""
        if self.y > TOP and self.y + height > CONTENT_BOTTOM:
            self.new_page()

    def gap(self, points: float) -> None:
        self.y += points

    def text(
        self,
        text: str,
        *,
        x: float = MARGIN_LEFT,
        size: float = 12,
        bold: bool = False,
        color: Optional[str] = None,
        after: float = 4,
    ) -> None:
        font = "Helvetica-Bold" if bold else "Helvetica"
        width = PAGE_WIDTH - MARGIN_LEFT - x
        leading = size * 1.25
        for chunk in simpleSplit(text, font, size, width) or [""]:
            self.ensure(size)
            self.page.lines.append(
                TextLine(chunk, x, self.y, size=size, font=font, color=color or self.colors.text_primary)
            )
            self.y += leading
        self.y += after

    def heading(self, text: str, size: float = 18, color: Optional[str] = None) -> None:
        self.text(text, size=size, bold=True, color=color or self.colors.primary, after=12)

    def muted(self, text: str, **kwargs) -> None:
        kwargs.setdefault("size", 10)
        self.text(text, color=self.colors.text_secondary, **kwargs)

    def image(self, kind: str, data: bytes, box) -> None:
        x, y, width, height = box
        self.page.images.append(ImageBlock(kind, data, x, y, width, height))

    def finish(self) -> None:
        total = len(self.document.pages)
        for number, page in enumerate(self.document.pages, start=1):
            page.lines.append(TextLine(FOOTER_TEXT, MARGIN_LEFT, FOOTER_Y, size=8, color="#6b7280"))
            page.lines.append(
                TextLine(f"Page {number} of {total}", PAGE_WIDTH - MARGIN_LEFT - 50, FOOTER_Y, size=8, color="#6b7280")
            )


# ─────────────────────────────────────────────────────────────
# Renderer
# ─────────────────────────────────────────────────────────────

class ReportRenderer:
    def __init__(self, reports_dir: str = settings.REPORTS_DIR):
        self.reports_dir = Path(reports_dir)

    @staticmethod
    def report_url(path: Path) -> str:
        return f"/reports/{path.name}"

    def new_report_path(self) -> Path:
        # epoch millis plus a random suffix keeps concurrent scans apart
        return self.reports_dir / f"scan_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.pdf"

    async def render(self, report_input: ReportInput, branding: Optional[ReportBranding] = None) -> Path:
        """Compose and write a report. Any failure is raised as ReportFailure."""
        try:
            path = await asyncio.to_thread(self._render, report_input, branding)
        except ReportFailure:
            raise
        except Exception as e:
            raise ReportFailure(f"Could not generate {report_input.kind} report: {e}", cause=e) from e

        logger.info(f"Generated {report_input.kind} report {path}")
        return path

    def _render(self, report_input: ReportInput, branding: Optional[ReportBranding]) -> Path:
        document = self.compose(report_input, branding)
        path = self.new_report_path()
        self.write(document, path)
        return path

    def compose(
        self,
        report_input: ReportInput,
        branding: Optional[ReportBranding] = None,
        generated_at: Optional[datetime] = None,
    ) -> ReportDocument:
        branding = branding or ReportBranding()
        generated_at = generated_at or datetime.now(timezone.utc)
        document = ReportDocument(title="Web Accessibility Scan Report", background=branding.colors.background)
        layout = _Layout(document, branding.colors)

        match report_input:
            case ErrorReport(url=url, message=message, scan_datetime=scan_datetime):
                self._cover(layout, branding, url, scan_datetime, generated_at)
                self._error_section(layout, message)
            case MissingReport(url=url):
                self._basic(layout, branding, url, generated_at)
            case FullReport(result=result):
                self._full(layout, branding, result, generated_at)
            case _:
                raise ReportFailure(f"Unsupported report input: {type(report_input).__name__}")

        layout.finish()
        return document

    def write(self, document: ReportDocument, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        pdf = canvas.Canvas(str(path), pagesize=letter)
        pdf.setTitle(document.title)
        pdf.setAuthor("AccessScan")

        for page in document.pages:
            if document.background.lower() != "#ffffff":
                pdf.setFillColor(HexColor(document.background))
                pdf.rect(0, 0, PAGE_WIDTH, PAGE_HEIGHT, stroke=0, fill=1)

            for block in page.images:
                pdf.drawImage(
                    ImageReader(BytesIO(block.data)),
                    block.x,
                    PAGE_HEIGHT - block.y - block.height,
                    width=block.width,
                    height=block.height,
                    preserveAspectRatio=True,
                    anchor="n",
                    mask="auto",
                )

            for line in page.lines:
                pdf.setFont(line.font, line.size)
                pdf.setFillColor(HexColor(line.color))
                # cursor tracks the top of the line, ReportLab draws on the baseline
                pdf.drawString(line.x, PAGE_HEIGHT - line.y - line.size, line.text)

            pdf.showPage()

        pdf.save()

    # ── sections ────────────────────────────────────────────

    def _cover(
        self,
        layout: _Layout,
        branding: ReportBranding,
        url: str,
        scan_datetime: datetime,
        generated_at: datetime,
    ) -> None:
        logo = decode_image(branding.company_logo)
        if logo is not None:
            layout.image("logo", logo, LOGO_BOX)

        layout.text(branding.company_name or "AccessScan", size=14, bold=True, color=branding.colors.accent)
        layout.gap(10)
        layout.text("Web Accessibility Scan Report", size=22, bold=True, color=branding.colors.primary, after=16)
        layout.text(f"Website: {url}", size=12)
        layout.text(f"Scan Date: {format_timestamp(scan_datetime)}", size=12)
        layout.muted(f"Report generated: {format_timestamp(generated_at)}")

        contact = [c for c in (branding.contact_email, branding.contact_phone, branding.website_url) if c]
        if contact:
            layout.muted("Contact: " + " | ".join(contact))

    def _error_section(self, layout: _Layout, message: str) -> None:
        layout.gap(20)
        layout.heading("Scan Error", size=16, color=IMPACT_COLORS[Impact.critical])
        layout.text(message)
        layout.gap(10)
        layout.text("This error may be due to network restrictions or website accessibility issues.")
        layout.text('For testing purposes, you can use "test" as the URL to scan sample pages.')

    def _basic(self, layout: _Layout, branding: ReportBranding, url: str, generated_at: datetime) -> None:
        layout.text(branding.company_name or "AccessScan", size=14, bold=True, color=branding.colors.accent)
        layout.gap(10)
        layout.text("Accessibility Scan Report", size=20, bold=True, color=branding.colors.primary, after=16)
        layout.text(f"URL: {url}")
        layout.muted(f"Report generated: {format_timestamp(generated_at)}")
        layout.gap(20)
        layout.heading("Report Incomplete", size=16)
        layout.text("This is a basic report. The scan results for this page could not be turned into a full report.")
        layout.text(
            'To see a complete sample report, scan one of the reserved test identifiers: '
            '"test", "test-sample" or "test-accessible".'
        )

    def _full(self, layout: _Layout, branding: ReportBranding, result: ScanResult, generated_at: datetime) -> None:
        self._cover(layout, branding, result.url, result.scan_datetime, generated_at)

        screenshot = decode_image(result.screenshot)
        if screenshot is not None:
            layout.image("screenshot", screenshot, SCREENSHOT_BOX)

        layout.new_page()
        self._executive_summary(layout, result)

        layout.new_page()
        self._findings(layout, result.violations)

        layout.new_page()
        self._passes(layout, result)
        self._manual_review(layout, result)

        layout.new_page()
        self._resources(layout)

        layout.new_page()
        self._next_steps(layout, result)

    def _executive_summary(self, layout: _Layout, result: ScanResult) -> None:
        layout.heading("Executive Summary")
        layout.text(f"Total Violations: {len(result.violations)}")
        layout.text(f"Tests Passed: {len(result.passes)}")
        layout.text(f"Needs Manual Review: {len(result.incomplete)}")
        layout.gap(10)

        layout.text("Violations by Severity", size=14, bold=True)
        for impact, count in result.count_by_impact().items():
            layout.text(f"{impact.value.title()}: {count}", x=MARGIN_LEFT + 20, color=IMPACT_COLORS[impact])
        layout.gap(10)

        level = compliance_level(result.violations)
        layout.text(f"Compliance Level: {level.value}", size=14, bold=True, color=LEVEL_COLORS[level])
        layout.muted(level.summary)
        layout.gap(10)

        layout.text("Key Recommendations", size=14, bold=True)
        if not result.violations:
            layout.text("No violations were found. Keep testing as the page changes.", x=MARGIN_LEFT + 20)
            return

        for category, rules in group_by_category(result.violations).items():
            label = category_label(category)
            layout.ensure(GROUP_MIN_HEIGHT)
            layout.text(f"{label} Issues: {len(rules)}", size=12, bold=True, x=MARGIN_LEFT + 20)
            for rule in rules[:MAX_GROUP_ISSUES]:
                layout.text(f"• {rule.title}", size=11, x=MARGIN_LEFT + 40, after=2)
            if len(rules) > MAX_GROUP_ISSUES:
                layout.muted(
                    f"...and {len(rules) - MAX_GROUP_ISSUES} more {label.lower()} issues.", x=MARGIN_LEFT + 40
                )
            layout.gap(4)

    def _findings(self, layout: _Layout, violations: Sequence[RuleResult]) -> None:
        layout.heading("Detailed Findings")
        if not violations:
            layout.text("No accessibility violations were detected on this page.")
            return

        number = 0
        for impact in IMPACT_ORDER:
            group = [v for v in violations if v.effective_impact is impact]
            if not group:
                continue

            layout.break_after(FINDINGS_BREAK_AT)
            layout.ensure(IMPACT_HEADING_HEIGHT + VIOLATION_MIN_HEIGHT)
            layout.text(f"{impact.value.title()} Impact Issues", size=16, bold=True, color=IMPACT_COLORS[impact], after=8)

            for violation in group:
                number += 1
                layout.break_after(FINDINGS_BREAK_AT)
                layout.ensure(VIOLATION_MIN_HEIGHT)
                self._violation(layout, number, violation)

    def _violation(self, layout: _Layout, number: int, violation: RuleResult) -> None:
        indent = MARGIN_LEFT + 20
        layout.text(f"{number}. {violation.title}", size=13, bold=True)
        layout.muted(f"Rule: {violation.id} | Impact: {violation.effective_impact.value}", x=indent)
        if violation.description:
            layout.text(violation.description, size=11, x=indent)
        if violation.wcag_tags:
            layout.muted("Standards: " + ", ".join(violation.wcag_tags), x=indent)

        if violation.nodes:
            layout.text(f"Affected Elements ({len(violation.nodes)}):", size=11, x=indent)
            for index, node in enumerate(violation.nodes[:MAX_EXAMPLES], start=1):
                html = node.html.strip()
                if len(html) > EXAMPLE_HTML_CHARS:
                    html = html[:EXAMPLE_HTML_CHARS] + "..."
                layout.text(f"Example {index}: {html or node.selector or '(no markup)'}", size=9, x=indent + 20, after=2)
            if len(violation.nodes) > MAX_EXAMPLES:
                layout.muted(f"...and {len(violation.nodes) - MAX_EXAMPLES} more", size=9, x=indent + 20)

        if violation.help_url:
            layout.text(f"How to fix: {violation.help_url}", size=10, x=indent, color=layout.colors.accent)
        layout.gap(12)

    def _passes(self, layout: _Layout, result: ScanResult) -> None:
        layout.heading("Passing Tests", color="#15803d")
        layout.text(f"{len(result.passes)} accessibility tests passed successfully.")
        layout.gap(6)

        for category, rules in group_by_category(result.passes).items():
            layout.break_after(PASSES_BREAK_AT)
            layout.text(f"{category_label(category)}: {len(rules)} passed", size=12, bold=True)
            for rule in rules:
                layout.break_after(PASSES_BREAK_AT)
                layout.muted(f"• {rule.title}", x=MARGIN_LEFT + 20, after=2)
            layout.gap(6)

    def _manual_review(self, layout: _Layout, result: ScanResult) -> None:
        layout.break_after(PASSES_BREAK_AT)
        layout.gap(10)
        layout.heading("Needs Manual Review", size=16)
        if not result.incomplete:
            layout.text("Every check could be decided automatically.")
            return

        layout.text(
            f"{len(result.incomplete)} checks could not be decided automatically. "
            "Review these elements by hand."
        )
        for item in result.incomplete:
            layout.break_after(PASSES_BREAK_AT)
            layout.text(f"• {item.title} ({len(item.nodes)} elements)", size=10, x=MARGIN_LEFT + 20, after=2)

    def _resources(self, layout: _Layout) -> None:
        layout.heading("Recommendations & Resources")
        layout.text(
            "Automated testing finds a share of accessibility barriers. Combine this report with "
            "manual testing and feedback from people who use assistive technology."
        )
        layout.gap(10)
        for name, link in RESOURCES:
            layout.text(name, size=12, bold=True)
            layout.text(link, size=10, x=MARGIN_LEFT + 20, color=layout.colors.accent, after=8)

    def _next_steps(self, layout: _Layout, result: ScanResult) -> None:
        layout.heading("Next Steps")
        for index, step in enumerate(NEXT_STEPS, start=1):
            layout.text(f"{index}. {step}", after=8)
        layout.gap(10)
        layout.muted(f"Scanned URL: {result.url}")
