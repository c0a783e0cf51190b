"""
Result types produced by the rule evaluator and consumed by the report renderer.

ScanResult lives only in memory: built once per pipeline run, rendered once,
then discarded.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class Impact(str, Enum):
    critical = "critical"
    serious = "serious"
    moderate = "moderate"
    minor = "minor"


# Presentation order of the detailed findings
IMPACT_ORDER: List[Impact] = [Impact.critical, Impact.serious, Impact.moderate, Impact.minor]

# axe rule result keys mapped onto typed fields; everything else lands in `extra`
_AXE_KNOWN_KEYS = {"id", "description", "help", "helpUrl", "impact", "tags", "nodes"}


class NodeResult(BaseModel):
    """One DOM node an axe rule looked at."""
    html: str = ""
    target: List[str] = Field(default_factory=list)
    failure_summary: Optional[str] = None

    @classmethod
    def from_axe(cls, raw: Dict[str, Any]) -> "NodeResult":
        target = raw.get("target") or []
        # shadow DOM targets come back as nested lists
        flat = [" ".join(t) if isinstance(t, list) else str(t) for t in target]
        return cls(html=raw.get("html") or "", target=flat, failure_summary=raw.get("failureSummary"))

    @property
    def selector(self) -> Optional[str]:
        return self.target[0] if self.target else None


class RuleResult(BaseModel):
    id: str
    description: str = ""
    help: str = ""
    help_url: Optional[str] = None
    impact: Optional[Impact] = None
    tags: List[str] = Field(default_factory=list)
    nodes: List[NodeResult] = Field(default_factory=list)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @property
    def effective_impact(self) -> Impact:
        """A rule without an impact is treated as critical."""
        return self.impact or Impact.critical

    @property
    def title(self) -> str:
        return self.help or self.description or self.id

    @property
    def category(self) -> str:
        """axe rule category taken from its `cat.*` tag."""
        for tag in self.tags:
            if tag.startswith("cat."):
                return tag[len("cat."):]
        return "other"

    @property
    def wcag_tags(self) -> List[str]:
        return [t for t in self.tags if t.startswith("wcag") or t == "best-practice"]

    @classmethod
    def from_axe(cls, raw: Dict[str, Any]) -> "RuleResult":
        impact = raw.get("impact")
        return cls(
            id=raw["id"],
            description=raw.get("description") or "",
            help=raw.get("help") or "",
            help_url=raw.get("helpUrl"),
            impact=Impact(impact) if impact else None,
            tags=list(raw.get("tags") or []),
            nodes=[NodeResult.from_axe(n) for n in raw.get("nodes") or []],
            extra={k: v for k, v in raw.items() if k not in _AXE_KNOWN_KEYS},
        )


class Violation(RuleResult):
    pass


class Pass(RuleResult):
    pass


class IncompleteItem(RuleResult):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanResult(BaseModel):
    url: str
    scan_datetime: datetime = Field(default_factory=utcnow)
    violations: List[Violation] = Field(default_factory=list)
    passes: List[Pass] = Field(default_factory=list)
    incomplete: List[IncompleteItem] = Field(default_factory=list)
    screenshot: Optional[str] = None  # base64 PNG
    error: Optional[str] = None

    @classmethod
    def from_axe(cls, url: str, raw: Dict[str, Any]) -> "ScanResult":
        return cls(
            url=url,
            violations=[Violation.from_axe(v) for v in raw.get("violations") or []],
            passes=[Pass.from_axe(p) for p in raw.get("passes") or []],
            incomplete=[IncompleteItem.from_axe(i) for i in raw.get("incomplete") or []],
        )

    def count_by_impact(self) -> Dict[Impact, int]:
        counts = {impact: 0 for impact in IMPACT_ORDER}
        for violation in self.violations:
            counts[violation.effective_impact] += 1
        return counts


# ─────────────────────────────────────────────────────────────
# Report input: exactly one of three render paths
# ─────────────────────────────────────────────────────────────

class ErrorReport(BaseModel):
    """The pipeline ran but could not evaluate the page."""
    kind: Literal["error"] = "error"
    url: str
    message: str
    scan_datetime: datetime = Field(default_factory=utcnow)


class MissingReport(BaseModel):
    """No scan result at all; render the basic, incomplete report."""
    kind: Literal["missing"] = "missing"
    url: str


class FullReport(BaseModel):
    kind: Literal["result"] = "result"
    result: ScanResult


ReportInput = Union[ErrorReport, MissingReport, FullReport]


def report_input_for(result: ScanResult) -> ReportInput:
    if result.error:
        return ErrorReport(url=result.url, message=result.error, scan_datetime=result.scan_datetime)
    return FullReport(result=result)
