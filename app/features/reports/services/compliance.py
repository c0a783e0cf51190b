"""
Compliance level of a scanned page.

LOW is the worst level (highest legal exposure), HIGH the best.
"""
import enum
from typing import Iterable

from app.features.scan.schemas.results import Impact, RuleResult


class ComplianceLevel(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def summary(self) -> str:
        return _SUMMARIES[self]


_SUMMARIES = {
    ComplianceLevel.LOW: "Critical or serious barriers found. Users with disabilities are likely blocked.",
    ComplianceLevel.MEDIUM: "Several moderate issues found. Some users will struggle with this page.",
    ComplianceLevel.HIGH: "Few issues found. Keep testing manually to confirm full conformance.",
}


def compliance_level(violations: Iterable[RuleResult]) -> ComplianceLevel:
    """
    Checked in order, first match wins:
      LOW     any critical/serious violation, or more than 10 violations
      MEDIUM  more than 5 moderate violations, or more than 5 violations
      HIGH    everything else
    A violation without an impact counts as critical.
    """
    impacts = [v.effective_impact for v in violations]
    total = len(impacts)
    severe = sum(1 for i in impacts if i in (Impact.critical, Impact.serious))
    moderate = sum(1 for i in impacts if i is Impact.moderate)

    if severe > 0 or total > 10:
        return ComplianceLevel.LOW
    if moderate > 5 or total > 5:
        return ComplianceLevel.MEDIUM
    return ComplianceLevel.HIGH
