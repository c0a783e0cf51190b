import pytest

from app.features.reports.services.compliance import ComplianceLevel, compliance_level
from app.features.scan.schemas.results import Impact, Violation


def violations(**counts):
    result = []
    for impact, count in counts.items():
        level = None if impact == "none" else Impact(impact)
        result.extend(Violation(id=f"{impact}-{i}", impact=level) for i in range(count))
    return result


@pytest.mark.parametrize(
    "counts, expected",
    [
        ({"minor": 12}, ComplianceLevel.LOW),
        ({"moderate": 1, "minor": 2}, ComplianceLevel.HIGH),
        ({"moderate": 6}, ComplianceLevel.MEDIUM),
        ({"critical": 1}, ComplianceLevel.LOW),
        ({"serious": 1}, ComplianceLevel.LOW),
        ({"none": 1}, ComplianceLevel.LOW),
        ({"minor": 6}, ComplianceLevel.MEDIUM),
        ({"minor": 11}, ComplianceLevel.LOW),
        ({"moderate": 5}, ComplianceLevel.HIGH),
        ({}, ComplianceLevel.HIGH),
    ],
)
def test_compliance_level(counts, expected):
    assert compliance_level(violations(**counts)) is expected


def test_low_is_the_worst_level():
    assert ComplianceLevel.LOW.value == "Low"
    assert "barriers" in ComplianceLevel.LOW.summary
