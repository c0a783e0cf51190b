"""
Failure taxonomy of the scan pipeline.

FetchFailure, RenderFailure and EvaluationFailure are absorbed by the orchestrator
and turned into a degraded ScanResult. ScreenshotFailure never leaves the
screenshot service. ReportFailure triggers one retry in basic mode.
"""
from typing import Optional


class ScanPipelineError(Exception):
    """Base class for every pipeline step failure."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class FetchFailure(ScanPipelineError):
    """All fetch attempts for a page were exhausted."""


class RenderFailure(ScanPipelineError):
    """Markup (or a fixture file) could not be turned into a DOM tree."""


class EvaluationFailure(ScanPipelineError):
    """The accessibility ruleset could not be executed."""


class ScreenshotFailure(ScanPipelineError):
    """Browser screenshot capture failed. Always swallowed to None."""


class ReportFailure(ScanPipelineError):
    """The PDF report could not be produced."""
