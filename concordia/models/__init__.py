"""Data models for canonical findings and comparison results."""

from concordia.models.enums import Category, Confidence, Severity, ToolKind
from concordia.models.finding import CanonicalFinding, FindingLocation
from concordia.models.report import ComparisonReport, OverlapGroup, OverlapSummary, ToolMetrics
from concordia.models.scan import AdapterResult, ScanOutput

__all__ = [
    "Severity",
    "Category",
    "Confidence",
    "ToolKind",
    "CanonicalFinding",
    "FindingLocation",
    "OverlapGroup",
    "OverlapSummary",
    "ToolMetrics",
    "ComparisonReport",
    "ScanOutput",
    "AdapterResult",
]
