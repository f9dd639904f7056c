"""Derived comparison views: overlap groups, tool metrics and the final report."""

from typing import Any

from pydantic import BaseModel, Field, computed_field, field_serializer

from concordia.models.finding import CanonicalFinding


class OverlapGroup(BaseModel):
    """All tools that reported one fingerprint, plus a representative finding."""

    fingerprint: str
    representative_finding: CanonicalFinding
    detected_by: set[str] = Field(default_factory=set)

    @property
    def is_shared(self) -> bool:
        """True when more than one distinct tool reported this fingerprint."""
        return len(self.detected_by) > 1

    @field_serializer("detected_by")
    def _serialize_detected_by(self, detected_by: set[str]) -> list[str]:
        return sorted(detected_by)


class ToolMetrics(BaseModel):
    """Effectiveness metrics for one tool within a comparison."""

    total_detections: int = 0
    unique_detections: int = 0
    shared_detections: int = 0
    uniqueness_ratio: float = 0.0  # Exact unique/total, 0..1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def uniqueness_rate(self) -> float:
        """Uniqueness as a percentage rounded for presentation."""
        return round(self.uniqueness_ratio * 100, 2)


class OverlapSummary(BaseModel):
    """Headline overlap counts."""

    common_findings: int = 0
    unique_findings: int = 0
    total_unique_issues: int = 0


class ComparisonReport(BaseModel):
    """
    Cross-tool comparison consumed by presentation layers.

    ``tools`` lists every tool that took part, failed ones included. Only
    tools that succeeded have entries in ``effectiveness``, ``by_severity``
    and ``by_category``, so index those maps by ``compared_tools()``.
    """

    repository: str | None = None
    tools: list[str] = Field(default_factory=list)
    failed_tools: dict[str, str] = Field(default_factory=dict)  # tool -> error
    overlap: OverlapSummary = Field(default_factory=OverlapSummary)
    effectiveness: dict[str, ToolMetrics] = Field(default_factory=dict)
    by_severity: dict[str, dict[str, int]] = Field(default_factory=dict)
    by_category: dict[str, dict[str, int]] = Field(default_factory=dict)
    detailed_overlap: list[OverlapGroup] = Field(default_factory=list)
    detailed_unique: list[OverlapGroup] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return self.model_dump(mode="json")

    def compared_tools(self) -> list[str]:
        """Tools whose findings were compared, in ``tools`` order."""
        return [tool for tool in self.tools if tool in self.effectiveness]
