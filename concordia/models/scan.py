"""Scan records passed into adapters and the results they return."""

from datetime import datetime
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from concordia.models.enums import Severity
from concordia.models.finding import CanonicalFinding


class ScanOutput(BaseModel):
    """Output of one external scanner run against one repository."""

    model_config = ConfigDict(extra="ignore")

    tool_name: str = ""
    tool_version: str | None = None
    repository: str | None = None
    repository_path: str = ""
    scan_date: datetime | None = None
    scan_duration_ms: int | None = None
    success: bool = True
    error: str | None = None
    raw_output: Any = None

    @property
    def repository_name(self) -> str | None:
        """Repository name, falling back to the last component of the scan root."""
        if self.repository:
            return self.repository
        name = PurePath(self.repository_path.replace("\\", "/")).name
        return name or None


class AdapterResult(BaseModel):
    """Canonical findings produced by an adapter for one scan output."""

    tool_name: str
    repository: str | None = None
    findings: list[CanonicalFinding] = Field(default_factory=list)
    success: bool = True
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stats(self) -> dict[str, Any]:
        """Per-scan counts by severity and category."""
        by_severity = {severity.value: 0 for severity in Severity}
        by_category: dict[str, int] = {}
        for finding in self.findings:
            by_severity[finding.severity] += 1
            by_category[finding.category] = by_category.get(finding.category, 0) + 1
        return {
            "total_findings": len(self.findings),
            "by_severity": by_severity,
            "by_category": by_category,
        }
