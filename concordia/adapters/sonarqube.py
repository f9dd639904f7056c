"""Adapter for SonarQube / SonarCloud issue search results."""

from typing import Any

from concordia.adapters.base import AdapterParseError, BaseAdapter, as_int, rebase_path
from concordia.models.enums import Confidence, ToolKind
from concordia.models.finding import CanonicalFinding, FindingLocation
from concordia.taxonomy.category import CategoryRule, classify_category
from concordia.taxonomy.severity import normalize_severity


class SonarQubeAdapter(BaseAdapter):
    """Adapter for the ``issues[]`` array returned by ``/api/issues/search``."""

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.SONARQUBE

    def _extract(
        self,
        raw_output: Any,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> list[CanonicalFinding]:
        """Parse a SonarQube issue search response."""
        if raw_output is None:
            return []
        if not isinstance(raw_output, dict):
            raise AdapterParseError(
                f"Expected a JSON object with 'issues', got {type(raw_output).__name__}",
                tool_name,
            )

        issues = raw_output.get("issues") or []
        if not isinstance(issues, list):
            raise AdapterParseError("'issues' is not a list", tool_name)

        return self._parse_items(
            issues,
            lambda issue: self._parse_issue(issue, repository_path, tool_name, category_rules),
        )

    def _parse_issue(
        self,
        issue: dict,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> CanonicalFinding:
        """Parse a single SonarQube issue."""
        rule = issue.get("rule") or "unknown"
        message = issue.get("message") or "Security issue detected"
        text_range = issue.get("textRange") or {}

        # Components look like "project-key:src/app.js"
        component = issue.get("component") or ""
        path = component.rsplit(":", 1)[-1]

        start_line = as_int(issue.get("line")) or as_int(text_range.get("startLine"))

        return CanonicalFinding(
            rule_id=rule,
            severity=normalize_severity(ToolKind.SONARQUBE, issue.get("severity")),
            category=classify_category(rule, message, rules=category_rules),
            location=FindingLocation(
                path=rebase_path(path, repository_path),
                start_line=start_line,
                end_line=as_int(text_range.get("endLine")) or start_line,
                start_column=as_int(text_range.get("startOffset")),
                end_column=as_int(text_range.get("endOffset")),
            ),
            message=message,
            tool_name=tool_name,
            metadata={
                "rule_description": message,
                "confidence": (
                    Confidence.HIGH.value
                    if issue.get("type") == "VULNERABILITY"
                    else Confidence.MEDIUM.value
                ),
                "code_snippet": None,
                "effort": issue.get("effort"),
                "status": issue.get("status") or "OPEN",
            },
        )
