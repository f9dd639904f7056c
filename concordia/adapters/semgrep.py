"""Adapter for Semgrep JSON output."""

from typing import Any

from concordia.adapters.base import AdapterParseError, BaseAdapter, as_int, as_list, rebase_path
from concordia.logging import get_logger
from concordia.models.enums import Confidence, ToolKind
from concordia.models.finding import CanonicalFinding, FindingLocation
from concordia.taxonomy.category import CategoryRule, classify_category
from concordia.taxonomy.severity import normalize_severity

logger = get_logger("adapters.semgrep")


class SemgrepAdapter(BaseAdapter):
    """Adapter for the flat ``results[]`` array of ``semgrep --json``."""

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.SEMGREP

    def _extract(
        self,
        raw_output: Any,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> list[CanonicalFinding]:
        """Parse Semgrep JSON output."""
        if raw_output is None:
            return []
        if not isinstance(raw_output, dict):
            raise AdapterParseError(
                f"Expected a JSON object, got {type(raw_output).__name__}", tool_name
            )

        results = raw_output.get("results") or []
        if not isinstance(results, list):
            raise AdapterParseError("'results' is not a list", tool_name)

        errors = raw_output.get("errors") or []
        if errors:
            logger.warning("Semgrep reported %d error(s) during the scan", len(errors))

        return self._parse_items(
            results,
            lambda result: self._parse_result(result, repository_path, tool_name, category_rules),
        )

    def _parse_result(
        self,
        result: dict,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> CanonicalFinding:
        """Parse a single Semgrep result."""
        check_id = result.get("check_id") or "unknown"
        start = result.get("start") or {}
        end = result.get("end") or {}

        extra = result.get("extra") or {}
        message = extra.get("message") or "Security issue detected"
        metadata = extra.get("metadata") or {}

        location = FindingLocation(
            path=rebase_path(result.get("path"), repository_path),
            start_line=as_int(start.get("line")),
            end_line=as_int(end.get("line")),
            start_column=as_int(start.get("col")),
            end_column=as_int(end.get("col")),
        )

        return CanonicalFinding(
            rule_id=check_id,
            severity=normalize_severity(ToolKind.SEMGREP, extra.get("severity")),
            category=classify_category(check_id, message, rules=category_rules),
            location=location,
            message=message,
            tool_name=tool_name,
            metadata={
                "rule_description": extra.get("message") or metadata.get("shortDescription"),
                "confidence": Confidence.from_string(metadata.get("confidence")).value,
                "cwe": as_list(metadata.get("cwe")),
                "owasp": as_list(metadata.get("owasp")),
                "references": as_list(metadata.get("references")),
                "code_snippet": extra.get("lines") or None,
                "fix": extra.get("fix"),
            },
        )
