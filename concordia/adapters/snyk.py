"""Adapter for Snyk Code SARIF output."""

from typing import Any

from concordia.adapters.base import AdapterParseError, BaseAdapter, as_int, as_list, rebase_path
from concordia.models.enums import Confidence, ToolKind
from concordia.models.finding import CanonicalFinding, FindingLocation
from concordia.taxonomy.category import CategoryRule, classify_category
from concordia.taxonomy.severity import normalize_severity


class SnykAdapter(BaseAdapter):
    """
    Adapter for ``snyk code test --json``, which emits SARIF.

    Reads ``runs[].results[]``; rule metadata from ``tool.driver.rules`` is
    used for descriptions and CWE tags when the result itself lacks them.
    """

    @property
    def tool_kind(self) -> ToolKind:
        return ToolKind.SNYK

    def _extract(
        self,
        raw_output: Any,
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> list[CanonicalFinding]:
        """Parse every run of a SARIF document."""
        if raw_output is None:
            return []
        if not isinstance(raw_output, dict):
            raise AdapterParseError(
                f"Expected a SARIF object, got {type(raw_output).__name__}", tool_name
            )

        runs = raw_output.get("runs") or []
        if not isinstance(runs, list):
            raise AdapterParseError("'runs' is not a list", tool_name)

        findings = []
        for run in runs:
            if not isinstance(run, dict):
                raise AdapterParseError("SARIF run is not an object", tool_name)
            rules = self._index_rules(run)
            results = run.get("results") or []
            findings.extend(
                self._parse_items(
                    results,
                    lambda result: self._parse_result(
                        result, rules, repository_path, tool_name, category_rules
                    ),
                )
            )
        return findings

    def _index_rules(self, run: dict) -> dict[str, dict]:
        """Map rule id -> SARIF reportingDescriptor for one run."""
        driver = (run.get("tool") or {}).get("driver") or {}
        rules = {}
        for rule in driver.get("rules") or []:
            if isinstance(rule, dict) and rule.get("id"):
                rules[rule["id"]] = rule
        return rules

    def _parse_result(
        self,
        result: dict,
        rules: dict[str, dict],
        repository_path: str,
        tool_name: str,
        category_rules: tuple[CategoryRule, ...] | None,
    ) -> CanonicalFinding:
        """Parse a single SARIF result."""
        rule_id = result.get("ruleId") or "unknown"
        message = (result.get("message") or {}).get("text") or "Security issue detected"
        level = result.get("level") or "warning"

        locations = result.get("locations") or []
        physical = (locations[0].get("physicalLocation") or {}) if locations else {}
        artifact = physical.get("artifactLocation") or {}
        region = physical.get("region") or {}

        start_line = as_int(region.get("startLine"))
        location = FindingLocation(
            path=rebase_path(artifact.get("uri"), repository_path),
            start_line=start_line,
            end_line=as_int(region.get("endLine")) or start_line,
            start_column=as_int(region.get("startColumn")),
            end_column=as_int(region.get("endColumn")),
        )

        rule = rules.get(rule_id, {})
        properties = result.get("properties") or {}
        rule_properties = rule.get("properties") or {}
        short_description = (rule.get("shortDescription") or {}).get("text")

        return CanonicalFinding(
            rule_id=rule_id,
            severity=normalize_severity(ToolKind.SNYK, level),
            category=classify_category(rule_id, message, rules=category_rules),
            location=location,
            message=message,
            tool_name=tool_name,
            metadata={
                "rule_description": short_description or message,
                "confidence": Confidence.HIGH.value,
                "cwe": as_list(properties.get("cwe") or rule_properties.get("cwe")),
                "references": as_list(properties.get("references")),
                "code_snippet": (region.get("snippet") or {}).get("text"),
                "priority_score": properties.get("priorityScore"),
            },
        )
