"""Assembly of the cross-tool comparison report."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from concordia.adapters import AdapterRegistry, register_default_adapters
from concordia.comparison.effectiveness import compute_effectiveness
from concordia.comparison.overlap import OverlapResult, detect_overlap
from concordia.logging import get_logger
from concordia.models.enums import Category, Severity
from concordia.models.finding import CanonicalFinding
from concordia.models.report import ComparisonReport, OverlapSummary, ToolMetrics
from concordia.models.scan import ScanOutput
from concordia.taxonomy.category import CategoryRule

logger = get_logger("comparison.report")


def severity_breakdown(findings: Sequence[CanonicalFinding]) -> dict[str, int]:
    """Count findings at each canonical severity; every level is present."""
    counts = {severity.value: 0 for severity in Severity}
    for finding in findings:
        counts[Severity(finding.severity).value] += 1
    return counts


def category_breakdown(findings: Sequence[CanonicalFinding]) -> dict[str, int]:
    """Count findings per category; every category is present."""
    counts = {category.value: 0 for category in Category}
    for finding in findings:
        counts[Category(finding.category).value] += 1
    return counts


def build_report(
    tools: Sequence[str],
    overlap: OverlapResult,
    effectiveness: Mapping[str, ToolMetrics],
    findings_by_tool: Mapping[str, Sequence[CanonicalFinding]],
    repository: str | None = None,
    failed_tools: Mapping[str, str] | None = None,
) -> ComparisonReport:
    """
    Shape already-computed comparison data into a ComparisonReport.

    Args:
        tools: Every tool that took part, including ones that failed
        overlap: Result of detect_overlap
        effectiveness: Result of compute_effectiveness
        findings_by_tool: Canonical findings of the tools that succeeded
        repository: Optional repository name
        failed_tools: Tool name -> error for tools whose scan or parse failed

    Returns:
        ComparisonReport
    """
    return ComparisonReport(
        repository=repository,
        tools=list(tools),
        failed_tools=dict(failed_tools or {}),
        overlap=OverlapSummary(
            common_findings=len(overlap.overlap),
            unique_findings=len(overlap.unique),
            total_unique_issues=overlap.total,
        ),
        effectiveness=dict(effectiveness),
        by_severity={
            tool: severity_breakdown(findings or []) for tool, findings in findings_by_tool.items()
        },
        by_category={
            tool: category_breakdown(findings or []) for tool, findings in findings_by_tool.items()
        },
        detailed_overlap=list(overlap.overlap),
        detailed_unique=list(overlap.unique),
    )


def compare_findings(
    findings_by_tool: Mapping[str, Sequence[CanonicalFinding]],
    repository: str | None = None,
    failed_tools: Mapping[str, str] | None = None,
) -> ComparisonReport:
    """
    Convenience function running overlap, effectiveness and report assembly.

    An empty mapping is a valid input and yields an all-zero report.
    """
    failed_tools = dict(failed_tools or {})
    tools = list(findings_by_tool)
    tools.extend(t for t in failed_tools if t not in findings_by_tool)

    overlap = detect_overlap(findings_by_tool)
    effectiveness = compute_effectiveness(findings_by_tool, overlap)
    return build_report(
        tools,
        overlap,
        effectiveness,
        findings_by_tool,
        repository=repository,
        failed_tools=failed_tools,
    )


def compare_scan_outputs(
    scan_outputs: Iterable[ScanOutput | Mapping[str, Any]],
    category_rules: tuple[CategoryRule, ...] | None = None,
) -> ComparisonReport:
    """
    Adapt a batch of scan outputs and compare them.

    Must only be called once every scan in the batch has finished. Tools
    whose scan or parse failed are left out of the comparison inputs but
    listed in ``tools`` and ``failed_tools``.
    """
    register_default_adapters()
    results = AdapterRegistry.adapt_all(scan_outputs, category_rules=category_rules)

    findings_by_tool: dict[str, list[CanonicalFinding]] = {}
    failed_tools: dict[str, str] = {}
    repositories = set()

    for result in results:
        if result.repository:
            repositories.add(result.repository)
        if result.success:
            findings_by_tool.setdefault(result.tool_name, []).extend(result.findings)
        else:
            failed_tools[result.tool_name] = result.error or "unknown error"

    for tool_name, error in failed_tools.items():
        logger.warning("Excluding %s from comparison: %s", tool_name, error)

    repository = repositories.pop() if len(repositories) == 1 else None
    return compare_findings(findings_by_tool, repository=repository, failed_tools=failed_tools)
