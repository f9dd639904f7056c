"""Per-tool effectiveness metrics derived from an overlap result."""

from collections.abc import Mapping, Sequence

from concordia.comparison.overlap import OverlapResult
from concordia.models.finding import CanonicalFinding
from concordia.models.report import ToolMetrics


def compute_effectiveness(
    findings_by_tool: Mapping[str, Sequence[CanonicalFinding]],
    overlap: OverlapResult,
) -> dict[str, ToolMetrics]:
    """
    Compute detection metrics for each tool.

    ``total_detections`` counts raw findings, while ``unique_detections``
    and ``shared_detections`` count fingerprint groups. A tool that reports
    the same fingerprint twice therefore has
    unique + shared < total, and that gap is kept rather than hidden.

    Args:
        findings_by_tool: Mapping of tool name to its canonical findings
        overlap: Result of detect_overlap over the same mapping

    Returns:
        Mapping of tool name to ToolMetrics
    """
    metrics = {}

    for tool_name, findings in findings_by_tool.items():
        total = len(findings or [])
        unique = sum(1 for g in overlap.unique if g.detected_by == {tool_name})
        shared = sum(1 for g in overlap.overlap if tool_name in g.detected_by)

        metrics[tool_name] = ToolMetrics(
            total_detections=total,
            unique_detections=unique,
            shared_detections=shared,
            uniqueness_ratio=unique / total if total > 0 else 0.0,
        )

    return metrics
