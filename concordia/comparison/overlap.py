"""Overlap detection: group findings from all tools by fingerprint."""

import json
from collections.abc import Iterable, Mapping

from concordia.comparison.fingerprint import generate_fingerprint
from concordia.logging import get_logger
from concordia.models.finding import CanonicalFinding
from concordia.models.report import OverlapGroup

logger = get_logger("comparison.overlap")


class OverlapResult:
    """Partition of fingerprint groups into shared and unique."""

    def __init__(self, overlap: list[OverlapGroup], unique: list[OverlapGroup]):
        self.overlap = overlap
        self.unique = unique

    @property
    def total(self) -> int:
        """Number of distinct fingerprints across all tools."""
        return len(self.overlap) + len(self.unique)

    def all_groups(self) -> list[OverlapGroup]:
        """Return every group, sorted by fingerprint."""
        return sorted(self.overlap + self.unique, key=lambda g: g.fingerprint)

    def groups_for_tool(self, tool_name: str) -> list[OverlapGroup]:
        """Return the groups a given tool contributed to."""
        return [g for g in self.all_groups() if tool_name in g.detected_by]


def _representative_key(tool_name: str, finding: CanonicalFinding) -> tuple[str, str]:
    # Full serialized form breaks ties so the choice never depends on input order
    return tool_name, json.dumps(finding.model_dump(mode="json"), sort_keys=True, default=str)


def detect_overlap(
    findings_by_tool: Mapping[str, Iterable[CanonicalFinding]],
) -> OverlapResult:
    """
    Group every tool's findings by fingerprint.

    Each fingerprint becomes one OverlapGroup whose ``detected_by`` is the
    set of tools that reported it; a tool repeating a fingerprint counts
    once. Groups with more than one tool are shared, the rest unique.

    The result does not depend on the iteration order of tools or of each
    tool's findings: groups are sorted by fingerprint, and the
    representative is the contributor with the smallest (tool, content)
    key rather than whichever was seen first.

    Args:
        findings_by_tool: Mapping of tool name to its canonical findings

    Returns:
        OverlapResult with shared groups, unique groups and the total
    """
    representatives: dict[str, tuple[tuple[str, str], CanonicalFinding]] = {}
    detected_by: dict[str, set[str]] = {}

    for tool_name, findings in findings_by_tool.items():
        for finding in findings or []:
            fingerprint = generate_fingerprint(finding)
            key = _representative_key(tool_name, finding)

            current = representatives.get(fingerprint)
            if current is None or key < current[0]:
                representatives[fingerprint] = (key, finding)

            detected_by.setdefault(fingerprint, set()).add(tool_name)

    overlap = []
    unique = []
    for fingerprint in sorted(representatives):
        group = OverlapGroup(
            fingerprint=fingerprint,
            representative_finding=representatives[fingerprint][1],
            detected_by=set(detected_by[fingerprint]),
        )
        if group.is_shared:
            overlap.append(group)
        else:
            unique.append(group)

    logger.debug(
        "Overlap across %d tool(s): %d shared, %d unique",
        len(findings_by_tool), len(overlap), len(unique),
    )
    return OverlapResult(overlap=overlap, unique=unique)
