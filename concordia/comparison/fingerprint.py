"""Fingerprint generation for cross-tool finding identity."""

from concordia.models.finding import CanonicalFinding

FINGERPRINT_SEPARATOR = "::"

# Stands in for a missing start line so it cannot collide with an empty rule id
NULL_LINE_SENTINEL = "<no-line>"


def generate_fingerprint(finding: CanonicalFinding) -> str:
    """
    Generate the identity key for a finding.

    The fingerprint is the exact join of:
    - rule_id
    - location.path (repository-relative)
    - location.start_line
    - category

    It is a structural key rather than a hash, so it is stable across
    processes and equal for the same vulnerability reported by different
    tools. Message text, severity and metadata do not take part.

    Known limitation: two tools anchoring the same issue on different lines
    (an off-by-one between AST anchor points, say) get different
    fingerprints and are both counted as unique.
    """
    rule_id, path, start_line, category = finding.identity()
    components = [
        rule_id,
        path,
        NULL_LINE_SENTINEL if start_line is None else str(start_line),
        category,
    ]
    return FINGERPRINT_SEPARATOR.join(components)
