"""Per-tool mapping from native severity vocabularies to the canonical scale."""

from concordia.logging import get_logger
from concordia.models.enums import Severity, ToolKind

logger = get_logger("taxonomy.severity")

DEFAULT_SEVERITY = Severity.MEDIUM

# Keys are lowercase; lookups lowercase the native token first.
SEVERITY_TABLES: dict[ToolKind, dict[str, Severity]] = {
    ToolKind.SEMGREP: {
        "error": Severity.CRITICAL,
        "warning": Severity.HIGH,
        "info": Severity.MEDIUM,
    },
    ToolKind.SNYK: {
        "error": Severity.HIGH,
        "warning": Severity.MEDIUM,
        "note": Severity.LOW,
        "high": Severity.HIGH,
        "medium": Severity.MEDIUM,
        "low": Severity.LOW,
    },
    ToolKind.ESLINT: {
        "2": Severity.HIGH,
        "error": Severity.HIGH,
        "1": Severity.MEDIUM,
        "warn": Severity.MEDIUM,
        "warning": Severity.MEDIUM,
    },
    ToolKind.SONARQUBE: {
        "blocker": Severity.CRITICAL,
        "critical": Severity.CRITICAL,
        "major": Severity.HIGH,
        "minor": Severity.MEDIUM,
        "info": Severity.LOW,
    },
}

# ESLint rules that are always high regardless of configured level
ESLINT_HIGH_RULES = frozenset(
    {
        "security/detect-eval-with-expression",
        "security/detect-unsafe-regex",
        "security/detect-buffer-noassert",
        "security/detect-pseudoRandomBytes",
        "no-unsanitized/method",
        "no-unsanitized/property",
    }
)


def normalize_severity(tool: ToolKind | str | None, token) -> Severity:
    """
    Map a tool's native severity token to the canonical scale.

    Lookup is case-insensitive. Unknown tools, unknown tokens and missing
    tokens all resolve to MEDIUM. Never raises.

    Args:
        tool: ToolKind or tool display name ("Semgrep", "Snyk Code", ...)
        token: Native severity token as found in the tool output

    Returns:
        Canonical Severity
    """
    kind = ToolKind.from_tool_name(tool)
    if kind is None:
        logger.debug("No severity table for tool %r, defaulting to %s", tool, DEFAULT_SEVERITY.value)
        return DEFAULT_SEVERITY

    if isinstance(token, bool) or not isinstance(token, (str, int)):
        return DEFAULT_SEVERITY

    key = str(token).strip().lower()
    severity = SEVERITY_TABLES[kind].get(key)
    if severity is None:
        logger.debug(
            "Unknown %s severity %r, defaulting to %s", kind.value, token, DEFAULT_SEVERITY.value
        )
        return DEFAULT_SEVERITY
    return severity


def eslint_severity(level, rule_id: str | None) -> Severity:
    """ESLint severity, escalating known dangerous rules to HIGH."""
    if rule_id in ESLINT_HIGH_RULES:
        return Severity.HIGH
    return normalize_severity(ToolKind.ESLINT, level)
