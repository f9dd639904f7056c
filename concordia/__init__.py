"""Concordia - Compare and reconcile findings from static-analysis tools."""

__version__ = "0.1.0"
__title__ = "Concordia"

# Public API exports
from concordia.adapters import (
    AdapterParseError,
    AdapterRegistry,
    BaseAdapter,
    ESLintAdapter,
    SemgrepAdapter,
    SnykAdapter,
    SonarQubeAdapter,
)
from concordia.comparison import (
    OverlapResult,
    build_report,
    compare_findings,
    compare_scan_outputs,
    compute_effectiveness,
    detect_overlap,
    generate_fingerprint,
)
from concordia.models import (
    AdapterResult,
    CanonicalFinding,
    Category,
    ComparisonReport,
    FindingLocation,
    OverlapGroup,
    ScanOutput,
    Severity,
    ToolKind,
    ToolMetrics,
)
from concordia.taxonomy import classify_category, normalize_severity

__all__ = [
    # Version info
    "__version__",
    "__title__",
    # Models
    "CanonicalFinding",
    "FindingLocation",
    "OverlapGroup",
    "ToolMetrics",
    "ComparisonReport",
    "ScanOutput",
    "AdapterResult",
    "Severity",
    "Category",
    "ToolKind",
    # Taxonomy
    "normalize_severity",
    "classify_category",
    # Adapters
    "BaseAdapter",
    "AdapterParseError",
    "AdapterRegistry",
    "SemgrepAdapter",
    "SnykAdapter",
    "ESLintAdapter",
    "SonarQubeAdapter",
    # Comparison
    "generate_fingerprint",
    "detect_overlap",
    "OverlapResult",
    "compute_effectiveness",
    "build_report",
    "compare_findings",
    "compare_scan_outputs",
]
